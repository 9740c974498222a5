"""Tests for row normalization."""

import math

import pytest

from indicators.rows import NormalizedRow, RawRow, latest_year, normalize, round_half_up


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("12.345", 12.3),
            ("12.35", 12.4),
            ("-12.35", -12.4),
            ("2.675", 2.7),
            ("0.05", 0.1),
            (12.35, 12.4),
            (7, 7.0),
        ],
    )
    def test_ties_round_away_from_zero(self, value, expected):
        assert round_half_up(value, 1) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "", "   ", "abc", "nan", "NaN", "inf", "-Infinity", "1e400", "1e1000000", "1E+999999999999", True],
    )
    def test_invalid_is_none(self, value):
        assert round_half_up(value, 1) is None


class TestRawRow:
    def test_soda_columns(self, sample_raw_rows):
        raw = RawRow.from_record(sample_raw_rows[0])
        assert raw.location == "United States"
        assert raw.location_abbreviation == "US"
        assert raw.breakout_id == "SEX1"
        assert raw.value == "10.1"
        assert raw.value_unit == "%"

    def test_camel_case_columns(self):
        raw = RawRow.from_record(
            {
                "location": "Texas",
                "locationAbbreviation": "TX",
                "breakoutId": "AGE01",
                "lowConfidenceLimit": "1.0",
                "valueUnit": "%",
            }
        )
        assert raw.location_abbreviation == "TX"
        assert raw.breakout_id == "AGE01"
        assert raw.low_confidence_limit == "1.0"
        assert raw.value_unit == "%"

    def test_unknown_keys_ignored(self):
        raw = RawRow.from_record({"year": "2014", "geolocation": {"lat": 1}, ":id": "row-1"})
        assert raw.year == "2014"
        assert not hasattr(raw, "geolocation")


class TestNormalize:
    def test_types(self, sample_raw_rows):
        rows = normalize(sample_raw_rows)
        assert len(rows) == len(sample_raw_rows)
        first = rows[0]
        assert isinstance(first, NormalizedRow)
        assert first.year == 2013
        assert first.value == 10.1
        assert first.low_confidence_limit == 9.5
        assert first.high_confidence_limit == 10.7
        assert first.value_type == "Crude Prevalence"

    def test_empty_value_becomes_none(self, sample_raw_rows):
        rows = normalize(sample_raw_rows)
        tx_male_2014 = [r for r in rows if r.location == "Texas" and r.breakout == "Male" and r.year == 2014]
        assert tx_male_2014[0].value is None
        assert tx_male_2014[0].low_confidence_limit is None

    def test_missing_fields(self):
        rows = normalize([{"year": "2014", "locationdesc": "Ohio"}])
        assert rows[0].value is None
        assert rows[0].high_confidence_limit is None
        assert rows[0].breakout == ""
        assert rows[0].value_unit == ""

    def test_zero_is_kept(self, soda_row):
        rows = normalize([soda_row("Ohio", "OH", "Overall", "OVR", 2014, "0", "0.0", "0")])
        assert rows[0].value == 0.0
        assert rows[0].low_confidence_limit == 0.0

    def test_invalid_year_dropped_and_order_kept(self, soda_row):
        raw = [
            soda_row("A", "AA", "Overall", "OVR", 2012, "1"),
            soda_row("B", "BB", "Overall", "OVR", "", "2"),
            soda_row("C", "CC", "Overall", "OVR", "20x4", "3"),
            soda_row("D", "DD", "Overall", "OVR", 2011, "4"),
        ]
        rows = normalize(raw)
        assert [r.location for r in rows] == ["A", "D"]

    @pytest.mark.parametrize(
        "text",
        ["", " ", "n/a", "~", "nan", "inf", "12,3", "1e999", "1e1000000", "-1E+999999999999", "1e-1000000"],
    )
    def test_never_nan(self, soda_row, text):
        row = normalize([soda_row("A", "AA", "Overall", "OVR", 2014, text, text, text)])[0]
        for value in (row.value, row.low_confidence_limit, row.high_confidence_limit):
            assert value is None or math.isfinite(value)

    @pytest.mark.parametrize("text", ["1e1000000", "1E+999999999999", "-1E+999999999999"])
    def test_out_of_range_exponent_is_none(self, text):
        rows = normalize([{"year": "2014", "value": text}])
        assert rows[0].value is None

    def test_tiny_exponent_rounds_to_zero(self):
        rows = normalize([{"year": "2014", "value": "1e-1000000"}])
        assert rows[0].value == 0.0

    def test_rounding_on_normalize(self, soda_row):
        rows = normalize(
            [
                soda_row("A", "AA", "Overall", "OVR", 2014, "12.345"),
                soda_row("A", "AA", "Overall", "OVR", 2015, "12.35"),
            ]
        )
        assert [r.value for r in rows] == [12.3, 12.4]

    def test_idempotent(self, sample_raw_rows):
        once = normalize(sample_raw_rows)
        assert normalize(once) == once

    def test_accepts_raw_row_instances(self):
        rows = normalize([RawRow(location="Utah", year="2014", value="3.25")])
        assert rows[0].value == 3.3

    def test_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            normalize(["2014,Utah"])


def test_latest_year(sample_raw_rows):
    assert latest_year(normalize(sample_raw_rows)) == 2014
    assert latest_year([]) is None
