"""Tests for choropleth map values."""

from indicators.choropleth import build_map_values
from indicators.rows import normalize


def test_states_only_at_latest_year(sample_raw_rows, soda_row):
    raw = sample_raw_rows + [soda_row("Ohio", "OH", "Male", "SEX1", 2014, "8.2", "7.0", "9.4")]
    payload = build_map_values(normalize(raw))
    assert payload["year"] == 2014
    assert list(payload["locations"]) == ["OH", "TX"]
    # first row per state at the year wins
    assert payload["locations"]["OH"] == {"location": "Ohio", "value": 8.2, "high": 9.4, "low": 7.0}
    assert payload["locations"]["TX"]["value"] is None
    assert payload["domain"] == [8.2, 8.2]


def test_explicit_year(sample_raw_rows):
    payload = build_map_values(normalize(sample_raw_rows), 2013)
    assert payload["locations"]["TX"]["value"] == 11.2
    assert payload["domain"] == [11.2, 11.2]


def test_empty():
    assert build_map_values([]) == {"year": None, "locations": {}, "domain": None}
