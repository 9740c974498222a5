"""Pytest configuration and shared fixtures."""

from typing import Any, Callable, Dict, List

import pytest

from indicators.rows import NormalizedRow


def _soda_row(
    location: str,
    abbr: str,
    breakout: str,
    breakout_id: str,
    year: Any,
    value: Any,
    low: Any = "",
    high: Any = "",
    **extra: Any,
) -> Dict[str, Any]:
    row = {
        "locationdesc": location,
        "locationabbr": abbr,
        "break_out": breakout,
        "breakoutid": breakout_id,
        "breakoutcategoryid": "BOC02",
        "year": str(year),
        "data_value": value,
        "low_confidence_limit": low,
        "high_confidence_limit": high,
        "data_value_type": "Crude Prevalence",
        "data_value_unit": "%",
        "topic": "Diabetes",
        "question": "Prevalence of diagnosed diabetes",
    }
    row.update(extra)
    return row


@pytest.fixture
def soda_row() -> Callable[..., Dict[str, Any]]:
    """Factory for one SODA-shaped raw row (every field a string)."""
    return _soda_row


@pytest.fixture
def sample_raw_rows() -> List[Dict[str, Any]]:
    """National and Texas rows for two sex breakouts over 2013-2014."""
    return [
        _soda_row("United States", "US", "Male", "SEX1", 2013, "10.1", "9.5", "10.7"),
        _soda_row("United States", "US", "Female", "SEX2", 2013, "9.0", "8.4", "9.6"),
        _soda_row("United States", "US", "Male", "SEX1", 2014, "10.5", "9.9", "11.1"),
        _soda_row("United States", "US", "Female", "SEX2", 2014, "9.4", "8.8", "10.0"),
        _soda_row("Texas", "TX", "Male", "SEX1", 2013, "11.2", "10.1", "12.3"),
        _soda_row("Texas", "TX", "Female", "SEX2", 2013, "10.0", "9.0", "11.0"),
        _soda_row("Texas", "TX", "Male", "SEX1", 2014, ""),
        _soda_row("Texas", "TX", "Female", "SEX2", 2014, "10.8", "9.7", "11.9"),
    ]


def _row(
    location: str = "US",
    breakout: str = "Overall",
    year: int = 2014,
    value: Any = 1.0,
    *,
    abbr: str = "",
    breakout_id: str = "",
    low: Any = None,
    high: Any = None,
    value_type: str = "Crude Prevalence",
    value_unit: str = "%",
) -> NormalizedRow:
    return NormalizedRow(
        location=location,
        location_abbreviation=abbr or location,
        breakout=breakout,
        breakout_id=breakout_id or breakout,
        year=year,
        value=value,
        low_confidence_limit=low,
        high_confidence_limit=high,
        value_type=value_type,
        value_unit=value_unit,
    )


@pytest.fixture
def make_row() -> Callable[..., NormalizedRow]:
    """Factory for an already-normalized row."""
    return _row
