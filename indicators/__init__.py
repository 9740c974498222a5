"""Core (UI-agnostic) indicator dashboard logic.

This package contains:
- row normalization (SODA JSON rows -> typed records)
- series building for the trend / latest / pie presentation modes
- filter normalization and accessible table restatements
- chart helpers (Altair -> Vega-Lite spec dict)
"""

from __future__ import annotations

from indicators.errors import ChartConfigError
from indicators.rows import NormalizedRow, RawRow, latest_year, normalize
from indicators.series import ChartSeries, ConfidenceBound, build

__all__ = [
    "ChartConfigError",
    "ChartSeries",
    "ConfidenceBound",
    "NormalizedRow",
    "RawRow",
    "build",
    "latest_year",
    "normalize",
]
