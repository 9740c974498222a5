from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from indicators.rows import NATIONAL_ABBREVIATION, NormalizedRow, latest_year, parse_year

logger = logging.getLogger(__name__)

DEFAULT_DATA_POINTS = 10
MAX_DATA_POINTS = 50
ALL_LOCATIONS = "ALL"


@dataclass(frozen=True)
class IndicatorFilters:
    location: Optional[str] = NATIONAL_ABBREVIATION
    breakout_category: Optional[str] = None
    from_year: Optional[int] = None
    to_year: Optional[int] = None
    data_points: int = DEFAULT_DATA_POINTS
    include_national: bool = True


def _as_int(value: object) -> Optional[int]:
    if value is None or value == "":
        return None
    return parse_year(value)


def normalize_filters(raw: dict, *, available_years: Optional[Iterable[int]] = None) -> IndicatorFilters:
    available_years = sorted(available_years or [])

    location: Optional[str] = str(raw.get("location") or "").strip().upper() or NATIONAL_ABBREVIATION
    if location == ALL_LOCATIONS:
        location = None
    breakout_category = str(raw.get("breakout_category") or "").strip() or None

    from_year = _as_int(raw.get("from_year"))
    to_year = _as_int(raw.get("to_year"))
    if from_year is not None and to_year is not None and from_year > to_year:
        from_year, to_year = to_year, from_year
    if available_years:
        lo, hi = available_years[0], available_years[-1]
        if from_year is not None:
            from_year = max(lo, min(hi, from_year))
        if to_year is not None:
            to_year = max(lo, min(hi, to_year))

    data_points = _as_int(raw.get("data_points"))
    if data_points is None:
        data_points = DEFAULT_DATA_POINTS
    data_points = max(1, min(MAX_DATA_POINTS, data_points))

    include_national = bool(raw.get("include_national", True))
    return IndicatorFilters(
        location=location,
        breakout_category=breakout_category,
        from_year=from_year,
        to_year=to_year,
        data_points=data_points,
        include_national=include_national,
    )


def apply_filters(rows: Iterable[NormalizedRow], filters: IndicatorFilters) -> List[NormalizedRow]:
    """Keep the selected location (plus national rows), breakout category and year window.

    The window keeps the ``data_points`` most recent years counted back from
    the latest year left after the location/category filters.
    """
    out: List[NormalizedRow] = []
    for row in rows:
        if filters.location is not None and row.location_abbreviation != filters.location:
            if not (filters.include_national and row.is_national):
                continue
        if filters.breakout_category is not None and row.breakout_category_id != filters.breakout_category:
            continue
        out.append(row)

    latest = latest_year(out)
    if latest is None:
        return out

    first_year = latest - filters.data_points
    out = [
        row
        for row in out
        if row.year > first_year
        and (filters.from_year is None or row.year >= filters.from_year)
        and (filters.to_year is None or row.year <= filters.to_year)
    ]
    logger.debug("apply_filters kept %d row(s) for %s", len(out), filters.location or "all locations")
    return out
