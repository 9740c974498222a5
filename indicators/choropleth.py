from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from indicators.rows import NormalizedRow, latest_year
from indicators.series import ConfidenceBound, row_for_year


def build_map_values(rows: Sequence[NormalizedRow], reference_year: Optional[int] = None) -> Dict[str, Any]:
    """Per-state values at the reference year for the choropleth, keyed by location abbreviation.

    National rows are left out; the color domain covers the non-null values only.
    """
    year = reference_year if reference_year is not None else latest_year(rows)
    payload: Dict[str, Any] = {"year": year, "locations": {}, "domain": None}
    if year is None:
        return payload

    by_abbr: Dict[str, List[NormalizedRow]] = {}
    for row in rows:
        if row.is_national or not row.location_abbreviation:
            continue
        by_abbr.setdefault(row.location_abbreviation, []).append(row)

    locations: Dict[str, Any] = {}
    for abbr in sorted(by_abbr):
        group = by_abbr[abbr]
        match = row_for_year(group, year)
        bound = ConfidenceBound.of(match)
        locations[abbr] = {
            "location": group[0].location,
            "value": match.value if match is not None else None,
            "high": bound.high,
            "low": bound.low,
        }

    values = [loc["value"] for loc in locations.values() if loc["value"] is not None]
    payload["locations"] = locations
    payload["domain"] = [min(values), max(values)] if values else None
    return payload
