from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from indicators.errors import ChartConfigError
from indicators.rows import NATIONAL_ABBREVIATION, NormalizedRow, latest_year

logger = logging.getLogger(__name__)

MODES = ("trend", "latest", "pie")
TREND_SEPARATOR = " - "

Cell = Optional[float]


@dataclass(frozen=True)
class ConfidenceBound:
    high: Cell = None
    low: Cell = None

    @classmethod
    def of(cls, row: Optional[NormalizedRow]) -> "ConfidenceBound":
        if row is None:
            return cls()
        return cls(high=row.high_confidence_limit, low=row.low_confidence_limit)


@dataclass(frozen=True)
class ChartSeries:
    """Column-oriented chart data.

    Each column is ``(label, *values)`` with values aligned to ``categories``
    (years for trend, breakout labels for latest, the reference year for pie).
    ``limits`` maps a column label to confidence bounds aligned the same way.
    """

    mode: str = ""
    columns: Tuple[Tuple[Any, ...], ...] = ()
    categories: Tuple[Any, ...] = ()
    limits: Mapping[str, Tuple[ConfidenceBound, ...]] = field(default_factory=dict)
    value_type: str = ""
    value_unit: str = ""
    reference_year: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "limits", MappingProxyType(dict(self.limits)))

    @property
    def is_empty(self) -> bool:
        return not self.columns

    @property
    def labels(self) -> List[str]:
        return [col[0] for col in self.columns]

    def values(self, label: str) -> Tuple[Cell, ...]:
        for col in self.columns:
            if col[0] == label:
                return tuple(col[1:])
        raise KeyError(label)

    @property
    def y_axis_label(self) -> str:
        if self.mode == "latest" and self.reference_year is not None:
            return f"{self.value_type} (in year {self.reference_year})"
        return self.value_type

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "columns": [list(col) for col in self.columns],
            "categories": list(self.categories),
            "limits": {label: [asdict(b) for b in bounds] for label, bounds in self.limits.items()},
            "value_type": self.value_type,
            "value_unit": self.value_unit,
            "reference_year": self.reference_year,
            "y_axis_label": self.y_axis_label,
        }


def row_for_year(rows: Iterable[NormalizedRow], year: int) -> Optional[NormalizedRow]:
    return next((row for row in rows if row.year == year), None)


def _value(row: Optional[NormalizedRow]) -> Cell:
    return row.value if row is not None else None


def build(rows: Sequence[NormalizedRow], mode: str, reference_year: Optional[int] = None) -> ChartSeries:
    if mode not in MODES:
        raise ChartConfigError(f"Unknown series mode {mode!r}; expected one of: {', '.join(MODES)}")
    if reference_year is not None and (isinstance(reference_year, bool) or not isinstance(reference_year, int)):
        raise ChartConfigError(f"reference_year must be an integer year, got {reference_year!r}")

    rows = list(rows)
    if not rows:
        return ChartSeries(mode=mode)
    if mode == "trend":
        return build_trend(rows)

    year = reference_year if reference_year is not None else latest_year(rows)
    if mode == "latest":
        return build_latest(rows, year)
    return build_pie(rows, year)


def build_trend(rows: Sequence[NormalizedRow]) -> ChartSeries:
    """One line per ``"{location} - {breakout}"`` over every year present."""
    groups: Dict[str, Dict[int, NormalizedRow]] = {}
    for row in rows:
        key = f"{row.location}{TREND_SEPARATOR}{row.breakout}"
        groups.setdefault(key, {})[row.year] = row

    years = sorted({row.year for row in rows})

    columns: List[Tuple[Any, ...]] = []
    limits: Dict[str, Tuple[ConfidenceBound, ...]] = {}
    for key, by_year in groups.items():
        columns.append((key, *[_value(by_year.get(year)) for year in years]))
        limits[key] = tuple(ConfidenceBound.of(by_year.get(year)) for year in years)

    first = rows[0]
    return ChartSeries(
        mode="trend",
        columns=tuple(columns),
        categories=tuple(years),
        limits=limits,
        value_type=first.value_type,
        value_unit=first.value_unit,
    )


def build_latest(rows: Sequence[NormalizedRow], reference_year: int) -> ChartSeries:
    """One column per location, one value per breakout at ``reference_year``."""
    categories = sorted({row.breakout for row in rows})

    by_location: Dict[str, Dict[str, List[NormalizedRow]]] = {}
    for row in rows:
        by_location.setdefault(row.location, {}).setdefault(row.breakout, []).append(row)

    columns: List[Tuple[Any, ...]] = []
    limits: Dict[str, Tuple[ConfidenceBound, ...]] = {}
    for location, by_breakout in by_location.items():
        selected = [row_for_year(by_breakout.get(breakout, []), reference_year) for breakout in categories]
        columns.append((location, *[_value(row) for row in selected]))
        limits[location] = tuple(ConfidenceBound.of(row) for row in selected)

    first = rows[0]
    return ChartSeries(
        mode="latest",
        columns=tuple(columns),
        categories=tuple(categories),
        limits=limits,
        value_type=first.value_type,
        value_unit=first.value_unit,
        reference_year=reference_year,
    )


def select_pie_location(rows: Sequence[NormalizedRow]) -> List[NormalizedRow]:
    """State rows when exactly one state accompanies the national rows, national rows otherwise."""
    by_abbr: Dict[str, List[NormalizedRow]] = {}
    for row in rows:
        by_abbr.setdefault(row.location_abbreviation, []).append(row)

    others = sorted(abbr for abbr in by_abbr if abbr != NATIONAL_ABBREVIATION)
    if NATIONAL_ABBREVIATION in by_abbr:
        if len(others) == 1:
            return by_abbr[others[0]]
        return by_abbr[NATIONAL_ABBREVIATION]

    if len(others) > 1:
        logger.warning(
            "pie series got %d locations and no national rows; using %r", len(others), others[0]
        )
    return by_abbr[others[0]]


def _group_by_breakout_id(rows: Sequence[NormalizedRow]) -> Tuple[Dict[str, List[NormalizedRow]], str]:
    groups: Dict[str, List[NormalizedRow]] = {}
    unit = ""
    for row in rows:
        groups.setdefault(row.breakout_id, []).append(row)
        if row.value_unit:
            unit = row.value_unit
    return groups, unit


def build_pie(rows: Sequence[NormalizedRow], reference_year: int) -> ChartSeries:
    selected = select_pie_location(rows)
    groups, unit = _group_by_breakout_id(selected)

    columns: List[Tuple[Any, ...]] = []
    for breakout_id in sorted(groups):
        group = groups[breakout_id]
        columns.append((group[0].breakout, _value(row_for_year(group, reference_year))))

    return ChartSeries(
        mode="pie",
        columns=tuple(columns),
        categories=(reference_year,),
        value_type=selected[0].value_type,
        value_unit=unit,
        reference_year=reference_year,
    )
