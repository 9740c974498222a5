from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from indicators.rows import NormalizedRow
from indicators.series import ChartSeries

MISSING = "N/A"

DIMENSION_LABELS = {
    "trend": "Year",
    "latest": "Breakout",
    "pie": "Breakout",
}

CAPTION_FIELDS = ("topic", "question", "value_type")


@dataclass(frozen=True)
class DataTable:
    caption: Tuple[str, ...] = ()
    header: Tuple[str, ...] = ()
    rows: Tuple[Tuple[str, ...], ...] = ()
    summary: str = ""
    # cells rendered as <th scope="row">
    row_header_columns: Tuple[int, ...] = (0,)
    align_right: Tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def to_dict(self) -> Dict[str, Any]:
        return {
            "caption": list(self.caption),
            "header": list(self.header),
            "rows": [list(r) for r in self.rows],
            "summary": self.summary,
            "row_header_columns": list(self.row_header_columns),
            "align_right": list(self.align_right),
        }


def format_cell(value: object) -> str:
    if value is None or value == "":
        return MISSING
    return str(value)


def series_table(series: ChartSeries, dimension_label: Optional[str] = None) -> DataTable:
    """Restate a ChartSeries as a table: one row per column, cells aligned to the categories."""
    if series.is_empty:
        return DataTable()
    label = dimension_label or DIMENSION_LABELS.get(series.mode, "")
    header = (label, *[format_cell(c) for c in series.categories])
    rows = tuple(tuple(format_cell(cell) for cell in col) for col in series.columns)
    caption = tuple(c for c in (series.y_axis_label, series.value_unit) if c)
    return DataTable(
        caption=caption,
        header=header,
        rows=rows,
        align_right=tuple(range(1, len(header))),
    )


def _with_unit(header: str, unit: str) -> str:
    return f"{header} ({unit})" if unit else header


def raw_table(
    rows: Sequence[NormalizedRow],
    *,
    show_only_latest: bool = False,
    latest_year: Optional[int] = None,
) -> DataTable:
    if not rows:
        return DataTable()

    display: Iterable[NormalizedRow] = rows
    if show_only_latest:
        display = [row for row in rows if row.year == latest_year]
    display = list(display)

    unit = display[0].value_unit if display else ""
    header = (
        "Year",
        "Location",
        "Breakout",
        _with_unit("Value", unit),
        _with_unit("Low Confidence Limit", unit),
        _with_unit("High Confidence Limit", unit),
    )
    body: List[Tuple[str, ...]] = [
        (
            format_cell(row.year),
            format_cell(row.location),
            format_cell(row.breakout),
            format_cell(row.value),
            format_cell(row.low_confidence_limit),
            format_cell(row.high_confidence_limit),
        )
        for row in display
    ]

    first = rows[0]
    caption = tuple(getattr(first, name) for name in CAPTION_FIELDS)
    content = " ".join(caption)
    summary = " ".join(
        [
            f"This table displays {content}.",
            "The columns in the header row show labels of data values shown in the table.",
            "The table contains rows of data values for year, location and breakout categories.",
        ]
    )
    return DataTable(
        caption=caption,
        header=header,
        rows=tuple(body),
        summary=summary,
        row_header_columns=(0, 1, 2),
        align_right=(3, 4, 5),
    )
