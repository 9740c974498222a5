from __future__ import annotations

from typing import Dict, List, Optional

from indicators.rows import round_half_up
from indicators.series import Cell, ChartSeries

RATIO_DECIMALS = 2


def column_means(series: ChartSeries) -> Dict[str, Optional[float]]:
    """Mean of the non-null cells of every column (``None`` for an all-null column)."""
    out: Dict[str, Optional[float]] = {}
    for col in series.columns:
        present = [v for v in col[1:] if v is not None]
        out[col[0]] = round_half_up(sum(present) / len(present), 1) if present else None
    return out


def ratios_to(series: ChartSeries, base_label: str) -> Dict[str, List[Cell]]:
    """Cell-by-cell ratio of each column to ``base_label`` (``None`` where undefined)."""
    base = series.values(base_label)
    out: Dict[str, List[Cell]] = {}
    for col in series.columns:
        if col[0] == base_label:
            continue
        ratios: List[Cell] = []
        for value, denom in zip(col[1:], base):
            if value is None or denom is None or denom == 0:
                ratios.append(None)
            else:
                ratios.append(round_half_up(value / denom, RATIO_DECIMALS))
        out[col[0]] = ratios
    return out


def interval_widths(series: ChartSeries) -> Dict[str, List[Cell]]:
    out: Dict[str, List[Cell]] = {}
    for label, bounds in series.limits.items():
        out[label] = [
            round_half_up(b.high - b.low, 1) if b.high is not None and b.low is not None else None
            for b in bounds
        ]
    return out
