from __future__ import annotations

from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd

from indicators.errors import ChartConfigError
from indicators.series import ChartSeries, ConfidenceBound

alt.data_transformers.disable_max_rows()

CHART_TYPES = ("bar", "column", "line", "pie")


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def series_frame(series: ChartSeries) -> pd.DataFrame:
    """Long-format frame (one row per series/category cell) for Altair encodings."""
    records: List[Dict[str, Any]] = []
    for col in series.columns:
        label = col[0]
        bounds = series.limits.get(label, ())
        for idx, (category, value) in enumerate(zip(series.categories, col[1:])):
            bound = bounds[idx] if idx < len(bounds) else ConfidenceBound()
            records.append(
                {
                    "series": label,
                    "category": str(category),
                    "value": value,
                    "low": bound.low,
                    "high": bound.high,
                }
            )
    return pd.DataFrame(records, columns=["series", "category", "value", "low", "high"])


def _tooltip(series: ChartSeries, category_title: str) -> List[alt.Tooltip]:
    unit = f" ({series.value_unit})" if series.value_unit else ""
    tooltip = [
        alt.Tooltip("series:N", title="Series"),
        alt.Tooltip("category:N", title=category_title),
        alt.Tooltip("value:Q", title=f"Value{unit}", format=".1f"),
    ]
    if series.limits:
        tooltip += [
            alt.Tooltip("low:Q", title="Low Confidence Limit", format=".1f"),
            alt.Tooltip("high:Q", title="High Confidence Limit", format=".1f"),
        ]
    return tooltip


def build_chart(series: ChartSeries, chart_type: str, *, title: Optional[str] = None) -> Optional[Dict[str, Any]]:
    if chart_type not in CHART_TYPES:
        raise ChartConfigError(f"Unknown chart type {chart_type!r}; expected one of: {', '.join(CHART_TYPES)}")
    if series.is_empty:
        return None

    df = series_frame(series)
    base = alt.Chart(df, title=title) if title else alt.Chart(df)
    y_title = series.y_axis_label or "Value"
    category_order = [str(c) for c in series.categories]

    if chart_type == "pie":
        chart = base.mark_arc().encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color("series:N", title="Breakout", sort=series.labels),
            tooltip=_tooltip(series, "Year"),
        )
    elif chart_type == "line":
        chart = base.mark_line(point=True).encode(
            x=alt.X("category:O", title="Year"),
            y=alt.Y("value:Q", title=y_title),
            color=alt.Color("series:N", title="Series"),
            tooltip=_tooltip(series, "Year"),
        )
    elif chart_type == "column":
        chart = base.mark_bar().encode(
            x=alt.X("category:N", title=None, sort=category_order),
            xOffset=alt.XOffset("series:N"),
            y=alt.Y("value:Q", title=y_title),
            color=alt.Color("series:N", title="Location"),
            tooltip=_tooltip(series, "Breakout"),
        )
    else:
        chart = base.mark_bar().encode(
            y=alt.Y("category:N", title=None, sort=category_order),
            yOffset=alt.YOffset("series:N"),
            x=alt.X("value:Q", title=y_title),
            color=alt.Color("series:N", title="Location"),
            tooltip=_tooltip(series, "Breakout"),
        )
    return to_vega_spec(chart)
