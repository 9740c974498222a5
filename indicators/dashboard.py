from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from indicators.charts import CHART_TYPES, build_chart
from indicators.choropleth import build_map_values
from indicators.errors import ChartConfigError
from indicators.filters import IndicatorFilters, apply_filters, normalize_filters
from indicators.rows import NormalizedRow, RowLike, latest_year, normalize
from indicators.series import ChartSeries, build
from indicators.stats import column_means, interval_widths, ratios_to
from indicators.table import raw_table, series_table

logger = logging.getLogger(__name__)

CHART_DATA = ("trend", "latest")


@dataclass(frozen=True)
class ChartConfig:
    type: str = "line"
    data: str = "trend"
    title: str = ""
    footnote: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, object]) -> "ChartConfig":
        chart_type = str(record.get("type") or "line").strip().lower()
        if chart_type not in CHART_TYPES:
            raise ChartConfigError(f"Unknown chart type {chart_type!r}; expected one of: {', '.join(CHART_TYPES)}")
        data = str(record.get("data") or "trend").strip().lower()
        if data not in CHART_DATA:
            raise ChartConfigError(f"Unknown chart data {data!r}; expected one of: {', '.join(CHART_DATA)}")
        return cls(
            type=chart_type,
            data=data,
            title=str(record.get("title") or ""),
            footnote=str(record.get("footnote") or ""),
        )


def series_mode(config: ChartConfig) -> str:
    if config.type == "pie":
        return "pie"
    return config.data or "trend"


def chart_title(config: ChartConfig, latest: int, from_year: Optional[int] = None) -> Optional[str]:
    if not config.title:
        return None
    if series_mode(config) != "trend" or from_year is None or from_year == latest:
        return f"{config.title} ({latest} Data)"
    return f"{config.title} ({from_year} - {latest} Data)"


def _national_label(rows: Sequence[NormalizedRow]) -> Optional[str]:
    return next((row.location for row in rows if row.is_national), None)


def series_statistics(series: ChartSeries, rows: Sequence[NormalizedRow]) -> Dict[str, Any]:
    stats: Dict[str, Any] = {
        "means": column_means(series),
        "interval_widths": interval_widths(series),
        "ratios": {},
    }
    national = _national_label(rows)
    if series.mode == "latest" and national in series.labels:
        stats["ratios"] = ratios_to(series, national)
    return stats


def compute_chart(config: ChartConfig, rows: Sequence[NormalizedRow], latest: int) -> Dict[str, Any]:
    mode = series_mode(config)
    series = build(rows, mode, latest)
    from_year = min(row.year for row in rows) if rows else None
    title = chart_title(config, latest, from_year)
    return {
        "type": config.type,
        "mode": mode,
        "title": title,
        "footnote": config.footnote or None,
        "series": series.to_dict(),
        "statistics": series_statistics(series, rows),
        "table": series_table(series).to_dict(),
        "raw_table": raw_table(rows, show_only_latest=mode != "trend", latest_year=latest).to_dict(),
        "spec": build_chart(series, config.type, title=title),
    }


def compute_indicator(
    raw_rows: Iterable[RowLike],
    filters: Union[dict, IndicatorFilters, None] = None,
    charts: Iterable[Union[ChartConfig, Mapping[str, object]]] = (),
) -> Dict[str, Any]:
    rows = normalize(raw_rows)
    years = sorted({row.year for row in rows})
    if isinstance(filters, IndicatorFilters):
        f = filters
    else:
        f = normalize_filters(filters or {}, available_years=years)
    configs = [c if isinstance(c, ChartConfig) else ChartConfig.from_record(c) for c in charts]

    filtered = apply_filters(rows, f)
    latest = latest_year(filtered)
    # the map shows every state for the same breakout category and window
    map_rows = apply_filters(rows, replace(f, location=None))

    payload: Dict[str, Any] = {
        "filters": asdict(f),
        "latest_year": latest,
        "row_count": len(filtered),
        "charts": [],
        "map": build_map_values(map_rows, latest),
        "table": raw_table(filtered).to_dict(),
    }
    if latest is None:
        logger.info("compute_indicator: no rows left after filtering for %s", f.location)
        return payload

    chart_payloads: List[Dict[str, Any]] = [compute_chart(cfg, filtered, latest) for cfg in configs]
    payload["charts"] = chart_payloads
    return payload
