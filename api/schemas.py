from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class IndicatorFiltersModel(BaseModel):
    location: Optional[str] = "US"
    breakout_category: Optional[str] = None
    from_year: Optional[int] = None
    to_year: Optional[int] = None
    data_points: int = 10
    include_national: bool = True


class ChartConfigModel(BaseModel):
    type: str = "line"
    data: str = "trend"
    title: str = ""
    footnote: str = ""


class RowsRequest(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class TableRequest(RowsRequest):
    mode: Optional[str] = None
    reference_year: Optional[int] = None
    dimension_label: Optional[str] = None
    show_only_latest: bool = False


class IndicatorRequest(RowsRequest):
    filters: IndicatorFiltersModel = Field(default_factory=IndicatorFiltersModel)
    charts: List[ChartConfigModel] = Field(default_factory=list)
