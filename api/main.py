from __future__ import annotations

from dataclasses import asdict
import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from api.schemas import IndicatorRequest, RowsRequest, TableRequest
from indicators.choropleth import build_map_values
from indicators.dashboard import compute_indicator
from indicators.errors import ChartConfigError
from indicators.rows import latest_year, normalize
from indicators.series import build
from indicators.table import raw_table, series_table


app = FastAPI(title="Chronic Indicators API", version="0.1.0")
logger = logging.getLogger(__name__)

CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/health")
def health():
    return _json({"status": "ok"})


@app.post("/normalize")
def normalize_rows(payload: RowsRequest):
    try:
        rows = normalize(payload.rows)
        return _json({"rows": [asdict(r) for r in rows], "dropped": len(payload.rows) - len(rows)})
    except Exception as exc:
        logger.exception("normalize failed")
        return _error(exc, 500)


@app.post("/series")
def series(
    payload: RowsRequest,
    mode: str = Query(default="trend"),
    reference_year: Optional[int] = Query(default=None),
):
    try:
        return _json(build(normalize(payload.rows), mode, reference_year).to_dict())
    except ChartConfigError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("series failed")
        return _error(exc, 500)


@app.post("/table")
def table(payload: TableRequest):
    try:
        rows = normalize(payload.rows)
        if payload.mode:
            result = series_table(build(rows, payload.mode, payload.reference_year), payload.dimension_label)
        else:
            year = payload.reference_year if payload.reference_year is not None else latest_year(rows)
            result = raw_table(rows, show_only_latest=payload.show_only_latest, latest_year=year)
        return _json(result.to_dict())
    except ChartConfigError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("table failed")
        return _error(exc, 500)


@app.post("/map")
def map_values(payload: RowsRequest, reference_year: Optional[int] = Query(default=None)):
    try:
        return _json(build_map_values(normalize(payload.rows), reference_year))
    except Exception as exc:
        logger.exception("map failed")
        return _error(exc, 500)


@app.post("/indicator")
def indicator(payload: IndicatorRequest):
    try:
        charts = [c.model_dump() for c in payload.charts]
        return _json(compute_indicator(payload.rows, payload.filters.model_dump(), charts))
    except ChartConfigError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("indicator failed")
        return _error(exc, 500)
