from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Tuple

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from explorer.export import export_data
from explorer.selection import ExplorerSelection, normalize_selection
from explorer.session import (
    ExplorerSession,
    compute_chart,
    compute_profile,
    compute_quality,
    compute_statistics,
    compute_table,
    get_session,
)
from explorer_api.schemas import ExplorerRequest, ExportRequest, SortToggleRequest


app = FastAPI(title="Tabular Explorer API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _prepare(request: ExplorerRequest) -> Tuple[ExplorerSelection, ExplorerSession]:
    session = get_session(request.dataset.to_dataset())
    selection = normalize_selection(request.selection.model_dump(), columns=session.dataset.columns)
    return selection, session


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
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
                datetime: lambda dt: dt.isoformat(),
                date: lambda d: d.isoformat(),
            },
        )
    )


def _error(name: str, exc: Exception) -> JSONResponse:
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/profile")
def profile(request: ExplorerRequest):
    try:
        selection, session = _prepare(request)
        return _json(compute_profile(selection, session))
    except Exception as exc:
        return _error("profile", exc)


@app.post("/table")
def table(request: ExplorerRequest):
    try:
        selection, session = _prepare(request)
        return _json(compute_table(selection, session))
    except Exception as exc:
        return _error("table", exc)


@app.post("/table/sort")
def table_sort(request: SortToggleRequest):
    try:
        selection, session = _prepare(request)
        return _json(compute_table(selection.toggle_sort(request.column), session))
    except Exception as exc:
        return _error("table_sort", exc)


@app.post("/statistics")
def statistics(request: ExplorerRequest):
    try:
        selection, session = _prepare(request)
        return _json(compute_statistics(selection, session))
    except Exception as exc:
        return _error("statistics", exc)


@app.post("/chart")
def chart(request: ExplorerRequest, include_spec: bool = Query(default=True)):
    try:
        selection, session = _prepare(request)
        return _json(compute_chart(selection, session, include_spec=include_spec))
    except Exception as exc:
        return _error("chart", exc)


@app.post("/quality")
def quality(request: ExplorerRequest):
    try:
        selection, session = _prepare(request)
        return _json(compute_quality(selection, session))
    except Exception as exc:
        return _error("quality", exc)


@app.post("/export")
def export(request: ExportRequest):
    columns = [c.model_dump() for c in request.columns] if request.columns is not None else None
    filename, content, media_type = export_data(
        request.filename, request.dataset.to_dataset(), request.format, columns
    )
    return Response(content=content, media_type=media_type, headers={"Content-Disposition": f"attachment; filename={filename}"})
