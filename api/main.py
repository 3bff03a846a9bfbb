from __future__ import annotations

import logging
import math
import os
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import BusinessFiltersModel, HealthResponse, MetaZipCodesResponse, ZipOptionModel
from core.data import ZIP_OPTIONS, load_business_data, prepare_context
from core.filters import BusinessFilters, normalize_filters
from core.metrics_debug import compute_debug
from core.metrics_explorer import compute_explorer
from core.metrics_map import compute_map
from core.metrics_stats import compute_stats, top_industries, zip_distribution


logging.basicConfig(level=os.getenv("BIZ_PULSE_LOG_LEVEL", "INFO").upper())

app = FastAPI(title="LA Business Pulse API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: BusinessFiltersModel) -> BusinessFilters:
    return normalize_filters(model.model_dump())


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
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/health", response_model=HealthResponse)
def health():
    data_ctx = load_business_data()
    return HealthResponse(
        status="ok" if data_ctx.get("error") is None else "degraded",
        records=len(data_ctx["businesses"]),
        error=data_ctx.get("error"),
    )


@app.get("/meta/zip-codes", response_model=MetaZipCodesResponse)
def meta_zip_codes():
    return MetaZipCodesResponse(zip_codes=[ZipOptionModel(value=v, label=label) for v, label in ZIP_OPTIONS])


@app.post("/businesses")
def businesses(filters: BusinessFiltersModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_business_data())
        filtered: pd.DataFrame = ctx["filtered_businesses"]
        return _json(
            {
                "error": ctx["error"],
                "total": len(ctx["businesses"]),
                "count": len(filtered),
                "businesses": filtered.to_dict(orient="records"),
            }
        )
    except Exception as exc:
        logger.exception("businesses failed")
        return _error(exc)


@app.post("/stats")
def stats(filters: BusinessFiltersModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_business_data())
        return _json(compute_stats(f, ctx))
    except Exception as exc:
        logger.exception("stats failed")
        return _error(exc)


@app.post("/map")
def map_view(filters: BusinessFiltersModel, selected_key: Optional[str] = Query(default=None)):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_business_data())
        selected_key = selected_key if selected_key in ctx["valid_keys"] else None
        return _json(compute_map(f, ctx, selected_key=selected_key))
    except Exception as exc:
        logger.exception("map failed")
        return _error(exc)


@app.post("/explorer")
def explorer(filters: BusinessFiltersModel, selected_key: Optional[str] = Query(default=None)):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_business_data())
        return _json(compute_explorer(f, ctx, selected_key=selected_key or None))
    except Exception as exc:
        logger.exception("explorer failed")
        return _error(exc)


@app.post("/debug")
def debug(filters: BusinessFiltersModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_business_data())
        return _json(compute_debug(f, ctx))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


@app.post("/export/{page}")
def export_page(page: str, filters: BusinessFiltersModel):
    f = _filters_from_model(filters)
    ctx = prepare_context(f, load_business_data())
    filtered: pd.DataFrame = ctx["filtered_businesses"]

    filename = f"{page}.csv"
    if page == "businesses":
        export_df = filtered
    elif page == "stats":
        industries = pd.DataFrame([{"dimension": "industry", "label": b.name, "count": b.count} for b in top_industries(filtered, f.top_n)])
        zips = pd.DataFrame([{"dimension": "zip_code", "label": b.name, "count": b.count} for b in zip_distribution(filtered)])
        export_df = pd.concat([industries, zips], ignore_index=True)
    else:
        export_df = pd.DataFrame()

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
