from __future__ import annotations

import math
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from core.data import MAP_CENTER, MAP_ZOOM
from core.filters import BusinessFilters


DEFAULT_COLOR = "#6366f1"
SELECTED_COLOR = "#ef4444"
DEFAULT_RADIUS = 5
SELECTED_RADIUS = 8


def parse_coordinates(lat: object, lon: object) -> Optional[Tuple[float, float]]:
    try:
        lat_f = float(str(lat).strip())
        lon_f = float(str(lon).strip())
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return None
    # Un-geocoded registry rows come back as 0,0.
    if lat_f == 0 and lon_f == 0:
        return None
    return lat_f, lon_f


def compute_map(filters: BusinessFilters, ctx: Dict[str, Any], *, selected_key: Optional[str] = None) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_businesses", pd.DataFrame())

    markers: List[Dict[str, Any]] = []
    skipped = 0
    center = {"lat": MAP_CENTER[0], "lon": MAP_CENTER[1]}
    for rec in df.to_dict(orient="records"):
        coords = parse_coordinates(rec.get("latitude"), rec.get("longitude"))
        if coords is None:
            skipped += 1
            continue
        is_selected = selected_key is not None and rec.get("location_account") == selected_key
        markers.append(
            {
                "key": rec.get("location_account", ""),
                "name": rec.get("business_name", ""),
                "address": rec.get("street_address", ""),
                "zip_code": rec.get("zip_code", ""),
                "industry": rec.get("primary_naics_description") or "N/A",
                "lat": coords[0],
                "lon": coords[1],
                "selected": is_selected,
                "radius": SELECTED_RADIUS if is_selected else DEFAULT_RADIUS,
                "color": SELECTED_COLOR if is_selected else DEFAULT_COLOR,
            }
        )
        if is_selected:
            center = {"lat": coords[0], "lon": coords[1]}

    return {
        "filters": asdict(filters),
        "error": ctx.get("error"),
        "markers": markers,
        "center": center,
        "zoom": MAP_ZOOM,
        "selected": selected_key,
        "skipped": skipped,
    }
