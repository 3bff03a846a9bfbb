from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from core.data import build_maps_url, format_dba, format_start_date, industry_label
from core.filters import BusinessFilters


def business_detail(rec: Dict[str, Any]) -> Dict[str, Any]:
    name = rec.get("business_name", "")
    street = rec.get("street_address", "")
    zip_code = rec.get("zip_code", "")
    return {
        "key": rec.get("location_account", ""),
        "name": name,
        "dba": format_dba(rec.get("dba_name", "")),
        "street_address": street,
        "city": rec.get("city", ""),
        "zip_code": zip_code,
        "location_description": rec.get("location_description", ""),
        "industry": industry_label(rec.get("primary_naics_description", "")),
        "naics": rec.get("naics", ""),
        "council_district": rec.get("council_district") or "N/A",
        "start_date": format_start_date(rec.get("location_start_date")),
        "maps_url": build_maps_url(name, street, zip_code),
    }


def compute_explorer(filters: BusinessFilters, ctx: Dict[str, Any], *, selected_key: Optional[str] = None) -> Dict[str, Any]:
    filtered: pd.DataFrame = ctx.get("filtered_businesses", pd.DataFrame())
    businesses: pd.DataFrame = ctx.get("businesses", pd.DataFrame())

    rows: List[Dict[str, Any]] = [
        {
            "key": rec.get("location_account", ""),
            "name": rec.get("business_name", ""),
            "street_address": rec.get("street_address", ""),
            "zip_code": rec.get("zip_code", ""),
            "industry": industry_label(rec.get("primary_naics_description", "")),
            "selected": selected_key is not None and rec.get("location_account") == selected_key,
        }
        for rec in filtered.to_dict(orient="records")
    ]

    # Detail comes from the full collection: a selection can outlive the filter that showed it.
    detail = None
    if selected_key is not None and not businesses.empty:
        match = businesses[businesses["location_account"] == selected_key]
        if not match.empty:
            detail = business_detail(match.iloc[0].to_dict())

    return {
        "filters": asdict(filters),
        "error": ctx.get("error"),
        "count": len(rows),
        "rows": rows,
        "selected": selected_key if detail is not None else None,
        "detail": detail,
    }
