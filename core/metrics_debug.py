from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.filters import BusinessFilters
from core.metrics_map import parse_coordinates


def compute_debug(filters: BusinessFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    businesses: pd.DataFrame = ctx.get("businesses", pd.DataFrame())
    filtered: pd.DataFrame = ctx.get("filtered_businesses", pd.DataFrame())
    payload = {
        "filters": asdict(filters),
        "error": ctx.get("error"),
        "fetched_at": ctx.get("fetched_at"),
        "row_counts": {
            "businesses": int(len(businesses)),
            "filtered": int(len(filtered)),
        },
        "cleaning_checks": {
            "invalid_keys_dropped": int(ctx.get("keys_dropped", 0) or 0),
            "unplaceable_coordinates": 0,
            "blank_industry": 0,
            "blank_dba": 0,
        },
        "zip_coverage": [],
        "sample": [],
    }
    if businesses.empty:
        return payload

    unplaceable = sum(
        1
        for lat, lon in zip(businesses["latitude"], businesses["longitude"])
        if parse_coordinates(lat, lon) is None
    )
    payload["cleaning_checks"].update(
        {
            "unplaceable_coordinates": int(unplaceable),
            "blank_industry": int(businesses["primary_naics_description"].eq("").sum()),
            "blank_dba": int(businesses["dba_name"].eq("").sum()),
        }
    )

    zip5 = businesses["zip_code"].str[:5]
    coverage = (
        businesses.assign(zip5=zip5)
        .groupby("zip5", sort=True)
        .agg(rows=("location_account", "size"), latest_start=("location_start_date", "max"))
        .reset_index()
    )
    payload["zip_coverage"] = coverage.to_dict(orient="records")
    payload["sample"] = businesses.head(3).to_dict(orient="records")
    return payload
