from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import pandas as pd


ALL_ZIPS = "All"
DEFAULT_TOP_N = 5

SEARCH_COLUMNS = ("business_name", "dba_name", "primary_naics_description")


@dataclass(frozen=True)
class BusinessFilters:
    search_text: str = ""
    zip_code: str = ALL_ZIPS
    top_n: int = DEFAULT_TOP_N


def normalize_filters(raw: Mapping[str, object] | None) -> BusinessFilters:
    raw = raw or {}

    search = raw.get("search_text")
    search_text = "" if search is None else str(search)

    zip_code = str(raw.get("zip_code") or "").strip() or ALL_ZIPS

    top_n = raw.get("top_n", DEFAULT_TOP_N)
    try:
        top_n = int(top_n)
    except Exception:
        top_n = DEFAULT_TOP_N
    top_n = max(1, min(50, top_n))

    return BusinessFilters(search_text=search_text, zip_code=zip_code, top_n=top_n)


def reset_filters() -> BusinessFilters:
    return BusinessFilters()


def _text(value: object) -> str:
    return "" if value is None else str(value)


def matches_filters(record: Mapping[str, object], filters: BusinessFilters) -> bool:
    """Evaluate the predicate for a single record mapping."""
    search = filters.search_text.lower()
    matches_search = any(search in _text(record.get(col)).lower() for col in SEARCH_COLUMNS)
    matches_zip = filters.zip_code == ALL_ZIPS or _text(record.get("zip_code")).startswith(filters.zip_code)
    return matches_search and matches_zip


def filter_businesses(df: pd.DataFrame, filters: BusinessFilters) -> pd.DataFrame:
    """Rows of `df` matching the search text and zip selector, in their original order."""
    if df.empty:
        return df.copy()

    search = filters.search_text.lower()
    mask = pd.Series(False, index=df.index)
    for col in SEARCH_COLUMNS:
        if col in df.columns:
            mask |= df[col].fillna("").astype(str).str.lower().str.contains(search, regex=False)

    if filters.zip_code != ALL_ZIPS:
        zips = df["zip_code"].fillna("").astype(str) if "zip_code" in df.columns else pd.Series("", index=df.index)
        mask &= zips.str.startswith(filters.zip_code)

    return df[mask]
