from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote

import pandas as pd
import requests

from core.filters import ALL_ZIPS, BusinessFilters, filter_businesses, normalize_filters


logger = logging.getLogger(__name__)

API_URL = os.getenv("BIZ_PULSE_API_URL", "https://data.lacity.org/resource/r4uk-afju.json")
APP_TOKEN = os.getenv("SOCRATA_APP_TOKEN") or None


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except Exception:
        logger.warning("Ignoring non-integer %s=%r", name, os.getenv(name))
        return default


DEFAULT_LIMIT = _env_int("BIZ_PULSE_LIMIT", 5000)

ZIP_CODES: Tuple[str, ...] = ("90046", "90068", "90069")
ZIP_LABELS: Dict[str, str] = {
    "90046": "Hollywood",
    "90068": "Hollywood Hills",
    "90069": "West Hollywood",
}
ZIP_OPTIONS: List[Tuple[str, str]] = [(ALL_ZIPS, "All Area Codes")] + [
    (z, f"{z} ({ZIP_LABELS[z]})") for z in ZIP_CODES
]

MAP_CENTER: Tuple[float, float] = (34.0928, -118.3617)
MAP_ZOOM = 13

LOAD_ERROR_MESSAGE = "Failed to load business data. Please try again later."

BUSINESS_COLUMNS = [
    "location_account",
    "business_name",
    "dba_name",
    "street_address",
    "city",
    "zip_code",
    "location_description",
    "primary_naics_description",
    "naics",
    "council_district",
    "location_start_date",
    "latitude",
    "longitude",
]

DBA_DELIMITER = "|"
MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query="


class FetchError(Exception):
    """Raised when the business registry could not be loaded."""


class FetchTransportError(FetchError):
    pass


class FetchDeserializationError(FetchError):
    pass


def build_where_clause(zip_codes: Iterable[str] = ZIP_CODES) -> str:
    # starts_with keeps ZIP+4 values like 90046-1234
    zip_query = " OR ".join(f"starts_with(zip_code, '{z}')" for z in zip_codes)
    return f"({zip_query}) AND location IS NOT NULL"


def build_query_params(limit: int = DEFAULT_LIMIT, zip_codes: Iterable[str] = ZIP_CODES) -> Dict[str, str]:
    return {
        "$where": build_where_clause(zip_codes),
        "$limit": str(int(limit)),
        "$order": "location_start_date DESC",
    }


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    if isinstance(value, (dict, list)):
        return ""
    return str(value)


def _split_location(location: object) -> Tuple[str, str]:
    if not isinstance(location, dict):
        return "", ""
    return _as_text(location.get("latitude")), _as_text(location.get("longitude"))


def empty_businesses() -> pd.DataFrame:
    return pd.DataFrame({col: pd.Series(dtype=object) for col in BUSINESS_COLUMNS})


def normalize_businesses(rows: List[Dict[str, Any]]) -> Tuple[pd.DataFrame, int]:
    """Flatten raw registry rows into the business frame.

    Every column is a plain string with absent values defaulted to "".
    Rows without a location_account or repeating an earlier one are
    dropped; returns the frame and the number of rows dropped.
    """
    if not rows:
        return empty_businesses(), 0

    records = []
    for row in rows:
        rec = {col: _as_text(row.get(col)) for col in BUSINESS_COLUMNS if col not in ("latitude", "longitude")}
        rec["latitude"], rec["longitude"] = _split_location(row.get("location"))
        records.append(rec)

    df = pd.DataFrame.from_records(records, columns=BUSINESS_COLUMNS)
    keys = df["location_account"]
    blank = keys.str.strip().eq("")
    repeated = ~blank & keys.duplicated(keep="first")
    if blank.any():
        logger.warning("Dropped %d rows without a location_account", int(blank.sum()))
    if repeated.any():
        logger.warning("Dropped %d rows with a repeated location_account", int(repeated.sum()))
    keep = ~(blank | repeated)
    dropped = int((~keep).sum())
    df = df[keep].reset_index(drop=True)
    return df, dropped


def fetch_businesses_raw(
    limit: int = DEFAULT_LIMIT,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> List[Dict[str, Any]]:
    http = session or requests
    headers = {"Accept": "application/json"}
    if APP_TOKEN:
        headers["X-App-Token"] = APP_TOKEN

    try:
        response = http.get(API_URL, params=build_query_params(limit), headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise FetchTransportError(f"API Error: {exc}") from exc

    if not response.ok:
        raise FetchTransportError(f"API Error: {response.status_code} {response.reason or ''}".rstrip())

    try:
        data = response.json()
    except ValueError as exc:
        raise FetchDeserializationError(f"Malformed response body: {exc}") from exc

    if not isinstance(data, list):
        raise FetchDeserializationError(f"Expected a JSON array, got {type(data).__name__}")
    if any(not isinstance(row, dict) for row in data):
        raise FetchDeserializationError("Expected every element of the response to be a JSON object")
    return data


def _fetch_normalized(
    limit: int,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> Tuple[pd.DataFrame, int]:
    rows = fetch_businesses_raw(limit, session=session, timeout=timeout)
    df, dropped = normalize_businesses(rows)
    logger.info("Fetched %d businesses for zips: %s", len(df), ", ".join(ZIP_CODES))
    return df, dropped


def fetch_businesses(
    limit: int = DEFAULT_LIMIT,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> pd.DataFrame:
    df, _ = _fetch_normalized(limit, session=session, timeout=timeout)
    return df


# ---------------- Display helpers ----------------
def format_dba(dba_name: str) -> str:
    return ", ".join(part.strip() for part in (dba_name or "").split(DBA_DELIMITER) if part.strip())


def format_start_date(value: object) -> str:
    text = _as_text(value)
    if not text:
        return "N/A"
    ts = pd.to_datetime(text, errors="coerce")
    if pd.isna(ts):
        return "N/A"
    return f"{ts.strftime('%b')} {ts.day}, {ts.year}"


def build_maps_url(business_name: str, street_address: str, zip_code: str) -> str:
    query = f"{business_name} {street_address} {zip_code}"
    return MAPS_SEARCH_URL + quote(query, safe="-_.!~*'()")


def industry_label(description: str, fallback: str = "General Business") -> str:
    return description or fallback


# ---------------- Public API (Streamlit + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_businesses_cached(limit: int) -> Tuple[pd.DataFrame, int, str]:
    df, dropped = _fetch_normalized(limit)
    return df, dropped, datetime.now(timezone.utc).isoformat()


def load_business_data(limit: int = DEFAULT_LIMIT) -> Dict[str, object]:
    """Load the session's full collection; fetch failures become an empty context with an error."""
    try:
        df, dropped, fetched_at = _load_businesses_cached(int(limit))
    except FetchError:
        logger.exception("Failed to fetch business data")
        return {
            "businesses": empty_businesses(),
            "error": LOAD_ERROR_MESSAGE,
            "fetched_at": None,
            "zip_codes": list(ZIP_CODES),
            "keys_dropped": 0,
        }
    return {
        "businesses": df,
        "error": None,
        "fetched_at": fetched_at,
        "zip_codes": list(ZIP_CODES),
        "keys_dropped": dropped,
    }


def clear_cache() -> None:
    _load_businesses_cached.cache_clear()


def prepare_context(filters: dict | BusinessFilters, data_ctx: Dict[str, object]) -> Dict[str, object]:
    businesses = data_ctx.get("businesses")
    if not isinstance(businesses, pd.DataFrame):
        businesses = empty_businesses()

    filt = filters if isinstance(filters, BusinessFilters) else normalize_filters(filters)
    filtered = filter_businesses(businesses, filt)

    return {
        "filters": filt,
        "businesses": businesses,
        "filtered_businesses": filtered,
        "valid_keys": frozenset(businesses["location_account"].tolist()),
        "error": data_ctx.get("error"),
        "fetched_at": data_ctx.get("fetched_at"),
        "keys_dropped": int(data_ctx.get("keys_dropped", 0) or 0),
    }
