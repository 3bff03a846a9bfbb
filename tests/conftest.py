import os
import socket
import sys
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from core import data as dc  # noqa: E402


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    if os.getenv("LIVE") == "1":
        return

    real_connect = socket.socket.connect

    def guarded_connect(sock, address):
        host = address[0]
        if host not in ("127.0.0.1", "localhost"):
            raise RuntimeError("Network access blocked in tests")
        return real_connect(sock, address)

    monkeypatch.setattr(socket.socket, "connect", guarded_connect)


@pytest.fixture(autouse=True)
def fresh_cache():
    dc.clear_cache()
    yield
    dc.clear_cache()


@pytest.fixture
def raw_rows():
    return [
        {
            "location_account": "0000001-0001-1",
            "business_name": "SUNSET RECORDS LLC",
            "dba_name": "SUNSET VINYL|SUNSET RECORDS",
            "street_address": "7000 SUNSET BLVD",
            "city": "LOS ANGELES",
            "zip_code": "90046-1234",
            "primary_naics_description": "Retail",
            "naics": "451200",
            "council_district": "4",
            "location_start_date": "2024-03-05T00:00:00.000",
            "location": {"latitude": "34.0981", "longitude": "-118.3445"},
        },
        {
            "location_account": "0000002-0001-1",
            "business_name": "HILLS HARDWARE",
            "street_address": "2100 N BEACHWOOD DR",
            "city": "LOS ANGELES",
            "zip_code": "90068",
            "primary_naics_description": "Retail",
            "naics": "444130",
            "location_start_date": "2023-11-01T00:00:00.000",
            "location": {"latitude": "34.1105", "longitude": "-118.3210"},
        },
        {
            "location_account": "0000003-0001-1",
            "business_name": "WEHO CONSULTING",
            "dba_name": None,
            "street_address": "9000 SANTA MONICA BLVD",
            "city": "WEST HOLLYWOOD",
            "zip_code": "90069-5",
            "naics": "451200",
            "location": {"latitude": "not-a-number", "longitude": "-118.38"},
        },
        {
            "location_account": "0000004-0001-1",
            "business_name": "FOUNTAIN BAKERY",
            "street_address": "1200 N FAIRFAX AVE",
            "city": "WEST HOLLYWOOD",
            "zip_code": "90046",
            "primary_naics_description": "Full-service restaurants and bakeries",
            "naics": "722511",
            "location_start_date": "2022-06-15T00:00:00.000",
        },
    ]


@pytest.fixture
def businesses(raw_rows):
    df, _ = dc.normalize_businesses(raw_rows)
    return df


@pytest.fixture
def data_ctx(businesses):
    return {
        "businesses": businesses,
        "error": None,
        "fetched_at": "2026-10-19T00:00:00+00:00",
        "zip_codes": list(dc.ZIP_CODES),
        "keys_dropped": 0,
    }
