from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class BusinessFiltersModel(BaseModel):
    search_text: str = ""
    zip_code: str = "All"
    top_n: int = Field(default=5, ge=1, le=50)


class ZipOptionModel(BaseModel):
    value: str
    label: str


class MetaZipCodesResponse(BaseModel):
    zip_codes: List[ZipOptionModel]


class HealthResponse(BaseModel):
    status: str
    records: int
    error: Optional[str] = None
