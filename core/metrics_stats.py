from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import pandas as pd

from core.charts import industry_bar_chart, to_vega_spec, zip_donut_chart
from core.filters import BusinessFilters


INDUSTRY_FIELD = "primary_naics_description"
ZIP_FIELD = "zip_code"
CODE_FIELD = "naics"

SENTINEL_LABEL = "Other"
MAX_LABEL_LEN = 25
ELLIPSIS = "..."


@dataclass(frozen=True)
class AggregateBucket:
    label: str
    count: int
    name: str = ""


def truncate_label(name: str, max_len: Optional[int] = MAX_LABEL_LEN) -> str:
    # Distinct names sharing a prefix can end up with the same display label.
    if max_len is None or len(name) <= max_len:
        return name
    return name[:max_len] + ELLIPSIS


def aggregate_by_field(
    df: pd.DataFrame,
    field: str,
    top_n: Optional[int] = None,
    *,
    empty_label: str = SENTINEL_LABEL,
    max_label_len: Optional[int] = None,
) -> List[AggregateBucket]:
    """Count records per value of `field`.

    Groups come out in first-appearance order. With `top_n` they are sorted
    by count descending (stable, so ties keep first-appearance order) and
    cut to `top_n`. Blank values are counted under `empty_label`.
    """
    if df.empty:
        return []

    values = df[field] if field in df.columns else pd.Series("", index=df.index)
    labels = values.fillna("").astype(str).replace("", empty_label)
    counts = labels.groupby(labels, sort=False).size()

    if top_n is not None:
        counts = counts.sort_values(ascending=False, kind="stable").head(max(0, int(top_n)))

    return [
        AggregateBucket(label=truncate_label(str(name), max_label_len), count=int(n), name=str(name))
        for name, n in counts.items()
    ]


def top_industries(df: pd.DataFrame, top_n: int = 5) -> List[AggregateBucket]:
    return aggregate_by_field(df, INDUSTRY_FIELD, top_n, max_label_len=MAX_LABEL_LEN)


def zip_distribution(df: pd.DataFrame) -> List[AggregateBucket]:
    return aggregate_by_field(df, ZIP_FIELD)


def compute_totals(df: pd.DataFrame) -> Dict[str, int]:
    if df.empty:
        return {"total": 0, "unique_industries": 0}
    codes = df[CODE_FIELD].fillna("").astype(str) if CODE_FIELD in df.columns else pd.Series("", index=df.index)
    return {"total": int(len(df)), "unique_industries": int(codes.nunique(dropna=False))}


def compute_stats(filters: BusinessFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_businesses", pd.DataFrame())

    industries = top_industries(df, filters.top_n)
    zips = zip_distribution(df)

    charts: Dict[str, Any] = {}
    if industries:
        charts["top_industries"] = to_vega_spec(industry_bar_chart(industries))
    if zips:
        charts["zip_distribution"] = to_vega_spec(zip_donut_chart(zips))

    return {
        "filters": asdict(filters),
        "error": ctx.get("error"),
        "totals": compute_totals(df),
        "top_industries": [asdict(b) for b in industries],
        "zip_distribution": [asdict(b) for b in zips],
        "charts": charts,
    }
