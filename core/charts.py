from __future__ import annotations

from typing import Any, Dict, List, Sequence

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

COLORS: List[str] = ["#6366f1", "#8b5cf6", "#ec4899", "#f43f5e", "#f59e0b", "#10b981"]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _palette(n: int) -> List[str]:
    return [COLORS[i % len(COLORS)] for i in range(n)]


def industry_bar_chart(buckets: Sequence[Any]) -> alt.Chart:
    df = pd.DataFrame([{"label": b.label, "name": b.name, "count": b.count} for b in buckets], columns=["label", "name", "count"])
    labels = df["label"].tolist()
    return (
        alt.Chart(df)
        .mark_bar(cornerRadiusTopRight=4, cornerRadiusBottomRight=4)
        .encode(
            x=alt.X("count:Q", axis=None),
            y=alt.Y("label:N", sort=None, title=None, axis=alt.Axis(labelFontSize=10, domain=False, ticks=False)),
            color=alt.Color("label:N", scale=alt.Scale(domain=labels, range=_palette(len(labels))), legend=None),
            tooltip=[alt.Tooltip("name:N", title="Industry"), alt.Tooltip("count:Q", title="Businesses", format=",")],
        )
        .properties(height=200)
    )


def zip_donut_chart(buckets: Sequence[Any]) -> alt.Chart:
    df = pd.DataFrame([{"label": b.label, "count": b.count} for b in buckets], columns=["label", "count"])
    labels = df["label"].tolist()
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=40, outerRadius=60, padAngle=0.05)
        .encode(
            theta=alt.Theta("count:Q"),
            color=alt.Color(
                "label:N",
                sort=labels,
                scale=alt.Scale(domain=labels, range=_palette(len(labels))),
                legend=alt.Legend(title=None, orient="bottom"),
            ),
            tooltip=[alt.Tooltip("label:N", title="Zip Code"), alt.Tooltip("count:Q", title="Businesses", format=",")],
        )
        .properties(height=180)
    )
