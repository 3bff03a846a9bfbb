import logging
import os
from contextlib import contextmanager
from typing import Dict, List, Optional

import pandas as pd
import pydeck as pdk
import streamlit as st

from core import data as dc
from core.filters import ALL_ZIPS, normalize_filters, reset_filters
from core.metrics_explorer import compute_explorer
from core.metrics_map import compute_map
from core.metrics_stats import compute_stats
from core.selection import (
    LIST,
    MAP,
    ViewState,
    clear_selection,
    reconcile_selection,
    select_business,
    set_active_surface,
    toggle_stats,
)

logging.basicConfig(level=os.getenv("BIZ_PULSE_LOG_LEVEL", "INFO").upper())


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e2e8f0;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #0f172a;margin-bottom: 8px;}
        .record-count {font-size: 0.7rem;font-weight: 800;color: #94a3b8;text-transform: uppercase;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def get_view_state() -> ViewState:
    return st.session_state.setdefault("view_state", ViewState())


def set_view_state(state: ViewState) -> None:
    st.session_state["view_state"] = state


def on_select(key: str, valid_keys: frozenset) -> None:
    set_view_state(select_business(get_view_state(), key, valid_keys))


def on_reset_filters() -> None:
    defaults = reset_filters()
    st.session_state["search_text"] = defaults.search_text
    st.session_state["zip_code"] = defaults.zip_code


# ---------- UI setup ----------
st.set_page_config(page_title="LA Business Pulse", layout="wide")
inject_base_styles()

# Fetched once per session; a failed load stays failed until the session restarts.
if "data_ctx" not in st.session_state:
    with st.spinner("Syncing with LA Open Data..."):
        st.session_state["data_ctx"] = dc.load_business_data()
data_ctx: Dict[str, object] = st.session_state["data_ctx"]

if data_ctx.get("error") and not st.session_state.get("_error_dismissed"):
    err_cols = st.columns([10, 1])
    err_cols[0].error(f"**Sync Failure:** {data_ctx['error']}")
    if err_cols[1].button("✕", key="dismiss_error", help="Dismiss"):
        st.session_state["_error_dismissed"] = True
        st.rerun()

zip_values: List[str] = [v for v, _ in dc.ZIP_OPTIONS]
zip_labels = dict(dc.ZIP_OPTIONS)

# ----- Sidebar: search + filters -----
with st.sidebar:
    st.markdown("## 🏢 LA Business Pulse")
    st.caption("HOLLYWOOD & WEST HOLLYWOOD HUB")
    search_text = st.text_input("Search", key="search_text", placeholder="Search names, DBAs, or industries...")
    zip_code = st.selectbox("Area code", options=zip_values, format_func=lambda v: zip_labels.get(v, v), key="zip_code")
    if st.button("📊 Toggle Analytics", use_container_width=True):
        set_view_state(toggle_stats(get_view_state()))

filters = normalize_filters({"search_text": search_text, "zip_code": zip_code or ALL_ZIPS})
ctx = dc.prepare_context(filters, data_ctx)
filtered_businesses: pd.DataFrame = ctx["filtered_businesses"]

view_state = reconcile_selection(get_view_state(), ctx["valid_keys"])
set_view_state(view_state)


# ----- Page renderers -----
def render_stats_panel():
    stats = compute_stats(filters, ctx)
    cols = st.columns(2)
    cols[0].metric("Total Businesses", f"{stats['totals']['total']:,}")
    cols[1].metric("Unique Industries", f"{stats['totals']['unique_industries']:,}")
    with card(f"Top {filters.top_n} Industries"):
        if "top_industries" in stats["charts"]:
            st.vega_lite_chart(stats["charts"]["top_industries"], use_container_width=True)
        else:
            st.info("No businesses match the current filters.")
    with card("Zip Code Distribution"):
        if "zip_distribution" in stats["charts"]:
            st.vega_lite_chart(stats["charts"]["zip_distribution"], use_container_width=True)
            st.caption(" · ".join(f"{b['label']} ({b['count']})" for b in stats["zip_distribution"]))
        else:
            st.info("No businesses match the current filters.")


def render_business_list(selected_key: Optional[str], *, surface: str):
    explorer = compute_explorer(filters, ctx, selected_key=selected_key)
    st.markdown(f"<span class='record-count'>{explorer['count']} Active Records</span>", unsafe_allow_html=True)
    if not explorer["rows"]:
        st.markdown("**No matching businesses**")
        st.caption("Try adjusting your search or zip code filter.")
        st.button("Reset All Filters", key=f"reset_{surface}", on_click=on_reset_filters)
        return
    for row in explorer["rows"]:
        label = f"{'▶ ' if row['selected'] else ''}{row['name']}\n\n{row['street_address']} • {row['zip_code']} | {row['industry']}"
        st.button(
            label,
            key=f"{surface}_biz_{row['key']}",
            on_click=on_select,
            args=(row["key"], ctx["valid_keys"]),
            use_container_width=True,
        )


def render_map(selected_key: Optional[str]):
    payload = compute_map(filters, ctx, selected_key=selected_key)
    markers = pd.DataFrame(payload["markers"])
    layers = []
    if not markers.empty:
        markers["fill"] = markers["color"].apply(lambda c: [int(c[i : i + 2], 16) for i in (1, 3, 5)] + [204])
        layers.append(
            pdk.Layer(
                "ScatterplotLayer",
                data=markers,
                get_position="[lon, lat]",
                get_fill_color="fill",
                get_line_color=[255, 255, 255],
                get_radius="radius",
                radius_units="pixels",
                line_width_min_pixels=2,
                stroked=True,
                pickable=True,
            )
        )
    deck = pdk.Deck(
        layers=layers,
        initial_view_state=pdk.ViewState(
            latitude=payload["center"]["lat"],
            longitude=payload["center"]["lon"],
            zoom=payload["zoom"] + (2 if payload["selected"] is not None else 0),
        ),
        map_style="light",
        tooltip={"html": "<b>{name}</b><br/>{address}, {zip_code}<br/><i>{industry}</i>"},
    )
    st.pydeck_chart(deck, use_container_width=True)


def render_detail_card(selected_key: str):
    detail = compute_explorer(filters, ctx, selected_key=selected_key)["detail"]
    if detail is None:
        return
    with card(detail["name"]):
        if detail["dba"]:
            st.caption(f"DBA: {detail['dba']}")
        cols = st.columns(2)
        cols[0].markdown(f"**Location**  \n{detail['street_address']}  \n{detail['city']}, CA {detail['zip_code']}")
        cols[1].markdown(f"**Classification**  \n{detail['industry']}  \nCODE: `{detail['naics']}`")
        cols = st.columns(2)
        cols[0].markdown(f"**Council**  \nDistrict {detail['council_district']}")
        cols[1].markdown(f"**Active Since**  \n{detail['start_date']}")
        btn_cols = st.columns(2)
        btn_cols[0].link_button("Open in Maps ↗", detail["maps_url"], use_container_width=True)
        if btn_cols[1].button("Dismiss", use_container_width=True):
            set_view_state(clear_selection(get_view_state()))
            st.rerun()


# ----- Sidebar body: list or stats -----
with st.sidebar:
    if view_state.show_stats:
        render_stats_panel()
    else:
        render_business_list(view_state.selected_key, surface="sidebar")

# ----- Main surface -----
surface = st.radio(
    "View",
    [MAP, LIST],
    index=0 if view_state.active_surface == MAP else 1,
    format_func=lambda s: "🗺 Map" if s == MAP else "☰ Explorer",
    horizontal=True,
    label_visibility="collapsed",
)
if surface != view_state.active_surface:
    view_state = set_active_surface(view_state, surface)
    set_view_state(view_state)

if view_state.active_surface == MAP:
    render_map(view_state.selected_key)
    if view_state.selected_key is not None:
        render_detail_card(view_state.selected_key)
else:
    cols = st.columns([6, 1])
    cols[0].markdown(f"<span class='record-count'>{len(filtered_businesses)} Results</span>", unsafe_allow_html=True)
    cols[1].button("Clear All", on_click=on_reset_filters)
    render_business_list(view_state.selected_key, surface="main")

st.caption(f"Source: LA City Open Data · fetched {data_ctx.get('fetched_at') or 'n/a'}")
