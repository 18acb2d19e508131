import altair as alt
import pandas as pd
import streamlit as st
from dataclasses import replace
from typing import Dict, List, Optional

from explorer.charts import build_chart
from explorer.dataset import Dataset, load_dataset
from explorer.export import export_data
from explorer.projection import CHART_KINDS
from explorer.selection import ExplorerSelection
from explorer.session import (
    ExplorerSession,
    compute_chart,
    compute_quality,
    compute_statistics,
    compute_table,
)

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def format_dataset_summary(dataset: Dataset, numeric_columns: List[str]) -> str:
    chips = [
        f"{dataset.row_count} rows",
        f"{dataset.column_count} columns",
        f"{len(numeric_columns)} numeric",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, summary_html: str, dataset: Dataset, file_name: str):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        export_name, content, mime = export_data(file_name, dataset, "csv")
        st.download_button("Export CSV", data=content, file_name=export_name, mime=mime)
    st.markdown(f"<div class='chip-row'>{summary_html}</div>", unsafe_allow_html=True)


@st.cache_resource(max_entries=4)
def load_uploaded(content: bytes, file_name: str) -> Dataset:
    return load_dataset(content, file_name)


def current_session(dataset: Dataset) -> ExplorerSession:
    session: Optional[ExplorerSession] = st.session_state.get("session")
    if session is None or session.dataset is not dataset:
        session = ExplorerSession(dataset)
        st.session_state["session"] = session
        st.session_state["selection"] = ExplorerSelection()
    return session


def update_selection(**changes) -> ExplorerSelection:
    selection = replace(st.session_state["selection"], **changes)
    st.session_state["selection"] = selection
    return selection


# ---------- UI setup ----------
st.set_page_config(page_title="Tabular Explorer", layout="wide")
inject_base_styles()

uploaded = st.sidebar.file_uploader("Upload a spreadsheet", type=["csv", "txt", "xlsx", "xlsm"])
if uploaded is None:
    st.info("Upload a CSV or XLSX file to start exploring.")
    st.stop()

try:
    dataset = load_uploaded(uploaded.getvalue(), uploaded.name)
except Exception as exc:
    st.error(f"Could not read {uploaded.name}: {exc}")
    st.stop()

session = current_session(dataset)
selection: ExplorerSelection = st.session_state["selection"]
stats_payload = compute_statistics(selection, session)

render_page_header(
    uploaded.name,
    "Data Explorer",
    format_dataset_summary(dataset, stats_payload["numeric_columns"]),
    dataset,
    uploaded.name,
)

table_tab, stats_tab, chart_tab, quality_tab = st.tabs(["Table", "Statistics", "Chart", "Quality"])


def render_table():
    cols = st.columns([4, 2, 2])
    sort_target = cols[0].selectbox("Sort by", options=list(dataset.columns), key="sort_target")
    if cols[1].button("Toggle sort") and sort_target:
        st.session_state["selection"] = st.session_state["selection"].toggle_sort(sort_target)
    current: ExplorerSelection = st.session_state["selection"]
    payload = compute_table(current, session)
    if payload["total_pages"] > 1:
        page = cols[2].number_input(
            f"Page (of {payload['total_pages']})",
            min_value=1,
            max_value=payload["total_pages"],
            value=payload["page"],
            step=1,
        )
        if int(page) != current.page:
            current = update_selection(page=int(page))
            payload = compute_table(current, session)
    sort = payload["sort"]
    if sort["column"]:
        st.caption(f"Sorted by {sort['column']} ({sort['direction']})")
    st.dataframe(pd.DataFrame(payload["display_rows"], columns=payload["columns"]), hide_index=True, use_container_width=True)


def render_statistics(payload: Dict):
    if not payload["numeric_columns"]:
        st.info("No numeric columns found.")
        return
    for col, stats in payload["columns"].items():
        st.markdown(f"**{col}**")
        cols = st.columns(6)
        cols[0].metric("Count", f"{stats['count']}")
        for tile, key in zip(cols[1:], ["mean", "median", "std", "min", "max"]):
            tile.metric(key.capitalize(), f"{stats[key]:.2f}")


def render_chart():
    current: ExplorerSelection = st.session_state["selection"]
    payload = compute_chart(current, session, include_spec=False)
    if payload["x_column"] is None or payload["y_column"] is None:
        st.info("No numeric column available for the Y axis.")
        return

    cols = st.columns([3, 3, 2, 2])
    x_options = payload["valid_x_columns"] or list(dataset.columns)
    y_options = payload["valid_y_columns"] or [payload["y_column"]]
    x_col = cols[0].selectbox("X axis", x_options, index=x_options.index(payload["x_column"]) if payload["x_column"] in x_options else 0)
    y_col = cols[1].selectbox("Y axis", y_options, index=y_options.index(payload["y_column"]) if payload["y_column"] in y_options else 0)
    kind = cols[2].selectbox("Chart", list(CHART_KINDS), index=CHART_KINDS.index(current.chart_kind))
    show_trend = cols[3].checkbox("Trend line", value=current.show_trend)
    if (x_col, y_col, kind, show_trend) != (current.x_column, current.y_column, current.chart_kind, current.show_trend):
        current = update_selection(x_column=x_col, y_column=y_col, chart_kind=kind, show_trend=show_trend)
        payload = compute_chart(current, session, include_spec=False)

    for message in payload["warnings"]:
        st.warning(message)
    projection = session.projection(current.x_column, current.y_column, current.chart_kind, current.show_trend)
    st.altair_chart(build_chart(projection, current.chart_kind).properties(height=360), use_container_width=True)
    if payload["trend"] is not None and current.chart_kind != "pie":
        st.caption(f"Linear regression: {payload['trend']['equation']} (trend {payload['trend']['direction']})")


def render_quality():
    payload = compute_quality(st.session_state["selection"], session)
    cols = st.columns(4)
    cols[0].metric("Quality score", f"{payload['score']:.0f}%")
    empty_ratio = payload["empty_ratio"]
    cols[1].metric(
        "Empty cells",
        f"{payload['empty_cells']}",
        delta=f"{empty_ratio:.1%}" if empty_ratio is not None else "N/A",
        delta_color="off",
    )
    duplicate_ratio = payload["duplicate_ratio"]
    cols[2].metric(
        "Duplicate rows",
        f"{payload['duplicate_row_count']}",
        delta=f"{duplicate_ratio:.1%}" if duplicate_ratio is not None else "N/A",
        delta_color="off",
    )
    cols[3].metric("Outliers", f"{payload['total_outliers']}")
    per_column = pd.DataFrame.from_dict(payload["per_column"], orient="index")
    if not per_column.empty:
        st.dataframe(per_column, use_container_width=True)


with table_tab:
    render_table()
with stats_tab:
    render_statistics(stats_payload)
with chart_tab:
    render_chart()
with quality_tab:
    render_quality()
