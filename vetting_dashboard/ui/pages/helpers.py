from __future__ import annotations

from typing import Dict, Optional, Sequence

import pandas as pd
import streamlit as st

from vetting_dashboard.data.filters import SortState, paginate, sort_frame


def _on_sort_column(state_key: str) -> None:
    state: SortState = st.session_state[state_key]
    st.session_state[state_key] = state.toggle(st.session_state[f"{state_key}_key"])


def _on_sort_direction(state_key: str) -> None:
    state: SortState = st.session_state[state_key]
    st.session_state[state_key] = state.toggle(state.key)


def sort_controls(
    df: pd.DataFrame,
    key: str,
    sortable: Dict[str, str],
    default: Optional[str] = None,
    ascending: bool = True,
) -> pd.DataFrame:
    """Column picker plus a direction toggle backed by a SortState in session state."""
    state_key = f"vd_sort_{key}"
    options = list(sortable.keys())
    if state_key not in st.session_state:
        st.session_state[state_key] = SortState(default or options[0], ascending)
    state: SortState = st.session_state[state_key]

    col_key, col_dir = st.columns([3, 1])
    with col_key:
        st.selectbox(
            "Sort by",
            options,
            index=options.index(state.key) if state.key in options else 0,
            format_func=sortable.get,
            key=f"{state_key}_key",
            on_change=_on_sort_column,
            args=(state_key,),
        )
    with col_dir:
        st.write("")
        st.button(
            "⬆️ Asc" if state.ascending else "⬇️ Desc",
            key=f"{state_key}_dir",
            on_click=_on_sort_direction,
            args=(state_key,),
        )
    return sort_frame(df, st.session_state[state_key])


def paginate_controls(df: pd.DataFrame, key: str, page_sizes: Sequence[int] = (10, 25, 50)) -> pd.DataFrame:
    col_size, col_page, col_info = st.columns([1, 1, 2])
    with col_size:
        size = st.selectbox("Rows per page", list(page_sizes), key=f"vd_page_size_{key}")
    _, pages = paginate(df, 1, size)
    page_key = f"vd_page_{key}"
    if st.session_state.get(page_key, 1) > pages:
        st.session_state[page_key] = pages
    with col_page:
        page = st.number_input("Page", min_value=1, max_value=pages, step=1, key=page_key)
    page_df, pages = paginate(df, page, size)
    with col_info:
        st.write("")
        st.caption(f"Page {min(page, pages)} of {pages} · {len(df):,} rows")
    return page_df


def severity_icon(severity: str) -> str:
    return {
        "Critical": "🔴",
        "High": "🟠",
        "Medium": "🟡",
        "Informational": "🔵",
    }.get(severity, "⚪")
