"""
Layout helpers for the Streamlit application (page setup, sidebar status).
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from vetting_dashboard.config import Settings
from vetting_dashboard.data.filters import ALL
from vetting_dashboard.ui.components.formatting import format_datetime, format_number


def setup_page() -> None:
    """Set Streamlit page configuration and top-level styling."""
    st.set_page_config(
        page_title="Vetting Operations Dashboard",
        layout="wide",
        page_icon=":shield:",
    )
    # Inject a small CSS override for PRIMARY buttons in the sidebar to appear as "danger" (red)
    _inject_sidebar_primary_button_red()


def render_sidebar_status(
    settings: Settings, diagnostics: Dict, as_of: pd.Timestamp, row_counts: Optional[Dict[str, int]] = None
) -> None:
    """Sidebar data status. `row_counts` should describe the working tables, not the cached load."""
    st.sidebar.header("Data")
    source = diagnostics.get("source", settings.data_source)
    label = "Google Sheet" if source == "gsheet" else f"Sample data (seed {settings.sample_seed})"
    st.sidebar.markdown(f"**Source:** {label}")
    st.sidebar.markdown(f"**Reference time:** {format_datetime(as_of)} UTC")
    if diagnostics.get("fallback_reason"):
        st.sidebar.warning(f"Fell back to sample data: {diagnostics['fallback_reason']}")
    counts = row_counts if row_counts is not None else diagnostics.get("row_counts", {})
    if counts:
        with st.sidebar.expander("Row counts", expanded=False):
            for name, count in counts.items():
                st.write(f"- {name.replace('_', ' ').title()}: {format_number(count)}")


def filter_selectbox(
    label: str,
    options: List[str],
    key: str,
    counts: Optional[pd.Series] = None,
) -> str:
    """Select box whose first option is "all"; labels show row counts when given."""
    values = counts.value_counts(dropna=False).to_dict() if counts is not None else {}

    def _label(value: str) -> str:
        if value == ALL:
            return "All"
        if values:
            return f"{value} ({int(values.get(value, 0))})"
        return value

    return st.selectbox(label, [ALL] + list(options), key=key, format_func=_label)


def _inject_sidebar_primary_button_red() -> None:
    """Style PRIMARY buttons in the sidebar as red (danger-like) so reset actions stand out."""
    st.sidebar.markdown(
        """
        <style>
        div[data-testid="stSidebar"] button[kind="primary"],
        div[data-testid="stSidebar"] button[data-testid="baseButton-primary"] {
            background-color: #e53935 !important;
            border-color: #e53935 !important;
            color: #ffffff !important;
        }
        div[data-testid="stSidebar"] button[kind="primary"]:hover,
        div[data-testid="stSidebar"] button[data-testid="baseButton-primary"]:hover {
            background-color: #c62828 !important;
            border-color: #c62828 !important;
            color: #ffffff !important;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )
