from __future__ import annotations

from typing import Optional

import streamlit as st

from vetting_dashboard.data.models import BADGE_ICONS

BADGE_COLORS = {
    "success": "#10b981",
    "info": "#3b82f6",
    "warning": "#f59e0b",
    "danger": "#ef4444",
    "default": "#6b7280",
}


def badge_text(value: Optional[str], variant: str = "default") -> str:
    """Plain-text badge for tables: an icon dot followed by the label."""
    if value is None or value != value:
        return "–"
    return f"{BADGE_ICONS.get(variant, BADGE_ICONS['default'])} {value}"


def render_badge(value: str, variant: str = "default") -> None:
    color = BADGE_COLORS.get(variant, BADGE_COLORS["default"])
    st.markdown(
        f"<span style='background:{color};color:white;padding:2px 10px;border-radius:12px;"
        f"font-size:0.8rem;font-weight:600'>{value}</span>",
        unsafe_allow_html=True,
    )
