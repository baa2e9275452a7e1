"""
Reusable helpers for rendering data tables with consistent configuration.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from vetting_dashboard.config import CURRENCY
from vetting_dashboard.ui.components.badges import badge_text
from vetting_dashboard.ui.components.formatting import (
    format_currency,
    format_date,
    format_datetime,
    format_number,
    format_percent,
)


def format_frame(df: pd.DataFrame, column_config: Optional[Dict[str, Dict[str, Any]]] = None) -> pd.DataFrame:
    """Apply display formatting per column. Types: currency, percent, number, date, datetime, list, badge."""
    formatted_df = df.copy()
    for column, config in (column_config or {}).items():
        if column not in formatted_df.columns:
            continue
        fmt_type = config.get("type")
        if fmt_type == "currency":
            currency = config.get("currency", CURRENCY)
            decimals = int(config.get("decimals", 0))
            compact = bool(config.get("compact", False))
            formatted_df[column] = formatted_df[column].apply(
                lambda v: format_currency(v, currency=currency, decimals=decimals, compact=compact)
            )
        elif fmt_type == "percent":
            decimals = int(config.get("decimals", 0))
            formatted_df[column] = formatted_df[column].apply(lambda v: format_percent(v, decimals=decimals))
        elif fmt_type == "number":
            decimals = int(config.get("decimals", 0))
            formatted_df[column] = formatted_df[column].apply(lambda v: format_number(v, decimals=decimals))
        elif fmt_type == "date":
            formatted_df[column] = formatted_df[column].apply(format_date)
        elif fmt_type == "datetime":
            formatted_df[column] = formatted_df[column].apply(format_datetime)
        elif fmt_type == "list":
            formatted_df[column] = formatted_df[column].apply(
                lambda v: ", ".join(map(str, v)) if isinstance(v, list) else v
            )
        elif fmt_type == "badge":
            variants = config.get("variants", {})
            formatted_df[column] = formatted_df[column].apply(
                lambda v: badge_text(v, variants.get(v, "default"))
            )
    return formatted_df


def render_table(
    df: pd.DataFrame,
    column_config: Optional[Dict[str, Dict[str, Any]]] = None,
    columns: Optional[List[str]] = None,
    labels: Optional[Dict[str, str]] = None,
    height: int = 400,
    show_index: bool = False,
    export_file_name: str = "export.csv",
    key: Optional[str] = None,
) -> None:
    if df.empty:
        st.info("No data to display.")
        return

    view = df[[c for c in columns if c in df.columns]] if columns else df
    formatted_df = format_frame(view, column_config)
    if labels:
        formatted_df = formatted_df.rename(columns=labels)

    st.dataframe(
        formatted_df,
        width="stretch",
        height=height,
        hide_index=not show_index,
    )

    csv_bytes = view.to_csv(index=show_index).encode("utf-8")
    st.download_button(
        "Download CSV",
        data=csv_bytes,
        file_name=export_file_name,
        mime="text/csv",
        key=f"download_{key or export_file_name}",
    )
