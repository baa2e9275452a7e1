"""
Utility helpers for formatting numeric values, currency strings, percentages
and timestamps.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from vetting_dashboard.config import CURRENCY

SCALE_FACTORS = [
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
]

MISSING = "–"


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def format_number(value: Optional[float], decimals: int = 0) -> str:
    if _is_missing(value):
        return MISSING
    try:
        return f"{value:,.{decimals}f}"
    except (TypeError, ValueError):
        return MISSING


def _scale_value(value: float):
    for factor, suffix in SCALE_FACTORS:
        if abs(value) >= factor:
            return value / factor, suffix
    return value, ""


def format_currency(
    value: Optional[float],
    currency: str = CURRENCY,
    decimals: int = 0,
    compact: bool = True,
) -> str:
    if _is_missing(value):
        return MISSING
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return MISSING

    suffix = ""
    display_value = numeric
    if compact:
        display_value, suffix = _scale_value(numeric)
        if suffix and decimals == 0:
            decimals = 1
    formatted = f"{display_value:,.{decimals}f}"
    return f"{currency} {formatted}{suffix}"


def format_percent(value: Optional[float], decimals: int = 1) -> str:
    if _is_missing(value):
        return MISSING
    try:
        return f"{value:.{decimals}f}%"
    except (TypeError, ValueError):
        return MISSING


def format_date(value, fmt: str = "%d %b %Y") -> str:
    if _is_missing(value):
        return MISSING
    try:
        return pd.Timestamp(value).strftime(fmt)
    except (TypeError, ValueError):
        return MISSING


def format_datetime(value) -> str:
    return format_date(value, "%d %b %Y %H:%M")


def format_time_ago(value, as_of: pd.Timestamp) -> str:
    """Compact relative time such as '5m ago', '3h ago' or 'in 2d'."""
    if _is_missing(value):
        return MISSING
    seconds = (as_of - pd.Timestamp(value)).total_seconds()
    future = seconds < 0
    seconds = abs(seconds)
    if seconds < 3600:
        text = f"{int(seconds // 60)}m"
    elif seconds < 86400:
        text = f"{int(seconds // 3600)}h"
    else:
        text = f"{int(seconds // 86400)}d"
    return f"in {text}" if future else f"{text} ago"
