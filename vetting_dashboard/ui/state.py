"""
Session-scoped working copies of the mutable tables.

Pages apply actions to these copies so optimistic updates survive reruns
until the user refreshes the data. All keys share the ``vd_`` prefix.
"""

from __future__ import annotations

from typing import Callable, Optional

import pandas as pd
import streamlit as st

from vetting_dashboard.config import Settings
from vetting_dashboard.data.actions import ActionError
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.logger import get_logger

STATE_PREFIX = "vd_"
MUTABLE_TABLES = ("cases", "consents", "reports", "tasks", "schedules", "schedule_runs")
FLASH_KEY = "vd_flash"

logger = get_logger()


def _table_key(name: str) -> str:
    return f"{STATE_PREFIX}table_{name}"


def session_reference_time(settings: Settings) -> pd.Timestamp:
    """Pin the reference time for the session so flags stay stable between reruns."""
    if "vd_as_of" not in st.session_state:
        st.session_state["vd_as_of"] = settings.reference_time()
    return st.session_state["vd_as_of"]


def clear_state_prefixes(prefixes) -> None:
    for prefix in prefixes:
        for key in list(st.session_state.keys()):
            if str(key).startswith(prefix):
                del st.session_state[key]


def reset_session_data() -> None:
    clear_state_prefixes([f"{STATE_PREFIX}table_", "vd_as_of", "vd_bundle_token"])


def working_bundle(bundle: DataBundle) -> DataBundle:
    """Overlay the session's working tables on a freshly loaded bundle."""
    token = (bundle.diagnostics.get("source"), bundle.diagnostics.get("as_of"), bundle.diagnostics.get("seed"))
    if st.session_state.get("vd_bundle_token") != token:
        clear_state_prefixes([f"{STATE_PREFIX}table_"])
        st.session_state["vd_bundle_token"] = token
    overrides = {}
    for name in MUTABLE_TABLES:
        key = _table_key(name)
        if key not in st.session_state:
            st.session_state[key] = getattr(bundle, name)
        overrides[name] = st.session_state[key]
    return bundle.with_tables(**overrides)


def get_table(name: str) -> pd.DataFrame:
    return st.session_state[_table_key(name)]


def set_table(name: str, df: pd.DataFrame) -> None:
    st.session_state[_table_key(name)] = df


def flash(message: str, icon: str = "✅") -> None:
    st.session_state[FLASH_KEY] = (message, icon)


def show_flash() -> None:
    message = st.session_state.pop(FLASH_KEY, None)
    if message:
        st.toast(message[0], icon=message[1])


def run_action(table: str, func: Callable, *args, success: Optional[str] = None, **kwargs) -> bool:
    """Apply `func` to the working copy of `table`, persist it and rerun.

    ActionError is shown to the user and leaves the table unchanged.
    """
    try:
        updated = func(get_table(table), *args, **kwargs)
    except ActionError as exc:
        st.error(str(exc))
        return False
    set_table(table, updated)
    if success:
        flash(success)
    st.rerun()
    return True
