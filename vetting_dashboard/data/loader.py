import os
from typing import Dict, List, Optional, Set, Tuple

import gspread
import pandas as pd
import streamlit as st
from google.oauth2.service_account import Credentials

from vetting_dashboard.config import Settings
from vetting_dashboard.data.bundle import DataBundle, empty_table
from vetting_dashboard.data.models import (
    BOOLEAN_COLUMNS,
    DATE_COLUMNS,
    LIST_COLUMNS,
    NUMERIC_COLUMNS,
    TABLE_COLUMNS,
)
from vetting_dashboard.data.samples import build_sample_bundle
from vetting_dashboard.logger import get_logger

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]

SENTINELS: Set[str] = {"", "None", "none", "N/A", "n/a", "NA", "na", "null", "Null", "-", "—"}
DATE_PATTERNS: List[str] = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",  # minute resolution
    "%d-%m-%Y %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y",
]
TRUE_TOKENS: Set[str] = {"true", "yes", "y", "1"}

logger = get_logger()


def _normalize_sentinels(df: pd.DataFrame) -> pd.DataFrame:
    """Replace sentinel string tokens with None (in-place) and record counts in df.attrs.

    Adds / updates:
        df.attrs['sentinel_replacements'] = {column: count_replaced, ...}
    """
    replacements = {}
    for col in df.columns:
        if not (pd.api.types.is_object_dtype(df[col]) or pd.api.types.is_string_dtype(df[col])):
            continue
        mask = df[col].apply(lambda v: isinstance(v, str) and v.strip() in SENTINELS)
        count = int(mask.sum())
        if count:
            replacements[col] = count
            # object keeps None as the missing marker on string-dtype columns too
            cleaned = df[col].astype(object)
            cleaned[mask] = None
            df[col] = cleaned
    if replacements:
        existing = df.attrs.get("sentinel_replacements", {})
        existing.update(replacements)
        df.attrs["sentinel_replacements"] = existing
    return df


def _multi_parse_datetime(series: pd.Series, patterns: List[str]) -> Tuple[pd.Series, int]:
    """Parse to UTC trying ISO first, then each explicit pattern. Returns (parsed, failures)."""
    raw = series.copy()
    parsed = pd.to_datetime(raw, errors="coerce", utc=True, format="ISO8601")
    remaining_mask = parsed.isna() & raw.notna()

    for fmt in patterns:
        if not remaining_mask.any():
            break
        attempt = pd.to_datetime(raw[remaining_mask], format=fmt, errors="coerce", utc=True)
        success_mask = attempt.notna()
        parsed.loc[success_mask.index[success_mask]] = attempt[success_mask]
        remaining_mask = parsed.isna() & raw.notna()

    return parsed, int(remaining_mask.sum())


def _split_list(value) -> List[str]:
    if isinstance(value, list):
        return value
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return []
    return [item.strip() for item in str(value).split(",") if item.strip()]


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_TOKENS


def normalize_table(name: str, df: pd.DataFrame) -> Tuple[pd.DataFrame, Dict[str, int]]:
    """Coerce a raw worksheet frame to the typed schema of table `name`.

    Returns the typed frame and the number of unparseable dates per column.
    """
    if df.empty:
        return empty_table(name), {}

    df = _normalize_sentinels(df.copy())
    df = df.reindex(columns=TABLE_COLUMNS[name])

    date_failures: Dict[str, int] = {}
    for col in DATE_COLUMNS.get(name, []):
        parsed, failures = _multi_parse_datetime(df[col], DATE_PATTERNS)
        df[col] = parsed
        if failures:
            date_failures[col] = failures
    for col in NUMERIC_COLUMNS.get(name, []):
        df[col] = pd.to_numeric(df[col], errors="coerce")
    for col in BOOLEAN_COLUMNS.get(name, []):
        df[col] = df[col].apply(_parse_bool)
    for col in LIST_COLUMNS.get(name, []):
        df[col] = df[col].apply(_split_list)
    return df, date_failures


def _credentials_path() -> str:
    path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "google-credentials.json")
    if not os.path.exists(path):
        raise FileNotFoundError(f"Service account file not found: {path}")
    return path


@st.cache_data(show_spinner=False, ttl=600)
def _load_sample_bundle(seed: int, case_count: int, as_of_iso: str) -> DataBundle:
    settings = Settings(sample_seed=seed, sample_case_count=case_count, as_of=as_of_iso)
    return build_sample_bundle(settings)


@st.cache_data(show_spinner=False, ttl=600)
def _load_gsheet_bundle(spreadsheet_id: str, service_account_file: str) -> DataBundle:
    """Read one worksheet per table. Missing worksheets yield empty tables."""
    credentials = Credentials.from_service_account_file(service_account_file, scopes=SCOPES)
    client = gspread.authorize(credentials)
    ss = client.open_by_key(spreadsheet_id)

    tables: Dict[str, pd.DataFrame] = {}
    missing: List[str] = []
    sentinel_counts: Dict[str, Dict[str, int]] = {}
    date_failures: Dict[str, Dict[str, int]] = {}
    for name in TABLE_COLUMNS:
        try:
            ws = ss.worksheet(name)
        except gspread.exceptions.WorksheetNotFound:
            missing.append(name)
            tables[name] = empty_table(name)
            continue
        raw = pd.DataFrame(ws.get_all_records())
        typed, failures = normalize_table(name, raw)
        tables[name] = typed
        if typed.attrs.get("sentinel_replacements"):
            sentinel_counts[name] = typed.attrs["sentinel_replacements"]
        if failures:
            date_failures[name] = failures

    return DataBundle(
        **tables,
        diagnostics={
            "source": "gsheet",
            "spreadsheet_id": spreadsheet_id,
            "missing_worksheets": missing,
            "sentinel_replacements": sentinel_counts,
            "date_parse_failures": date_failures,
        },
    )


def load_data(settings: Settings, as_of: Optional[pd.Timestamp] = None) -> DataBundle:
    """Resolve the configured source and return the cached bundle.

    Raises RuntimeError when the gsheet source has no SPREADSHEET_ID and
    FileNotFoundError when its credentials file is missing.
    """
    as_of = as_of if as_of is not None else settings.reference_time()

    if settings.data_source == "gsheet":
        if not settings.spreadsheet_id:
            raise RuntimeError("SPREADSHEET_ID env var missing (env or secrets).")
        bundle = _load_gsheet_bundle(settings.spreadsheet_id, _credentials_path())
    else:
        bundle = _load_sample_bundle(settings.sample_seed, settings.sample_case_count, as_of.isoformat())

    diagnostics = dict(bundle.diagnostics)
    diagnostics.update(
        {
            "as_of": as_of.isoformat(),
            "loaded_at": pd.Timestamp.now(tz="UTC").isoformat(),
            "row_counts": bundle.row_counts(),
        }
    )
    bundle = bundle.with_tables(diagnostics=diagnostics)
    logger.data_loaded(diagnostics.get("source", settings.data_source), diagnostics["row_counts"])

    # Store into session state for pages to optionally display
    try:
        st.session_state["data_diagnostics"] = diagnostics
    except Exception:
        pass
    return bundle


def clear_cache() -> None:
    _load_sample_bundle.clear()
    _load_gsheet_bundle.clear()
