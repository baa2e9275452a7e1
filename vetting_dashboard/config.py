"""
Application-wide configuration constants and helper utilities.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd


@dataclass(frozen=True)
class TabConfig:
    key: str
    label: str


# Ordered tab definitions for the dashboard
TABS: List[TabConfig] = [
    TabConfig("operations", "Operations Overview"),
    TabConfig("active_cases", "Active Cases"),
    TabConfig("case_dossier", "Case Dossier"),
    TabConfig("consent", "Consent Management"),
    TabConfig("completed_reports", "Completed Reports"),
    TabConfig("scheduled_checks", "Scheduled Checks"),
    TabConfig("tasks", "Tasks & Approvals"),
    TabConfig("calculator", "Vetting Calculator"),
    TabConfig("executive", "Executive Risk"),
    TabConfig("data_quality", "Data & Definitions"),
]

DATA_SOURCES = ("sample", "gsheet")
CURRENCY = "R"


@dataclass(frozen=True)
class Settings:
    data_source: str = "sample"
    sample_seed: int = 42
    sample_case_count: int = 40
    as_of: Optional[str] = None
    near_expiry_hours: int = 24
    expiring_soon_days: int = 7
    upcoming_days: int = 7
    simulated_latency_ms: int = 0
    log_level: str = "INFO"
    spreadsheet_id: Optional[str] = None

    def reference_time(self) -> pd.Timestamp:
        """Return the timestamp every derived flag is computed against."""
        if self.as_of:
            ts = pd.Timestamp(self.as_of)
            return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
        return pd.Timestamp.now(tz="UTC").floor("min")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def load_settings() -> Settings:
    """Build settings from environment variables (populated by bootstrap_env)."""
    source = (os.getenv("DATA_SOURCE") or "sample").strip().lower()
    if source not in DATA_SOURCES:
        source = "sample"
    return Settings(
        data_source=source,
        sample_seed=_env_int("SAMPLE_SEED", 42),
        sample_case_count=max(_env_int("SAMPLE_CASE_COUNT", 40), 0),
        as_of=os.getenv("DASHBOARD_AS_OF") or None,
        near_expiry_hours=_env_int("NEAR_EXPIRY_HOURS", 24),
        expiring_soon_days=_env_int("EXPIRING_SOON_DAYS", 7),
        upcoming_days=_env_int("UPCOMING_DAYS", 7),
        simulated_latency_ms=max(_env_int("SIMULATED_LATENCY_MS", 0), 0),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        spreadsheet_id=os.getenv("SPREADSHEET_ID") or None,
    )
