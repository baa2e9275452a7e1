"""
Data enrichment helpers responsible for computing derived view-model columns
required across the dashboard. Every time-based flag is computed against an
explicit reference time so cached data and the rendered flags agree.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from vetting_dashboard.config import Settings
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.models import (
    ACTIVE_CASE_STATUSES,
    CLOSED_TASK_STATUSES,
    CONSENT_STATUS_VARIANTS,
)


def _to_numeric(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce")


def _coerce_datetime(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series, errors="coerce", utc=True)


def _first_provider_word(case_checks: pd.DataFrame) -> pd.Series:
    if case_checks.empty:
        return pd.Series(dtype=object)
    first = case_checks.groupby("case_id", sort=False)["provider"].first()
    return first.fillna("").astype(str).str.split().str[0]


def enrich_cases(cases: pd.DataFrame, case_checks: pd.DataFrame, as_of: pd.Timestamp) -> pd.DataFrame:
    enriched = cases.copy()
    if enriched.empty:
        for col in ("days_since_initiated", "primary_provider", "checks_label", "is_active"):
            enriched[col] = pd.Series(dtype=object)
        return enriched

    initiated = _coerce_datetime(enriched["initiated_date"])
    elapsed_days = (as_of - initiated).dt.total_seconds() / 86400
    enriched["days_since_initiated"] = np.ceil(elapsed_days).astype("Int64")

    providers = _first_provider_word(case_checks)
    enriched["primary_provider"] = enriched["case_id"].map(providers).fillna("Unknown").replace("", "Unknown")

    completed = _to_numeric(enriched["completed_checks"]).fillna(0).astype(int)
    total = _to_numeric(enriched["total_checks"]).fillna(0).astype(int)
    enriched["checks_label"] = completed.astype(str) + "/" + total.astype(str)
    enriched["is_active"] = enriched["status"].isin(ACTIVE_CASE_STATUSES)
    return enriched


def enrich_consents(
    consents: pd.DataFrame,
    as_of: pd.Timestamp,
    near_expiry_hours: int = 24,
) -> pd.DataFrame:
    enriched = consents.copy()
    if enriched.empty:
        for col in ("checks_count", "checks_tooltip", "is_expired", "is_near_expiry", "status_variant"):
            enriched[col] = pd.Series(dtype=object)
        return enriched

    names = enriched["check_names"].apply(lambda v: v if isinstance(v, list) else [])
    enriched["checks_count"] = enriched["check_ids"].apply(lambda v: len(v) if isinstance(v, list) else 0)
    enriched["checks_tooltip"] = names.apply(", ".join)

    expiry = _coerce_datetime(enriched["expiry_date"])
    # Near expiry includes links that already lapsed
    enriched["is_expired"] = (expiry < as_of).fillna(False).astype(bool)
    enriched["is_near_expiry"] = (
        ((expiry - as_of) < pd.Timedelta(hours=near_expiry_hours)).fillna(False).astype(bool)
    )
    enriched["status_variant"] = enriched["status"].map(CONSENT_STATUS_VARIANTS).fillna("default")
    return enriched


def enrich_reports(reports: pd.DataFrame, report_checks: pd.DataFrame) -> pd.DataFrame:
    enriched = reports.copy()
    if enriched.empty:
        for col in ("risk_description", "check_results_count"):
            enriched[col] = pd.Series(dtype=object)
        return enriched

    score = _to_numeric(enriched["overall_risk_score"]).round().astype("Int64").astype(str)
    enriched["risk_description"] = enriched["overall_risk_level"].astype(str) + " (" + score + "/100)"
    counts = report_checks.groupby("report_id").size() if not report_checks.empty else pd.Series(dtype=int)
    enriched["check_results_count"] = enriched["report_id"].map(counts).fillna(0).astype(int)
    return enriched


def enrich_tasks(tasks: pd.DataFrame, as_of: pd.Timestamp) -> pd.DataFrame:
    enriched = tasks.copy()
    if enriched.empty:
        enriched["is_overdue"] = pd.Series(dtype=bool)
        return enriched

    due = _coerce_datetime(enriched["due_date"])
    open_mask = ~enriched["status"].isin(CLOSED_TASK_STATUSES)
    enriched["is_overdue"] = ((due < as_of).fillna(False) & open_mask).astype(bool)
    return enriched


def enrich_schedules(
    schedules: pd.DataFrame,
    schedule_runs: pd.DataFrame,
    as_of: pd.Timestamp,
    upcoming_days: int = 7,
) -> pd.DataFrame:
    enriched = schedules.copy()
    if enriched.empty:
        for col in ("is_overdue", "is_upcoming", "run_history_count"):
            enriched[col] = pd.Series(dtype=object)
        return enriched

    next_run = _coerce_datetime(enriched["next_run_date"])
    enriched["is_overdue"] = (next_run < as_of).fillna(False).astype(bool)
    horizon = as_of + pd.Timedelta(days=upcoming_days)
    enriched["is_upcoming"] = ((next_run > as_of) & (next_run < horizon)).fillna(False).astype(bool)
    counts = schedule_runs.groupby("schedule_id").size() if not schedule_runs.empty else pd.Series(dtype=int)
    enriched["run_history_count"] = enriched["schedule_id"].map(counts).fillna(0).astype(int)
    return enriched


def enrich_bundle(
    bundle: DataBundle,
    as_of: pd.Timestamp,
    settings: Optional[Settings] = None,
) -> DataBundle:
    """Return a copy of the bundle with every table's derived columns added."""
    settings = settings or Settings()
    return bundle.with_tables(
        cases=enrich_cases(bundle.cases, bundle.case_checks, as_of),
        consents=enrich_consents(bundle.consents, as_of, settings.near_expiry_hours),
        reports=enrich_reports(bundle.reports, bundle.report_checks),
        tasks=enrich_tasks(bundle.tasks, as_of),
        schedules=enrich_schedules(bundle.schedules, bundle.schedule_runs, as_of, settings.upcoming_days),
    )
