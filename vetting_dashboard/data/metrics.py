"""
KPI aggregates for the dashboard pages. Every function accepts an (enriched)
frame and returns plain Python values ready for KPI cards and charts.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from vetting_dashboard.data.models import (
    ACTIVE_CASE_STATUSES,
    CLOSED_TASK_STATUSES,
    CheckStatus,
    ReportStatus,
    RiskLevel,
    ScheduleStatus,
    TaskPriority,
    TaskStatus,
    VettingStatus,
)

POSTURE_FACTORS = ("financial", "compliance", "operational", "reputational")


def _counts(series: pd.Series) -> Dict[str, int]:
    return {str(k): int(v) for k, v in series.dropna().value_counts().items()}


def operations_kpis(cases: pd.DataFrame) -> Dict[str, int]:
    if cases.empty:
        return {"total_active": 0, "pending_consent": 0, "overdue": 0, "ready_for_review": 0}
    status = cases["status"]
    return {
        "total_active": int(status.isin(ACTIVE_CASE_STATUSES).sum()),
        "pending_consent": int((status == VettingStatus.CONSENT_PENDING.value).sum()),
        "overdue": int(cases["is_overdue"].astype(bool).sum()),
        "ready_for_review": int((status == VettingStatus.COMPLETE.value).sum()),
    }


def _checks_per_row(consents: pd.DataFrame) -> pd.Series:
    return consents["check_ids"].apply(lambda v: len(v) if isinstance(v, list) else 0)


def consent_stats(consents: pd.DataFrame, as_of: pd.Timestamp, days: int = 7) -> Dict[str, Any]:
    """Consent-bearing checks: total, per channel, expiring within `days`, per entity type."""
    if consents.empty:
        return {"total_checks": 0, "by_channel": {}, "expiring_soon": 0, "by_entity_type": {}}
    checks = _checks_per_row(consents)
    expiry = pd.to_datetime(consents["expiry_date"], errors="coerce", utc=True)
    expiring = (expiry > as_of) & (expiry <= as_of + pd.Timedelta(days=days))
    return {
        "total_checks": int(checks.sum()),
        "by_channel": {str(k): int(v) for k, v in checks.groupby(consents["channel"]).sum().items()},
        "expiring_soon": int(checks[expiring.fillna(False)].sum()),
        "by_entity_type": {str(k): int(v) for k, v in checks.groupby(consents["entity_type"]).sum().items()},
    }


def report_stats(reports: pd.DataFrame) -> Dict[str, Any]:
    if reports.empty:
        return {
            "total": 0,
            "complete": 0,
            "critical": 0,
            "high": 0,
            "average_risk_score": None,
            "risk_distribution": {},
        }
    level = reports["overall_risk_level"]
    scores = pd.to_numeric(reports["overall_risk_score"], errors="coerce").dropna()
    return {
        "total": int(len(reports)),
        "complete": int((reports["report_status"] == ReportStatus.COMPLETE.value).sum()),
        "critical": int((level == RiskLevel.CRITICAL.value).sum()),
        "high": int((level == RiskLevel.HIGH.value).sum()),
        "average_risk_score": int(np.floor(scores.mean() + 0.5)) if not scores.empty else None,
        "risk_distribution": _counts(level),
    }


def task_summary(tasks: pd.DataFrame) -> Dict[str, Any]:
    if tasks.empty:
        return {
            "total": 0, "pending": 0, "action_required": 0, "approved": 0, "rejected": 0,
            "overdue": 0, "high_priority": 0, "by_type": {}, "by_status": {}, "by_priority": {},
        }
    status = tasks["status"]
    open_mask = ~status.isin(CLOSED_TASK_STATUSES)
    overdue = tasks["is_overdue"].astype(bool) if "is_overdue" in tasks else pd.Series(False, index=tasks.index)
    return {
        "total": int(len(tasks)),
        "pending": int((status == TaskStatus.PENDING_ADMIN_REVIEW.value).sum()),
        "action_required": int((status == TaskStatus.ACTION_REQUIRED.value).sum()),
        "approved": int((status == TaskStatus.APPROVED.value).sum()),
        "rejected": int((status == TaskStatus.REJECTED.value).sum()),
        "overdue": int(overdue.sum()),
        "high_priority": int(((tasks["priority"] == TaskPriority.HIGH.value) & open_mask).sum()),
        "by_type": _counts(tasks["type"]),
        "by_status": _counts(status),
        "by_priority": _counts(tasks["priority"]),
    }


def schedule_stats(schedules: pd.DataFrame, as_of: pd.Timestamp, days: int = 7) -> Dict[str, Any]:
    if schedules.empty:
        return {
            "total": 0, "active": 0, "paused": 0, "overdue": 0, "upcoming": 0,
            "by_frequency": {}, "by_entity_type": {},
        }
    status = schedules["status"]
    next_run = pd.to_datetime(schedules["next_run_date"], errors="coerce", utc=True)
    active = status == ScheduleStatus.ACTIVE.value
    # Active schedules past their run date count as overdue alongside explicit ones
    overdue = (status == ScheduleStatus.OVERDUE.value) | (active & (next_run < as_of).fillna(False))
    upcoming = active & (next_run > as_of) & (next_run <= as_of + pd.Timedelta(days=days))
    return {
        "total": int(len(schedules)),
        "active": int(active.sum()),
        "paused": int((status == ScheduleStatus.PAUSED.value).sum()),
        "overdue": int(overdue.sum()),
        "upcoming": int(upcoming.fillna(False).sum()),
        "by_frequency": _counts(schedules["frequency"]),
        "by_entity_type": _counts(schedules["entity_type"]),
    }


def risk_posture(suppliers: pd.DataFrame) -> Dict[str, Optional[float]]:
    """Average of each supplier risk factor, rounded to one decimal."""
    posture: Dict[str, Optional[float]] = {}
    for key in POSTURE_FACTORS:
        if suppliers.empty or key not in suppliers:
            posture[key] = None
            continue
        values = pd.to_numeric(suppliers[key], errors="coerce").dropna()
        posture[key] = round(float(values.mean()), 1) if not values.empty else None
    return posture


def vetting_stats(cases: pd.DataFrame, reports: pd.DataFrame, case_checks: Optional[pd.DataFrame] = None) -> Dict[str, Any]:
    """Executive vetting totals: throughput, turnaround, revenue, risk mix and provider performance."""
    stats: Dict[str, Any] = {
        "total_cases": int(len(cases)),
        "completed_cases": 0,
        "average_turnaround_days": None,
        "total_revenue": 0.0,
        "risk_distribution": _counts(reports["overall_risk_level"]) if not reports.empty else {},
        "top_providers": [],
    }
    if cases.empty:
        return stats

    complete = cases[cases["status"] == VettingStatus.COMPLETE.value]
    stats["completed_cases"] = int(len(complete))
    if not complete.empty:
        turnaround = (
            pd.to_datetime(complete["last_status_update"], utc=True)
            - pd.to_datetime(complete["initiated_date"], utc=True)
        ).dt.total_seconds() / 86400
        stats["average_turnaround_days"] = round(float(turnaround.mean()), 1)
    stats["total_revenue"] = float(pd.to_numeric(cases["total_estimated_cost"], errors="coerce").sum())

    if case_checks is not None and not case_checks.empty:
        stats["top_providers"] = provider_performance(case_checks)
    return stats


def provider_performance(case_checks: pd.DataFrame, top_n: int = 5) -> List[Dict[str, Any]]:
    """Providers ranked by number of cases, with their success rate over finished checks."""
    finished = case_checks["status"].isin([CheckStatus.COMPLETE.value, CheckStatus.FAILED.value])
    rows = []
    for provider, group in case_checks.groupby("provider"):
        done = group[finished.loc[group.index]]
        passed = int((done["status"] == CheckStatus.COMPLETE.value).sum())
        rows.append(
            {
                "provider": provider,
                "cases": int(group["case_id"].nunique()),
                "success_rate": round(passed / len(done) * 100, 1) if len(done) else None,
            }
        )
    rows.sort(key=lambda r: (-r["cases"], r["provider"]))
    return rows[:top_n]
