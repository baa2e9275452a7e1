"""
Optimistic state updates triggered from the pages.

Each action takes the current frame, returns a new frame with the change
applied and never mutates its input. A short simulated delay stands in for
the provider/API round-trip (``SIMULATED_LATENCY_MS``). Invalid requests
raise :class:`ActionError`, which the pages show as an error message.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import pandas as pd

from vetting_dashboard.config import load_settings
from vetting_dashboard.data import calculator, catalog
from vetting_dashboard.data.identifiers import next_case_id, next_case_number, next_consent_id
from vetting_dashboard.data.models import (
    PRIORITY_ORDER,
    ConsentChannel,
    ConsentRequestStatus,
    EntityType,
    Priority,
    RiskLevel,
    ScheduleStatus,
    TaskStatus,
    VettingStatus,
)
from vetting_dashboard.data.scheduling import advance_run_date
from vetting_dashboard.logger import get_logger

logger = get_logger()


class ActionError(ValueError):
    """Raised when an action cannot be applied to the current state."""


TASK_ACTIONS = {
    "approve": TaskStatus.APPROVED.value,
    "reject": TaskStatus.REJECTED.value,
    "mark_reviewed": TaskStatus.UNDER_REVIEW.value,
}

CONSENT_OUTCOMES = {
    "approve": ConsentRequestStatus.VERIFIED_APPROVED.value,
    "reject_signature": ConsentRequestStatus.VERIFIED_REJECTED_SIGNATURE_MISMATCH.value,
    "reject_other": ConsentRequestStatus.VERIFIED_REJECTED_OTHER.value,
}

ADMIN_NAME = "Super Admin"


def _simulate_latency() -> None:
    delay_ms = load_settings().simulated_latency_ms
    if delay_ms > 0:
        time.sleep(delay_ms / 1000)


def _now(as_of: Optional[pd.Timestamp]) -> pd.Timestamp:
    return as_of if as_of is not None else pd.Timestamp.now(tz="UTC")


def _row_index(df: pd.DataFrame, id_column: str, row_id: str, label: str):
    matches = df.index[df[id_column] == row_id]
    if len(matches) == 0:
        raise ActionError(f"{label} {row_id} not found")
    return matches[0]


def _entity_type(value: str) -> EntityType:
    try:
        return EntityType(value)
    except ValueError:
        raise ActionError(f"Unknown entity type: {value}") from None


def _append_note(existing, addition: str) -> str:
    existing = existing if isinstance(existing, str) else ""
    return f"{existing}\n{addition}".strip()


# ─── Tasks ──────────────────────────────────────────────────────────


def apply_task_action(
    tasks: pd.DataFrame,
    task_id: str,
    action: str,
    as_of: Optional[pd.Timestamp] = None,
) -> pd.DataFrame:
    """Apply approve / reject / mark_reviewed to one task."""
    if action not in TASK_ACTIONS:
        logger.action_failed(action, "unknown task action")
        raise ActionError(f"Unknown task action: {action}")
    _simulate_latency()
    updated = tasks.copy()
    idx = _row_index(updated, "task_id", task_id, "Task")
    status = TASK_ACTIONS[action]
    updated.at[idx, "status"] = status
    if status in (TaskStatus.APPROVED.value, TaskStatus.REJECTED.value):
        updated.at[idx, "completed_date"] = _now(as_of)
        updated.at[idx, "completed_by"] = ADMIN_NAME
    if "is_overdue" in updated and status != TaskStatus.UNDER_REVIEW.value:
        updated.at[idx, "is_overdue"] = False
    logger.action_applied(action, task_id, status)
    return updated


def request_more_info(tasks: pd.DataFrame, task_id: str, text: str) -> pd.DataFrame:
    if not text or not text.strip():
        logger.action_failed("request_more_info", "blank request")
        raise ActionError("Please describe the information you need")
    _simulate_latency()
    updated = tasks.copy()
    idx = _row_index(updated, "task_id", task_id, "Task")
    updated.at[idx, "status"] = TaskStatus.INFORMATION_REQUESTED.value
    updated.at[idx, "notes"] = _append_note(updated.at[idx, "notes"], f"Admin requested: {text.strip()}")
    logger.action_applied("request_more_info", task_id)
    return updated


def apply_bulk_action(
    tasks: pd.DataFrame,
    task_ids: Iterable[str],
    action: str,
    as_of: Optional[pd.Timestamp] = None,
) -> pd.DataFrame:
    selected = list(task_ids)
    if not selected:
        logger.action_failed(f"bulk {action}", "empty selection")
        raise ActionError("Select at least one task")
    if action not in TASK_ACTIONS:
        raise ActionError(f"Unknown task action: {action}")
    _simulate_latency()
    updated = tasks.copy()
    mask = updated["task_id"].isin(selected)
    status = TASK_ACTIONS[action]
    updated.loc[mask, "status"] = status
    if status in (TaskStatus.APPROVED.value, TaskStatus.REJECTED.value):
        updated.loc[mask, "completed_date"] = _now(as_of)
        updated.loc[mask, "completed_by"] = ADMIN_NAME
        if "is_overdue" in updated:
            updated.loc[mask, "is_overdue"] = False
    logger.action_applied(f"bulk {action}", f"{int(mask.sum())} tasks", status)
    return updated


# ─── Consents ───────────────────────────────────────────────────────


@dataclass
class ManualConsentForm:
    subject_name: str
    subject_id: str
    entity_type: str
    check_ids: List[str] = field(default_factory=list)
    approved: bool = True
    vetting_case_id: Optional[str] = None
    project_name: Optional[str] = None
    notes: Optional[str] = None


def record_manual_consent(
    consents: pd.DataFrame,
    form: ManualConsentForm,
    as_of: Optional[pd.Timestamp] = None,
) -> pd.DataFrame:
    """Append a consent captured offline (paper form) as a Manual Upload record."""
    if not form.subject_name or not form.subject_name.strip():
        raise ActionError("Subject name is required")
    if not form.check_ids:
        raise ActionError("Select at least one check covered by the consent")
    entity = _entity_type(form.entity_type)
    _simulate_latency()
    now = _now(as_of)
    consent_id = next_consent_id(consents["consent_id"].tolist(), now)
    status = (
        ConsentRequestStatus.MANUALLY_RECORDED_APPROVED if form.approved
        else ConsentRequestStatus.DECLINED_BY_SUBJECT
    )
    record = {
        "consent_id": consent_id,
        "vetting_case_id": form.vetting_case_id or f"VC-MANUAL-{now:%Y%m%d%H%M}",
        "subject_name": form.subject_name.strip(),
        "subject_id": form.subject_id,
        "entity_type": entity.value,
        "project_name": form.project_name,
        "check_ids": list(form.check_ids),
        "check_names": [catalog.check_name(c) for c in form.check_ids],
        "status": status.value,
        "channel": ConsentChannel.MANUAL_UPLOAD.value,
        "request_sent_date": now,
        "verified_date": now if form.approved else pd.NaT,
        "expiry_date": pd.NaT,
        "verification_notes": form.notes,
        "last_updated": now,
    }
    updated = pd.concat([consents, pd.DataFrame([record])], ignore_index=True)
    logger.action_applied("record_manual_consent", consent_id, status.value)
    return updated


def verify_consent(
    consents: pd.DataFrame,
    consent_id: str,
    outcome: str,
    notes: Optional[str] = None,
    as_of: Optional[pd.Timestamp] = None,
) -> pd.DataFrame:
    """Record the admin's signature verification for a submitted consent."""
    if outcome not in CONSENT_OUTCOMES:
        raise ActionError(f"Unknown verification outcome: {outcome}")
    updated = consents.copy()
    idx = _row_index(updated, "consent_id", consent_id, "Consent")
    current = updated.at[idx, "status"]
    if current != ConsentRequestStatus.SUBMITTED_AWAITING_VERIFICATION.value:
        logger.action_failed("verify_consent", f"{consent_id} is {current}")
        raise ActionError(f"Consent {consent_id} is not awaiting verification ({current})")
    _simulate_latency()
    now = _now(as_of)
    updated.at[idx, "status"] = CONSENT_OUTCOMES[outcome]
    updated.at[idx, "verified_date"] = now
    updated.at[idx, "last_updated"] = now
    if notes:
        updated.at[idx, "verification_notes"] = notes
    if "status_variant" in updated:
        updated.at[idx, "status_variant"] = "success" if outcome == "approve" else "danger"
    logger.action_applied("verify_consent", consent_id, CONSENT_OUTCOMES[outcome])
    return updated


# ─── Cases ──────────────────────────────────────────────────────────


@dataclass
class VettingRequest:
    """Entity details and check selection from the Initiate Vetting form."""

    entity_type: str
    entity_name: str
    entity_identifier: str
    contact: str = ""
    package_id: Optional[str] = None
    check_ids: List[str] = field(default_factory=list)
    priority: str = Priority.MEDIUM.value
    project_name: Optional[str] = None
    pre_authorised: bool = False


def _requested_checks(request: VettingRequest, entity: EntityType) -> List[str]:
    if request.package_id:
        package = catalog.get_package(request.package_id)
        if package is None or entity not in package.applicable_to:
            raise ActionError(f"Package {request.package_id} is not available for {entity.value}")
        return list(package.check_ids)
    if not request.check_ids:
        raise ActionError("Select a package or at least one check")
    allowed = {check.check_id for check in calculator.available_checks(entity.value)}
    unknown = [c for c in request.check_ids if c not in allowed]
    if unknown:
        raise ActionError(f"Checks not available for {entity.value}: {', '.join(unknown)}")
    return list(dict.fromkeys(request.check_ids))


def initiate_case(
    cases: pd.DataFrame,
    request: VettingRequest,
    as_of: Optional[pd.Timestamp] = None,
) -> pd.DataFrame:
    """Open an Initiated case with the next `VET-<year>-<NNNNNN>` number.

    Companies need a registration number; individuals and staff medicals an ID
    or passport number. Package requests are priced at the package discount.
    """
    entity = _entity_type(request.entity_type)
    company = entity == EntityType.COMPANY
    if not request.entity_name or not request.entity_name.strip():
        raise ActionError("Company name is required" if company else "Full name is required")
    if not request.entity_identifier or not request.entity_identifier.strip():
        raise ActionError("Registration number is required" if company else "ID or passport number is required")
    if request.priority not in PRIORITY_ORDER:
        raise ActionError(f"Unknown priority: {request.priority}")
    check_ids = _requested_checks(request, entity)
    if not request.pre_authorised:
        raise ActionError("Confirm pre-authorisation before submitting")

    _simulate_latency()
    now = _now(as_of)
    draft = calculator.draft_case(entity.value, calculator.calculate(check_ids), now)
    if request.package_id:
        draft["total_estimated_cost"] = calculator.package_cost(request.package_id)["price"]
    case_number = next_case_number(cases["case_number"].tolist(), now)
    contact = request.contact.strip() if request.contact else ""
    record = {
        "case_id": next_case_id(cases["case_id"].tolist()),
        "case_number": case_number,
        "entity_type": entity.value,
        "entity_name": request.entity_name.strip(),
        "entity_identifier": request.entity_identifier.strip(),
        "status": draft["status"],
        "priority": request.priority,
        "overall_progress": draft["overall_progress"],
        "completed_checks": draft["completed_checks"],
        "total_checks": draft["total_checks"],
        "assigned_officer": "Unassigned",
        "initiated_by": ADMIN_NAME,
        "project_id": None,
        "project_name": request.project_name,
        "initiated_date": now,
        "assigned_date": pd.NaT,
        "target_completion_date": draft["estimated_completion_date"],
        "last_status_update": now,
        "is_overdue": False,
        "flagged_for_review": False,
        "blocker_count": 0,
        "total_estimated_cost": draft["total_estimated_cost"],
        "notes": f"Consent request sent to {contact}" if contact else "Consent request pending",
    }
    updated = pd.concat([cases, pd.DataFrame([record])], ignore_index=True)
    logger.action_applied("initiate_case", case_number, f"{len(check_ids)} checks")
    return updated


def _close_case(cases, case_id, status, comment, as_of, action):
    _simulate_latency()
    updated = cases.copy()
    idx = _row_index(updated, "case_id", case_id, "Case")
    updated.at[idx, "status"] = status
    updated.at[idx, "flagged_for_review"] = False
    updated.at[idx, "is_overdue"] = False
    updated.at[idx, "last_status_update"] = _now(as_of)
    if comment and comment.strip():
        updated.at[idx, "notes"] = _append_note(updated.at[idx, "notes"], comment.strip())
    if "is_active" in updated:
        updated.at[idx, "is_active"] = False
    logger.action_applied(action, case_id, status)
    return updated


def approve_case(cases: pd.DataFrame, case_id: str, comment: str = "", as_of=None) -> pd.DataFrame:
    return _close_case(cases, case_id, VettingStatus.COMPLETE.value, comment, as_of, "approve_case")


def reject_case(cases: pd.DataFrame, case_id: str, comment: str = "", as_of=None) -> pd.DataFrame:
    if not comment or not comment.strip():
        raise ActionError("A reason is required to reject a case")
    return _close_case(cases, case_id, VettingStatus.FAILED.value, comment, as_of, "reject_case")


def update_case(
    cases: pd.DataFrame,
    case_id: str,
    priority: Optional[str] = None,
    assigned_officer: Optional[str] = None,
    notes: Optional[str] = None,
) -> pd.DataFrame:
    if priority is not None and priority not in PRIORITY_ORDER:
        raise ActionError(f"Unknown priority: {priority}")
    _simulate_latency()
    updated = cases.copy()
    idx = _row_index(updated, "case_id", case_id, "Case")
    changes = []
    if priority is not None:
        updated.at[idx, "priority"] = priority
        changes.append(f"priority={priority}")
    if assigned_officer:
        updated.at[idx, "assigned_officer"] = assigned_officer
        changes.append(f"officer={assigned_officer}")
    if notes is not None:
        updated.at[idx, "notes"] = notes
        changes.append("notes")
    logger.action_applied("update_case", case_id, ", ".join(changes))
    return updated


def escalate_case(cases: pd.DataFrame, case_id: str) -> pd.DataFrame:
    """Raise priority one step; Urgent cases cannot be escalated further."""
    idx = _row_index(cases, "case_id", case_id, "Case")
    current = cases.at[idx, "priority"]
    position = PRIORITY_ORDER.index(current) if current in PRIORITY_ORDER else 0
    if position >= len(PRIORITY_ORDER) - 1:
        raise ActionError(f"Case {case_id} is already at {current} priority")
    updated = update_case(cases, case_id, priority=PRIORITY_ORDER[position + 1])
    updated.at[idx, "flagged_for_review"] = True
    return updated


# ─── Schedules ──────────────────────────────────────────────────────


def _set_schedule_status(schedules, schedule_id, status, action):
    _simulate_latency()
    updated = schedules.copy()
    idx = _row_index(updated, "schedule_id", schedule_id, "Schedule")
    updated.at[idx, "status"] = status
    logger.action_applied(action, schedule_id, status)
    return updated


def pause_schedule(schedules: pd.DataFrame, schedule_id: str) -> pd.DataFrame:
    return _set_schedule_status(schedules, schedule_id, ScheduleStatus.PAUSED.value, "pause_schedule")


def resume_schedule(schedules: pd.DataFrame, schedule_id: str) -> pd.DataFrame:
    return _set_schedule_status(schedules, schedule_id, ScheduleStatus.ACTIVE.value, "resume_schedule")


def run_schedule_now(
    schedules: pd.DataFrame,
    schedule_runs: pd.DataFrame,
    schedule_id: str,
    as_of: Optional[pd.Timestamp] = None,
    outcome: str = RiskLevel.LOW.value,
):
    """Run a scheduled check immediately.

    Returns ``(schedules, schedule_runs)``: the run is appended to the history,
    last run/outcome are stamped and the next run moves one period past now.
    """
    if outcome not in (level.value for level in RiskLevel):
        raise ActionError(f"Unknown outcome: {outcome}")
    idx = _row_index(schedules, "schedule_id", schedule_id, "Schedule")
    if schedules.at[idx, "status"] == ScheduleStatus.COMPLETED.value:
        raise ActionError(f"Schedule {schedule_id} has completed and cannot run")
    _simulate_latency()
    now = _now(as_of)
    updated = schedules.copy()
    updated.at[idx, "status"] = ScheduleStatus.ACTIVE.value
    updated.at[idx, "last_run_date"] = now
    updated.at[idx, "last_run_outcome"] = outcome
    updated.at[idx, "next_run_date"] = advance_run_date(now, updated.at[idx, "frequency"])
    if "is_overdue" in updated:
        updated.at[idx, "is_overdue"] = False
        updated.at[idx, "is_upcoming"] = False

    run_no = int((schedule_runs["schedule_id"] == schedule_id).sum()) + 1
    run = {
        "schedule_id": schedule_id,
        "run_date": now,
        "outcome": outcome,
        "report_id": f"SR-{schedule_id.split('-')[-1]}-{run_no:02d}",
    }
    runs = pd.concat([schedule_runs, pd.DataFrame([run])], ignore_index=True)
    if "run_history_count" in updated:
        updated.at[idx, "run_history_count"] = run_no
    logger.action_applied("run_schedule_now", schedule_id, outcome)
    return updated, runs


# ─── Reports ────────────────────────────────────────────────────────


def archive_report(reports: pd.DataFrame, report_id: str) -> pd.DataFrame:
    """Remove a report from the working set."""
    _row_index(reports, "report_id", report_id, "Report")
    _simulate_latency()
    updated = reports[reports["report_id"] != report_id].reset_index(drop=True)
    logger.action_applied("archive_report", report_id)
    return updated
