"""
Detail derivations for a single case: the summary card, its timeline, the
entity profile and the printable dossier. Lookups return None (or an empty
list) when the id is unknown so pages can render an empty state.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.models import (
    CheckStatus,
    ConsentRequestStatus,
    EntityType,
    VettingStatus,
    risk_level_for_score,
)


def _case_row(bundle: DataBundle, case_id: str) -> Optional[Dict[str, Any]]:
    match = bundle.cases[bundle.cases["case_id"] == case_id]
    if match.empty:
        return None
    return match.iloc[0].to_dict()


def _checks_for(bundle: DataBundle, case_id: str) -> pd.DataFrame:
    return bundle.case_checks[bundle.case_checks["case_id"] == case_id]


def _case_risk_score(checks: pd.DataFrame) -> Optional[int]:
    scores = pd.to_numeric(checks["risk_score"], errors="coerce").dropna()
    if scores.empty:
        return None
    return int(np.floor(scores.mean() + 0.5))


def case_details(bundle: DataBundle, case_id: str) -> Optional[Dict[str, Any]]:
    case = _case_row(bundle, case_id)
    if case is None:
        return None
    notes = [
        f"Case initiated on {case['initiated_date']:%d %b %Y}",
        f"Assigned to {case['assigned_officer']}",
    ]
    if case.get("flagged_for_review"):
        notes.append("Flagged for review")
    if isinstance(case.get("notes"), str) and case["notes"].strip():
        notes.extend(line for line in case["notes"].splitlines() if line.strip())
    return {
        "case_id": case["case_id"],
        "case_number": case["case_number"],
        "entity_name": case["entity_name"],
        "entity_type": case["entity_type"],
        "status": case["status"],
        "priority": case["priority"],
        "assigned_officer": case["assigned_officer"],
        "created_date": case["initiated_date"],
        "last_updated": case["last_status_update"],
        "progress": case["overall_progress"],
        "estimated_completion": case["target_completion_date"],
        "notes": notes,
        "risk_score": _case_risk_score(_checks_for(bundle, case_id)),
        "compliance_status": "Compliant" if case["status"] == VettingStatus.COMPLETE.value else "Under Review",
        "total_cost": case["total_estimated_cost"],
    }


def case_timeline(bundle: DataBundle, case_id: str) -> List[Dict[str, Any]]:
    """Created, assigned and check-completed events, oldest first."""
    case = _case_row(bundle, case_id)
    if case is None:
        return []
    events = [
        {
            "event_id": f"{case_id}_event_1",
            "timestamp": case["initiated_date"],
            "type": "created",
            "title": "Case Created",
            "description": f"Vetting case created for {case['entity_name']}",
            "user": case["initiated_by"],
        },
        {
            "event_id": f"{case_id}_event_2",
            "timestamp": case["assigned_date"],
            "type": "assigned",
            "title": "Case Assigned",
            "description": f"Case assigned to {case['assigned_officer']}",
            "user": "System",
        },
    ]
    for index, check in enumerate(_checks_for(bundle, case_id).to_dict("records")):
        if pd.isna(check["completed_date"]):
            continue
        events.append(
            {
                "event_id": f"{case_id}_check_{index}",
                "timestamp": check["completed_date"],
                "type": "check_completed",
                "title": f"{check['check_name']} Completed",
                "description": f"Result: {check['result']}",
                "user": check["provider"] or "System",
            }
        )
    # unassigned cases have no assignment date yet
    events = [e for e in events if not pd.isna(e["timestamp"])]
    events.sort(key=lambda e: e["timestamp"])
    return events


def entity_details(bundle: DataBundle, entity_id: str) -> Optional[Dict[str, Any]]:
    """Profile of the entity behind a case, matched on case id or entity identifier."""
    cases = bundle.cases
    match = cases[(cases["case_id"] == entity_id) | (cases["entity_identifier"] == entity_id)]
    if match.empty:
        return None
    case = match.iloc[0].to_dict()
    checks = _checks_for(bundle, case["case_id"])
    by_category = (
        pd.to_numeric(checks["risk_score"], errors="coerce").groupby(checks["category"]).mean()
        if not checks.empty else pd.Series(dtype=float)
    )

    def _category_score(name: str) -> Optional[int]:
        value = by_category.get(name)
        return None if value is None or pd.isna(value) else int(round(value))

    history = cases[cases["entity_identifier"] == case["entity_identifier"]]
    return {
        "id": case["case_id"],
        "name": case["entity_name"],
        "type": case["entity_type"],
        "identifier": case["entity_identifier"],
        "risk_profile": {
            "overall": _case_risk_score(checks),
            "financial": _category_score("Financial"),
            "compliance": _category_score("Compliance"),
            "reputation": _category_score("Reputational"),
        },
        "compliance_records": [
            {
                "type": "Company Registration",
                "status": "Registered" if case["entity_type"] == EntityType.COMPANY.value else "Not Applicable",
                "last_checked": case["initiated_date"],
            },
        ],
        "relationship_history": [
            {
                "project_name": row["project_name"],
                "case_number": row["case_number"],
                "value": row["total_estimated_cost"],
                "status": row["status"],
            }
            for row in history.to_dict("records")
        ],
    }


def _consent_records(bundle: DataBundle, case: Dict[str, Any]) -> List[Dict[str, Any]]:
    consents = bundle.consents
    linked = consents[consents["vetting_case_id"] == case["case_number"]] if not consents.empty else consents
    if not linked.empty:
        return [
            {
                "type": f"{row['channel']} Consent",
                "status": row["status"],
                "obtained_date": row["verified_date"] if pd.notna(row["verified_date"]) else None,
                "method": row["channel"],
            }
            for row in linked.to_dict("records")
        ]
    pending = case["status"] == VettingStatus.CONSENT_PENDING.value
    return [
        {
            "type": "Digital Consent",
            "status": ConsentRequestStatus.PENDING_SENT.value if pending else "Received",
            "obtained_date": None if pending else case["initiated_date"],
            "method": "SMS",
        }
    ]


def _documents(case: Dict[str, Any]) -> List[Dict[str, Any]]:
    is_company = case["entity_type"] == EntityType.COMPANY.value
    docs = [
        {
            "name": "Company Registration Certificate" if is_company else "Identity Document",
            "type": "PDF",
            "upload_date": case["initiated_date"],
            "status": "verified",
            "category": "Registration" if is_company else "Identity",
        },
        {
            "name": "Signed Consent Form",
            "type": "PDF",
            "upload_date": case["initiated_date"],
            "status": "pending" if case["status"] == VettingStatus.CONSENT_PENDING.value else "verified",
            "category": "Consent",
        },
    ]
    if case["entity_type"] == EntityType.STAFF_MEDICAL.value:
        docs.append(
            {
                "name": "Medical Questionnaire",
                "type": "PDF",
                "upload_date": case["initiated_date"],
                "status": "pending",
                "category": "Medical",
            }
        )
    return docs


def case_dossier(
    bundle: DataBundle,
    case_id: str,
    as_of: Optional[pd.Timestamp] = None,
) -> Optional[Dict[str, Any]]:
    case = _case_row(bundle, case_id)
    if case is None:
        return None
    as_of = as_of if as_of is not None else pd.Timestamp.now(tz="UTC")
    checks = _checks_for(bundle, case_id)
    score = _case_risk_score(checks)
    flags = int((checks["result"] == "Flag").sum()) if not checks.empty else 0
    if score is None:
        assessment = "Pending - no completed checks yet"
    elif flags:
        assessment = f"{risk_level_for_score(score)} Risk - {flags} adverse finding(s)"
    else:
        assessment = f"{risk_level_for_score(score)} Risk - no adverse findings"

    return {
        "case_id": case["case_id"],
        "case_reference": case["case_number"],
        "entity_name": case["entity_name"],
        "entity_type": case["entity_type"],
        "priority_level": case["priority"],
        "initiated_date": case["initiated_date"],
        "assigned_officer": case["assigned_officer"],
        "report_generated": as_of,
        "days_active": int(np.ceil((as_of - case["initiated_date"]).total_seconds() / 86400)),
        "total_cost": case["total_estimated_cost"],
        "overall_progress": case["overall_progress"],
        "risk_assessment": assessment,
        "checks_completed": case["completed_checks"],
        "total_checks": case["total_checks"],
        "current_status": case["status"],
        "overdue_status": "Yes" if bool(case["is_overdue"]) else "No",
        "documents": _documents(case),
        "consent_records": _consent_records(bundle, case),
        "check_results": [
            {
                "check_type": row["check_name"] or "Unknown Check",
                "result": row["result"],
                "completed_date": row["completed_date"],
                "provider": row["provider"] or "Unknown",
                "cost": row["cost"],
                "status": row["status"],
            }
            for row in checks.to_dict("records")
        ],
        "pending_checks": int((checks["status"] == CheckStatus.PENDING.value).sum()) if not checks.empty else 0,
    }
