"""
Enumerations, table schemas and badge mappings shared by the data layer
and the pages. Enum values are the display strings stored in the frames.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List


class EntityType(str, Enum):
    INDIVIDUAL = "Individual"
    COMPANY = "Company"
    STAFF_MEDICAL = "Staff Medical"


class CheckCategory(str, Enum):
    IDENTITY = "Identity"
    FINANCIAL = "Financial"
    CRIMINAL = "Criminal"
    COMPLIANCE = "Compliance"
    OPERATIONAL = "Operational"
    REPUTATIONAL = "Reputational"
    MEDICAL = "Medical"
    BUSINESS_SPECIFIC = "Business Specific"


class VettingStatus(str, Enum):
    INITIATED = "Initiated"
    CONSENT_PENDING = "Consent Pending"
    IN_PROGRESS = "In Progress"
    PARTIALLY_COMPLETE = "Partially Complete"
    COMPLETE = "Complete"
    FAILED = "Failed"
    CANCELLED = "Cancelled"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class CheckStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETE = "Complete"
    FAILED = "Failed"


class ConsentRequestStatus(str, Enum):
    PENDING_SENT = "Pending - Sent"
    LINK_OPENED = "Link Opened"
    FORM_VIEWED = "Form Viewed"
    SUBMITTED_AWAITING_VERIFICATION = "Submitted - Awaiting Signature Verification"
    VERIFIED_APPROVED = "Verified - Approved"
    VERIFIED_REJECTED_SIGNATURE_MISMATCH = "Verified - Rejected (Signature Mismatch)"
    VERIFIED_REJECTED_OTHER = "Verified - Rejected (Other Issue)"
    DECLINED_BY_SUBJECT = "Declined by Subject"
    EXPIRED = "Expired"
    MANUALLY_RECORDED_APPROVED = "Manually Recorded - Approved"
    ERROR_SENDING = "Error Sending"


class ConsentChannel(str, Enum):
    SMS_LINK = "SMS Link"
    EMAIL_LINK = "Email Link"
    MANUAL_UPLOAD = "Manual Upload"


class RiskLevel(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFO_ONLY = "Info Only"


class ReportStatus(str, Enum):
    COMPLETE = "Complete"
    INCOMPLETE_CONSENT_DECLINED = "Incomplete - Consent Declined"
    INCOMPLETE_DATA_UNAVAILABLE = "Incomplete - Data Unavailable"


class CheckResultStatus(str, Enum):
    CLEAR = "Clear"
    ADVERSE_FINDING = "Adverse Finding"
    NEUTRAL_INFO = "Neutral / Info"
    NOT_PERFORMED = "Not Performed"


class TaskStatus(str, Enum):
    PENDING_ADMIN_REVIEW = "Pending Admin Review"
    ACTION_REQUIRED = "Action Required"
    INFORMATION_REQUESTED = "Information Requested"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    UNDER_REVIEW = "Under Review"
    COMPLETED = "Completed"


class TaskPriority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TaskType(str, Enum):
    RISK_ESCALATION = "Risk Escalation"
    CONSENT_ISSUE = "Consent Issue"
    OVERDUE_VERIFICATION = "Overdue Verification"
    REPORT_APPROVAL = "Report Approval"
    USER_ACCESS_REQUEST = "User Access Request"
    SYSTEM_ALERT_REVIEW = "System Alert Review"
    INVOICE_DISCREPANCY_APPROVAL = "Invoice Discrepancy Approval"
    COMPLIANCE_REVIEW = "Compliance Review"
    DATA_VALIDATION_REQUIRED = "Data Validation Required"
    MANUAL_INTERVENTION = "Manual Intervention"


class ScheduleFrequency(str, Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    BI_ANNUALLY = "Bi-Annually"
    ANNUALLY = "Annually"


class ScheduleStatus(str, Enum):
    ACTIVE = "Active"
    PAUSED = "Paused"
    OVERDUE = "Overdue"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class EventSeverity(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    INFORMATIONAL = "Informational"


def values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


ACTIVE_CASE_STATUSES = [
    VettingStatus.IN_PROGRESS.value,
    VettingStatus.PARTIALLY_COMPLETE.value,
    VettingStatus.CONSENT_PENDING.value,
]

CLOSED_TASK_STATUSES = [
    TaskStatus.APPROVED.value,
    TaskStatus.REJECTED.value,
    TaskStatus.COMPLETED.value,
]

PRIORITY_ORDER = values(Priority)

# Column schemas used to give empty frames a stable shape
CASE_COLUMNS = [
    "case_id", "case_number", "entity_type", "entity_name", "entity_identifier",
    "status", "priority", "overall_progress", "completed_checks", "total_checks",
    "assigned_officer", "initiated_by", "project_id", "project_name",
    "initiated_date", "assigned_date", "target_completion_date", "last_status_update",
    "is_overdue", "flagged_for_review", "blocker_count", "total_estimated_cost", "notes",
]
CASE_CHECK_COLUMNS = [
    "case_id", "check_id", "check_name", "category", "provider", "status", "result",
    "risk_score", "cost", "started_date", "completed_date", "provider_reference",
]
CONSENT_COLUMNS = [
    "consent_id", "vetting_case_id", "subject_name", "subject_id", "entity_type",
    "project_name", "check_ids", "check_names", "status", "channel",
    "request_sent_date", "link_opened_date", "form_viewed_date", "submitted_date",
    "verified_date", "expiry_date", "recipient_mobile", "recipient_email",
    "verification_notes", "last_updated",
]
REPORT_COLUMNS = [
    "report_id", "vetting_case_id", "subject_name", "subject_id", "entity_type",
    "completion_date", "report_status", "overall_risk_level", "overall_risk_score",
    "summary", "report_generated_by", "pdf_link",
]
REPORT_CHECK_COLUMNS = ["report_id", "check_name", "status", "summary"]
TASK_COLUMNS = [
    "task_id", "type", "subject_name", "subject_id", "description", "assigned_date",
    "due_date", "priority", "status", "assigned_to", "notes", "category",
    "risk_level", "estimated_minutes", "completed_date", "completed_by",
]
SCHEDULE_COLUMNS = [
    "schedule_id", "subject_name", "subject_id", "entity_type", "check_definition_id",
    "check_name", "frequency", "status", "start_date", "last_run_date",
    "last_run_outcome", "next_run_date", "notes",
]
SCHEDULE_RUN_COLUMNS = ["schedule_id", "run_date", "outcome", "report_id"]
FEED_COLUMNS = ["event_id", "timestamp", "case_id", "case_number", "event_type", "severity", "message"]
MINE_SITE_COLUMNS = [
    "mine_site_id", "name", "province", "latitude", "longitude", "metals",
    "aggregated_risk_score", "active_suppliers",
]
SUPPLIER_COLUMNS = [
    "supplier_id", "name", "category", "latitude", "longitude", "contract_value",
    "director_ids", "linked_mine_site_ids", "geographic_risk",
    "operational", "financial", "compliance", "reputational", "contractual",
]
DIRECTOR_COLUMNS = [
    "director_id", "name", "board_positions", "years_experience",
    "has_adverse_media", "compliance_history",
]
EVENT_COLUMNS = [
    "event_id", "timestamp", "title", "description", "severity",
    "related_entity_ids", "action_label", "action_type",
]

DATE_COLUMNS: Dict[str, List[str]] = {
    "cases": ["initiated_date", "assigned_date", "target_completion_date", "last_status_update"],
    "case_checks": ["started_date", "completed_date"],
    "consents": [
        "request_sent_date", "link_opened_date", "form_viewed_date", "submitted_date",
        "verified_date", "expiry_date", "last_updated",
    ],
    "reports": ["completion_date"],
    "tasks": ["assigned_date", "due_date", "completed_date"],
    "schedules": ["start_date", "last_run_date", "next_run_date"],
    "schedule_runs": ["run_date"],
    "feed": ["timestamp"],
    "events": ["timestamp"],
}

LIST_COLUMNS: Dict[str, List[str]] = {
    "consents": ["check_ids", "check_names"],
    "mine_sites": ["metals"],
    "suppliers": ["director_ids", "linked_mine_site_ids"],
    "directors": ["board_positions"],
    "events": ["related_entity_ids"],
}

NUMERIC_COLUMNS: Dict[str, List[str]] = {
    "cases": ["overall_progress", "completed_checks", "total_checks", "blocker_count", "total_estimated_cost"],
    "case_checks": ["risk_score", "cost"],
    "reports": ["overall_risk_score"],
    "tasks": ["estimated_minutes"],
    "mine_sites": ["latitude", "longitude", "aggregated_risk_score", "active_suppliers"],
    "suppliers": [
        "latitude", "longitude", "contract_value",
        "operational", "financial", "compliance", "reputational", "contractual",
    ],
    "directors": ["years_experience"],
}

BOOLEAN_COLUMNS: Dict[str, List[str]] = {
    "cases": ["is_overdue", "flagged_for_review"],
    "directors": ["has_adverse_media"],
}

TABLE_COLUMNS: Dict[str, List[str]] = {
    "cases": CASE_COLUMNS,
    "case_checks": CASE_CHECK_COLUMNS,
    "consents": CONSENT_COLUMNS,
    "reports": REPORT_COLUMNS,
    "report_checks": REPORT_CHECK_COLUMNS,
    "tasks": TASK_COLUMNS,
    "schedules": SCHEDULE_COLUMNS,
    "schedule_runs": SCHEDULE_RUN_COLUMNS,
    "feed": FEED_COLUMNS,
    "mine_sites": MINE_SITE_COLUMNS,
    "suppliers": SUPPLIER_COLUMNS,
    "directors": DIRECTOR_COLUMNS,
    "events": EVENT_COLUMNS,
}

# Badge variants: success | info | warning | danger | default
CONSENT_STATUS_VARIANTS: Dict[str, str] = {
    ConsentRequestStatus.VERIFIED_APPROVED.value: "success",
    ConsentRequestStatus.MANUALLY_RECORDED_APPROVED.value: "success",
    ConsentRequestStatus.PENDING_SENT.value: "info",
    ConsentRequestStatus.LINK_OPENED.value: "info",
    ConsentRequestStatus.FORM_VIEWED.value: "info",
    ConsentRequestStatus.SUBMITTED_AWAITING_VERIFICATION.value: "warning",
    ConsentRequestStatus.VERIFIED_REJECTED_SIGNATURE_MISMATCH.value: "danger",
    ConsentRequestStatus.VERIFIED_REJECTED_OTHER.value: "danger",
    ConsentRequestStatus.DECLINED_BY_SUBJECT.value: "danger",
    ConsentRequestStatus.ERROR_SENDING.value: "danger",
    ConsentRequestStatus.EXPIRED.value: "default",
}

RISK_LEVEL_VARIANTS: Dict[str, str] = {
    RiskLevel.CRITICAL.value: "danger",
    RiskLevel.HIGH.value: "danger",
    RiskLevel.MEDIUM.value: "warning",
    RiskLevel.LOW.value: "success",
    RiskLevel.INFO_ONLY.value: "info",
}

RISK_LEVEL_COLORS: Dict[str, str] = {
    RiskLevel.CRITICAL.value: "#b71c1c",
    RiskLevel.HIGH.value: "#d62728",
    RiskLevel.MEDIUM.value: "#ff7f0e",
    RiskLevel.LOW.value: "#2ca02c",
    RiskLevel.INFO_ONLY.value: "#1f77b4",
}

SCHEDULE_STATUS_COLORS: Dict[str, str] = {
    ScheduleStatus.ACTIVE.value: "#10b981",
    ScheduleStatus.PAUSED.value: "#6b7280",
    ScheduleStatus.OVERDUE.value: "#ef4444",
    ScheduleStatus.IN_PROGRESS.value: "#3b82f6",
    ScheduleStatus.COMPLETED.value: "#8b5cf6",
}

BADGE_ICONS: Dict[str, str] = {
    "success": "🟢",
    "info": "🔵",
    "warning": "🟠",
    "danger": "🔴",
    "default": "⚪",
}


def risk_level_for_score(score: float) -> str:
    if score >= 75:
        return RiskLevel.CRITICAL.value
    if score >= 50:
        return RiskLevel.HIGH.value
    if score >= 25:
        return RiskLevel.MEDIUM.value
    return RiskLevel.LOW.value
