"""
Mock sample-data generators.

Active cases are generated with a seeded numpy Generator so the same seed
and reference time always produce the same dataset. Consent requests,
reports, admin tasks and schedules are curated records whose dates are
expressed relative to the reference time, so "expired", "overdue" and
"upcoming" flags stay meaningful whenever the dashboard is opened.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from vetting_dashboard.config import Settings
from vetting_dashboard.data import catalog
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.identifiers import next_consent_id, next_report_id
from vetting_dashboard.data.models import (
    CASE_CHECK_COLUMNS,
    CASE_COLUMNS,
    CONSENT_COLUMNS,
    FEED_COLUMNS,
    REPORT_CHECK_COLUMNS,
    REPORT_COLUMNS,
    SCHEDULE_COLUMNS,
    SCHEDULE_RUN_COLUMNS,
    TASK_COLUMNS,
    CheckResultStatus,
    CheckStatus,
    ConsentChannel,
    ConsentRequestStatus,
    EntityType,
    Priority,
    ReportStatus,
    RiskLevel,
    ScheduleFrequency,
    ScheduleStatus,
    TaskPriority,
    TaskStatus,
    TaskType,
    VettingStatus,
    risk_level_for_score,
)
from vetting_dashboard.data.scheduling import FREQUENCY_MONTHS
from vetting_dashboard.risk.profiles import (
    directors_frame,
    events_frame,
    mine_sites_frame,
    suppliers_frame,
)

FIRST_NAMES = [
    "Thabo", "Lerato", "Sipho", "Naledi", "Pieter", "Anele", "Zanele", "Johan", "Ayanda",
    "Karabo", "Mandla", "Refilwe", "Tshepo", "Nomvula", "Willem", "Busisiwe", "Kagiso", "Priya",
]
LAST_NAMES = [
    "Mthembu", "Dlamini", "Nkosi", "Botha", "van Wyk", "Khumalo", "Naidoo", "Mokoena",
    "Pretorius", "Sithole", "Molefe", "Ndlovu", "Coetzee", "Zulu", "Pillay", "Mahlangu",
]
COMPANY_STEMS = [
    "Bushveld", "Highveld", "Karoo", "Limpopo", "Waterberg", "Magalies", "Vaal", "Platinum Belt",
    "Witwatersrand", "Mpumalanga", "Kalahari", "Drakensberg",
]
COMPANY_TRADES = [
    "Engineering", "Logistics", "Drilling Services", "Mining Supplies", "Security", "Catering",
    "Electrical Contractors", "Civils", "Haulage", "Maintenance",
]
COMPANY_SUFFIXES = ["(Pty) Ltd", "CC", "Holdings", "Group"]
OFFICERS = ["Mike Stevens", "Sarah Johnson", "Lindiwe Mkhize", "Ruan Steyn", "Fatima Patel", "David Nel"]
PROJECTS = [
    ("proj_SB001", "Marikana K4 Expansion"),
    ("proj_SB002", "Kloof Shaft Rehabilitation"),
    ("proj_SB003", "Beatrix Ventilation Upgrade"),
    ("proj_SB004", "Driefontein Tailings Retreatment"),
    ("proj_SB005", "Rustenburg Smelter Maintenance"),
]

STATUS_WEIGHTS: Dict[VettingStatus, float] = {
    VettingStatus.INITIATED: 0.08,
    VettingStatus.CONSENT_PENDING: 0.15,
    VettingStatus.IN_PROGRESS: 0.38,
    VettingStatus.PARTIALLY_COMPLETE: 0.15,
    VettingStatus.COMPLETE: 0.16,
    VettingStatus.FAILED: 0.04,
    VettingStatus.CANCELLED: 0.04,
}
ENTITY_WEIGHTS: Dict[EntityType, float] = {
    EntityType.INDIVIDUAL: 0.45,
    EntityType.COMPANY: 0.35,
    EntityType.STAFF_MEDICAL: 0.20,
}
PRIORITY_WEIGHTS: Dict[Priority, float] = {
    Priority.LOW: 0.2,
    Priority.MEDIUM: 0.4,
    Priority.HIGH: 0.3,
    Priority.URGENT: 0.1,
}
CLOSED_CASE_STATUSES = {VettingStatus.COMPLETE, VettingStatus.CANCELLED, VettingStatus.FAILED}


def _choice(rng: np.random.Generator, weights: Dict) -> object:
    keys = list(weights)
    probs = np.array(list(weights.values()), dtype=float)
    return keys[int(rng.choice(len(keys), p=probs / probs.sum()))]


def _sa_id_number(rng: np.random.Generator) -> str:
    year = int(rng.integers(60, 100))
    month = int(rng.integers(1, 13))
    day = int(rng.integers(1, 29))
    tail = int(rng.integers(0, 10_000_000))
    return f"{year:02d}{month:02d}{day:02d}{tail:07d}"


def _entity(rng: np.random.Generator, entity_type: EntityType, as_of: pd.Timestamp) -> Tuple[str, str]:
    if entity_type == EntityType.COMPANY:
        name = " ".join(
            [str(rng.choice(COMPANY_STEMS)), str(rng.choice(COMPANY_TRADES)), str(rng.choice(COMPANY_SUFFIXES))]
        )
        reg_year = int(rng.integers(1995, as_of.year))
        identifier = f"{reg_year}/{int(rng.integers(100000, 999999)):06d}/07"
        return name, identifier
    name = f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"
    return name, _sa_id_number(rng)


def _progress_for(rng: np.random.Generator, status: VettingStatus) -> int:
    if status in (VettingStatus.INITIATED, VettingStatus.CONSENT_PENDING):
        return 0
    if status == VettingStatus.COMPLETE:
        return 100
    if status == VettingStatus.PARTIALLY_COMPLETE:
        return int(rng.integers(40, 91))
    if status == VettingStatus.CANCELLED:
        return int(rng.integers(0, 51))
    return int(rng.integers(10, 91))


def generate_case_checks(
    rng: np.random.Generator,
    case_id: str,
    check_ids: Sequence[str],
    status: VettingStatus,
    progress: int,
    initiated: pd.Timestamp,
    as_of: pd.Timestamp,
) -> List[dict]:
    """Per-check rows for one case: the first checks complete, the next one running."""
    completed = int(np.floor(progress / 100 * len(check_ids)))
    rows = []
    cursor = initiated
    for index, check_id in enumerate(check_ids):
        definition = catalog.get_check(check_id)
        row = {
            "case_id": case_id,
            "check_id": check_id,
            "check_name": definition.name,
            "category": definition.category.value,
            "provider": definition.provider,
            "status": CheckStatus.PENDING.value,
            "result": None,
            "risk_score": np.nan,
            "cost": definition.cost,
            "started_date": pd.NaT,
            "completed_date": pd.NaT,
            "provider_reference": None,
        }
        if index < completed:
            cursor = min(cursor + pd.Timedelta(days=definition.turnaround_days), as_of)
            adverse = bool(rng.random() < 0.15)
            row.update(
                status=CheckStatus.COMPLETE.value,
                result="Flag" if adverse else "Pass",
                risk_score=float(rng.integers(55, 91) if adverse else rng.integers(0, 31)),
                started_date=initiated,
                completed_date=cursor,
                provider_reference=f"{definition.provider.split()[0].upper()}-{int(rng.integers(100000, 999999))}",
            )
        elif index == completed and status in (VettingStatus.IN_PROGRESS, VettingStatus.PARTIALLY_COMPLETE):
            row.update(status=CheckStatus.IN_PROGRESS.value, started_date=cursor)
        elif index == completed and status == VettingStatus.FAILED:
            row.update(status=CheckStatus.FAILED.value, result="Provider error", started_date=cursor)
        rows.append(row)
    return rows


def generate_active_cases(
    rng: np.random.Generator,
    as_of: pd.Timestamp,
    n: int = 40,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Generate `n` vetting cases and their per-check rows."""
    cases: List[dict] = []
    checks: List[dict] = []
    for i in range(n):
        entity_type = _choice(rng, ENTITY_WEIGHTS)
        status = _choice(rng, STATUS_WEIGHTS)
        name, identifier = _entity(rng, entity_type, as_of)

        applicable = [c.check_id for c in catalog.checks_by_entity_type(entity_type)]
        size = int(rng.integers(3, min(7, len(applicable)) + 1))
        check_ids = [applicable[j] for j in sorted(rng.choice(len(applicable), size=size, replace=False))]

        progress = _progress_for(rng, status)
        initiated = (as_of - pd.Timedelta(days=int(rng.integers(1, 46)))).normalize()
        turnaround = catalog.max_turnaround(check_ids)
        target = initiated + pd.Timedelta(days=turnaround + int(rng.integers(1, 6)))
        case_id = f"case_{i + 1:03d}"
        project_id, project_name = PROJECTS[int(rng.integers(0, len(PROJECTS)))]
        officer = str(rng.choice(OFFICERS))

        case_checks = generate_case_checks(rng, case_id, check_ids, status, progress, initiated, as_of)
        checks.extend(case_checks)
        completed = sum(1 for c in case_checks if c["status"] == CheckStatus.COMPLETE.value)
        last_update = max(
            [c["completed_date"] for c in case_checks if pd.notna(c["completed_date"])] + [initiated]
        )
        blockers = int(rng.integers(1, 3)) if rng.random() < 0.15 else 0

        cases.append(
            {
                "case_id": case_id,
                "case_number": f"VET-{as_of.year}-{1200 + i * 7:06d}",
                "entity_type": entity_type.value,
                "entity_name": name,
                "entity_identifier": identifier,
                "status": status.value,
                "priority": _choice(rng, PRIORITY_WEIGHTS).value,
                "overall_progress": progress,
                "completed_checks": completed,
                "total_checks": len(check_ids),
                "assigned_officer": officer,
                "initiated_by": str(rng.choice(OFFICERS)),
                "project_id": project_id,
                "project_name": project_name,
                "initiated_date": initiated,
                "assigned_date": initiated + pd.Timedelta(hours=int(rng.integers(1, 48))),
                "target_completion_date": target,
                "last_status_update": last_update,
                "is_overdue": bool(target < as_of and status not in CLOSED_CASE_STATUSES),
                "flagged_for_review": bool(rng.random() < 0.15),
                "blocker_count": blockers,
                "total_estimated_cost": catalog.total_cost(check_ids),
                "notes": "",
            }
        )
    return (
        pd.DataFrame(cases, columns=CASE_COLUMNS),
        pd.DataFrame(checks, columns=CASE_CHECK_COLUMNS),
    )


def _ago(as_of: pd.Timestamp, days: float = 0, hours: float = 0) -> pd.Timestamp:
    return as_of - pd.Timedelta(days=days, hours=hours)


def _consent(
    as_of: pd.Timestamp,
    existing: List[str],
    case_id: str,
    subject: str,
    subject_id: str,
    entity_type: EntityType,
    check_ids: Sequence[str],
    status: ConsentRequestStatus,
    channel: ConsentChannel,
    sent_days_ago: float,
    expiry_days: Optional[float] = 7,
    project_name: Optional[str] = None,
    notes: Optional[str] = None,
) -> dict:
    sent = _ago(as_of, days=sent_days_ago)
    consent_id = next_consent_id(existing, sent)
    existing.append(consent_id)
    progression = [
        ConsentRequestStatus.LINK_OPENED,
        ConsentRequestStatus.FORM_VIEWED,
        ConsentRequestStatus.SUBMITTED_AWAITING_VERIFICATION,
    ]
    reached = {
        ConsentRequestStatus.LINK_OPENED: 1,
        ConsentRequestStatus.FORM_VIEWED: 2,
        ConsentRequestStatus.DECLINED_BY_SUBJECT: 2,
        ConsentRequestStatus.SUBMITTED_AWAITING_VERIFICATION: 3,
        ConsentRequestStatus.VERIFIED_APPROVED: 3,
        ConsentRequestStatus.VERIFIED_REJECTED_SIGNATURE_MISMATCH: 3,
        ConsentRequestStatus.VERIFIED_REJECTED_OTHER: 3,
    }.get(status, 0)
    stamps = {step: sent + pd.Timedelta(hours=3 + idx) for idx, step in enumerate(progression[:reached])}
    verified = None
    if status.value.startswith("Verified") or status == ConsentRequestStatus.MANUALLY_RECORDED_APPROVED:
        verified = sent + pd.Timedelta(hours=8)
    last_updated = max([sent] + list(stamps.values()) + ([verified] if verified is not None else []))
    return {
        "consent_id": consent_id,
        "vetting_case_id": case_id,
        "subject_name": subject,
        "subject_id": subject_id,
        "entity_type": entity_type.value,
        "project_name": project_name,
        "check_ids": list(check_ids),
        "check_names": [catalog.check_name(c) for c in check_ids],
        "status": status.value,
        "channel": channel.value,
        "request_sent_date": sent,
        "link_opened_date": stamps.get(ConsentRequestStatus.LINK_OPENED, pd.NaT),
        "form_viewed_date": stamps.get(ConsentRequestStatus.FORM_VIEWED, pd.NaT),
        "submitted_date": stamps.get(ConsentRequestStatus.SUBMITTED_AWAITING_VERIFICATION, pd.NaT),
        "verified_date": verified if verified is not None else pd.NaT,
        "expiry_date": sent + pd.Timedelta(days=expiry_days) if expiry_days is not None else pd.NaT,
        "recipient_mobile": "+27 82 000 0000" if channel == ConsentChannel.SMS_LINK else None,
        "recipient_email": (
            f"{subject.split()[0].lower()}@example.co.za" if channel == ConsentChannel.EMAIL_LINK else None
        ),
        "verification_notes": notes,
        "last_updated": last_updated,
    }


def sample_consent_requests(as_of: pd.Timestamp, cases: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    """Curated consent requests covering every status, plus one per consent-pending case."""
    S = ConsentRequestStatus
    C = ConsentChannel
    ids: List[str] = []
    rows = [
        _consent(as_of, ids, "VC-DEMO-002", "Johnathan Doe", "850101", EntityType.INDIVIDUAL,
                 ["id_verify_sa", "criminal_record_afis"], S.PENDING_SENT, C.SMS_LINK, 2),
        _consent(as_of, ids, "VC-DEMO-003", "Sarah Connor", "900303", EntityType.STAFF_MEDICAL,
                 ["med_fitness_cert", "chronic_med_history", "drug_alcohol_screen"], S.VERIFIED_APPROVED,
                 C.EMAIL_LINK, 12, project_name="Marikana K4 Expansion"),
        _consent(as_of, ids, "VC-DEMO-001", "Alice Smith (Director at QuantumLeap)", "750101",
                 EntityType.INDIVIDUAL, ["credit_check_ind", "pep_sanctions_ind"],
                 S.SUBMITTED_AWAITING_VERIFICATION, C.SMS_LINK, 4),
        _consent(as_of, ids, "VC-MANUAL-001", "Manual Upload Example Co.", "990213", EntityType.COMPANY,
                 ["bank_acc_verify_biz"], S.MANUALLY_RECORDED_APPROVED, C.MANUAL_UPLOAD, 1, expiry_days=None,
                 notes="Physical consent form received and verified by admin."),
        _consent(as_of, ids, "VC-DEMO-004", "Expired Link User", "880505", EntityType.INDIVIDUAL,
                 ["id_verify_sa"], S.EXPIRED, C.SMS_LINK, 10),
        _consent(as_of, ids, "VC-DEMO-005", "Michael Brown", "820707", EntityType.INDIVIDUAL,
                 ["credit_check_ind", "lifestyle_audit_ind"], S.DECLINED_BY_SUBJECT, C.EMAIL_LINK, 6),
        _consent(as_of, ids, "VC-DEMO-006", "TechCorp Pty Ltd", "2015/123456/07", EntityType.COMPANY,
                 ["tax_compliance_check", "professional_licenses"], S.LINK_OPENED, C.EMAIL_LINK, 6.5),
        _consent(as_of, ids, "VC-DEMO-007", "Lisa Williams", "910909", EntityType.STAFF_MEDICAL,
                 ["med_fitness_cert", "drug_alcohol_screen", "psychological_assessment"], S.FORM_VIEWED,
                 C.SMS_LINK, 3, project_name="Kloof Shaft Rehabilitation"),
        _consent(as_of, ids, "VC-DEMO-008", "Robert Davis", "790202", EntityType.INDIVIDUAL,
                 ["criminal_record_enhanced"], S.VERIFIED_REJECTED_SIGNATURE_MISMATCH, C.EMAIL_LINK, 9,
                 notes="Signature does not match the ID document on file."),
        _consent(as_of, ids, "VC-DEMO-009", "Innovation Labs Ltd", "2019/654321/07", EntityType.COMPANY,
                 ["watchlist_screening"], S.ERROR_SENDING, C.SMS_LINK, 1),
        _consent(as_of, ids, "VC-DEMO-010", "Jennifer Taylor", "870404", EntityType.INDIVIDUAL,
                 ["employment_verify", "education_verify"], S.VERIFIED_REJECTED_OTHER, C.EMAIL_LINK, 8,
                 notes="Uploaded form was incomplete."),
        _consent(as_of, ids, "VC-DEMO-011", "David Wilson", "930606", EntityType.STAFF_MEDICAL,
                 ["infectious_disease_screen", "med_fitness_cert"], S.PENDING_SENT, C.SMS_LINK, 6.8,
                 project_name="Beatrix Ventilation Upgrade"),
        _consent(as_of, ids, "VC-DEMO-012", "Kgosi Mining Services", "2011/445566/07", EntityType.COMPANY,
                 ["litigation_search"], S.SUBMITTED_AWAITING_VERIFICATION, C.EMAIL_LINK, 2),
    ]

    if cases is not None and not cases.empty:
        pending = cases[cases["status"] == VettingStatus.CONSENT_PENDING.value]
        statuses = [S.PENDING_SENT, S.LINK_OPENED, S.FORM_VIEWED]
        for idx, case in enumerate(pending.to_dict("records")):
            consent_checks = [
                c.check_id
                for c in catalog.checks_by_entity_type(EntityType(case["entity_type"]))
                if c.consent_required
            ][:3]
            if not consent_checks:
                continue
            sent_days = max((as_of - case["initiated_date"]).total_seconds() / 86400 - 0.5, 0.1)
            rows.append(
                _consent(
                    as_of, ids, case["case_number"], case["entity_name"], case["entity_identifier"],
                    EntityType(case["entity_type"]), consent_checks, statuses[idx % len(statuses)],
                    C.SMS_LINK if idx % 2 == 0 else C.EMAIL_LINK, sent_days,
                    project_name=case["project_name"],
                )
            )
    return pd.DataFrame(rows, columns=CONSENT_COLUMNS)


_CURATED_REPORTS = [
    # subject, subject id, entity, days ago, status, score, summary, [(check, result, summary)]
    ("QuantumLeap Solutions (Pty) Ltd", "2012/112233/07", EntityType.COMPANY, 3, ReportStatus.COMPLETE, 82,
     "Multiple adverse credit findings and a director linked to a politically exposed person.",
     [("Business Credit Report", CheckResultStatus.ADVERSE_FINDING, "3 defaults noted in the last 12 months."),
      ("CIPC Company Registration Check", CheckResultStatus.CLEAR, "Registered and active."),
      ("PEP & Sanctions Screening (Company)", CheckResultStatus.ADVERSE_FINDING, "Director link to PEP found."),
      ("VAT Registration Verification (SARS)", CheckResultStatus.CLEAR, "VAT number valid.")]),
    ("Thandiwe Nkosi", "8801015800087", EntityType.INDIVIDUAL, 5, ReportStatus.COMPLETE, 12,
     "No adverse findings. Identity and employment history verified.",
     [("SA ID Verification", CheckResultStatus.CLEAR, "Verified."),
      ("Criminal Record Check (AFIS)", CheckResultStatus.CLEAR, "No records found."),
      ("Employment History Verification", CheckResultStatus.CLEAR, "All references confirmed.")]),
    ("Sarah Connor", "900303", EntityType.STAFF_MEDICAL, 8, ReportStatus.COMPLETE, 35,
     "Fit for duty with chronic medication noted for monitoring.",
     [("Certificate of Fitness (Mining)", CheckResultStatus.CLEAR, "Fit for underground work."),
      ("Chronic Medication History Review", CheckResultStatus.NEUTRAL_INFO, "Chronic medication disclosed."),
      ("Drug & Alcohol Screening", CheckResultStatus.CLEAR, "Negative.")]),
    ("Michael Brown", "820707", EntityType.INDIVIDUAL, 10, ReportStatus.INCOMPLETE_CONSENT_DECLINED, 55,
     "Subject declined consent for financial checks. Partial findings only.",
     [("SA ID Verification", CheckResultStatus.CLEAR, "Verified."),
      ("Individual Credit Report", CheckResultStatus.NOT_PERFORMED, "Consent declined."),
      ("Individual Lifestyle Audit (Basic)", CheckResultStatus.NOT_PERFORMED, "Consent declined.")]),
    ("Vaal Haulage CC", "2009/778899/23", EntityType.COMPANY, 14, ReportStatus.INCOMPLETE_DATA_UNAVAILABLE, 48,
     "Physical verification could not be completed; provider data unavailable.",
     [("CIPC Company Registration Check", CheckResultStatus.CLEAR, "Registered."),
      ("Physical Location Verification", CheckResultStatus.NOT_PERFORMED, "Site inaccessible."),
      ("Media & Internet Search (Company)", CheckResultStatus.NEUTRAL_INFO, "Minor labour dispute coverage.")]),
    ("Bushveld Drilling Services (Pty) Ltd", "2014/334455/07", EntityType.COMPANY, 20, ReportStatus.COMPLETE, 91,
     "Sanctions screening hit on a shareholder and unresolved litigation.",
     [("Watchlist & Sanctions Screening", CheckResultStatus.ADVERSE_FINDING, "Shareholder on sanctions list."),
      ("Litigation & Legal History Search", CheckResultStatus.ADVERSE_FINDING, "Two open civil matters."),
      ("Business Bank Account Verification", CheckResultStatus.CLEAR, "Account verified.")]),
    ("Pieter Botha", "7605055123089", EntityType.INDIVIDUAL, 26, ReportStatus.COMPLETE, 0,
     "Informational report for internal transfer. No checks returned findings.",
     [("SA ID Verification", CheckResultStatus.CLEAR, "Verified.")]),
    ("Karabo Mokoena", "9102026123084", EntityType.STAFF_MEDICAL, 33, ReportStatus.COMPLETE, 64,
     "Drug screening non-negative; retest recommended before site access.",
     [("Drug & Alcohol Screening", CheckResultStatus.ADVERSE_FINDING, "Non-negative result."),
      ("Certificate of Fitness (Mining)", CheckResultStatus.CLEAR, "Fit."),
      ("Infectious Disease Screening", CheckResultStatus.CLEAR, "Clear.")]),
]


def sample_completed_reports(
    as_of: pd.Timestamp,
    cases: Optional[pd.DataFrame] = None,
    case_checks: Optional[pd.DataFrame] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Curated completed reports plus one report per generated complete case."""
    reports: List[dict] = []
    results: List[dict] = []
    ids: List[str] = []

    def _add(case_id, subject, subject_id, entity, completed, status, score, summary, level=None, by="System (Automated)"):
        report_id = next_report_id(ids, completed)
        ids.append(report_id)
        reports.append(
            {
                "report_id": report_id,
                "vetting_case_id": case_id,
                "subject_name": subject,
                "subject_id": subject_id,
                "entity_type": entity.value,
                "completion_date": completed,
                "report_status": status.value,
                "overall_risk_level": level or risk_level_for_score(score),
                "overall_risk_score": score,
                "summary": summary,
                "report_generated_by": by,
                "pdf_link": f"/reports/{report_id}.pdf",
            }
        )
        return report_id

    for idx, (subject, subject_id, entity, days, status, score, summary, checks) in enumerate(_CURATED_REPORTS):
        level = RiskLevel.INFO_ONLY.value if score == 0 else None
        report_id = _add(f"VC-ARCHIVE-{idx + 1:03d}", subject, subject_id, entity, _ago(as_of, days=days),
                         status, score, summary, level=level, by="Compliance Admin" if idx % 3 == 0 else
                         "System (Automated)")
        for name, result, note in checks:
            results.append({"report_id": report_id, "check_name": name, "status": result.value, "summary": note})

    if cases is not None and case_checks is not None and not cases.empty:
        complete = cases[cases["status"] == VettingStatus.COMPLETE.value]
        for case in complete.to_dict("records"):
            rows = case_checks[case_checks["case_id"] == case["case_id"]]
            scores = pd.to_numeric(rows["risk_score"], errors="coerce").dropna()
            flags = int((rows["result"] == "Flag").sum())
            score = int(min(100, round(float(scores.mean()) if not scores.empty else 0) + 10 * flags))
            summary = (
                f"{flags} adverse finding(s) across {len(rows)} checks." if flags
                else f"All {len(rows)} checks returned clear results."
            )
            report_id = _add(case["case_number"], case["entity_name"], case["entity_identifier"],
                             EntityType(case["entity_type"]), case["last_status_update"], ReportStatus.COMPLETE,
                             score, summary)
            for row in rows.to_dict("records"):
                status = CheckResultStatus.ADVERSE_FINDING if row["result"] == "Flag" else CheckResultStatus.CLEAR
                results.append(
                    {
                        "report_id": report_id,
                        "check_name": row["check_name"],
                        "status": status.value,
                        "summary": "Adverse finding recorded." if row["result"] == "Flag" else "Verified.",
                    }
                )

    return pd.DataFrame(reports, columns=REPORT_COLUMNS), pd.DataFrame(results, columns=REPORT_CHECK_COLUMNS)


_CURATED_TASKS = [
    # type, subject, subject id, description, assigned days ago, due in days (None), priority, status, category, risk
    (TaskType.RISK_ESCALATION, "QuantumLeap Solutions (Pty) Ltd", "supplier_QLS001",
     "High financial risk detected post-vetting. Requires a decision on supplier status.",
     4, -2, TaskPriority.HIGH, TaskStatus.PENDING_ADMIN_REVIEW, "Financial Risk", "Critical", 45),
    (TaskType.CONSENT_ISSUE, "Robert Davis (Individual)", "ind_RD005",
     "Digital consent failed verification due to a signature mismatch. Manual review required.",
     3, None, TaskPriority.MEDIUM, TaskStatus.ACTION_REQUIRED, "Legal Compliance", None, 20),
    (TaskType.OVERDUE_VERIFICATION, "EcoBuild Construction CC", "supplier_EBC002",
     "CIPC verification overdue. Provider reported intermittent connectivity issues.",
     6, -3, TaskPriority.MEDIUM, TaskStatus.PENDING_ADMIN_REVIEW, "System Integration", None, 30),
    (TaskType.REPORT_APPROVAL, "Quarterly Supplier Risk Summary", "report_QSR002",
     "Quarterly risk report requires final approval before distribution to stakeholders.",
     1, 2, TaskPriority.HIGH, TaskStatus.ACTION_REQUIRED, "Reporting", None, 60),
    (TaskType.USER_ACCESS_REQUEST, "Lindiwe Mkhize", "user_LM014",
     "New vetting officer requests access to medical check results.",
     2, 5, TaskPriority.LOW, TaskStatus.PENDING_ADMIN_REVIEW, "Access Control", None, 10),
    (TaskType.SYSTEM_ALERT_REVIEW, "Provider Integration Monitor", "sys_PIM001",
     "Elevated error rate on SMS consent delivery over the last 24 hours.",
     1, 1, TaskPriority.HIGH, TaskStatus.UNDER_REVIEW, "System Integration", None, 25),
    (TaskType.INVOICE_DISCREPANCY_APPROVAL, "West Rand Water Purification", "supplier_WRW202",
     "Invoice total exceeds the approved quote by 40%. Approval needed before payment.",
     5, -1, TaskPriority.MEDIUM, TaskStatus.ACTION_REQUIRED, "Finance", "High", 35),
    (TaskType.COMPLIANCE_REVIEW, "Gauteng Gold Refiners", "supplier_GGR201",
     "Adverse media on sourcing practices requires a compliance review.",
     7, 3, TaskPriority.HIGH, TaskStatus.INFORMATION_REQUESTED, "Compliance", "High", 90),
    (TaskType.DATA_VALIDATION_REQUIRED, "Karabo Mokoena", "ind_KM221",
     "ID number on file does not match the Home Affairs response. Validate captured data.",
     2, 4, TaskPriority.MEDIUM, TaskStatus.PENDING_ADMIN_REVIEW, "Data Quality", None, 15),
    (TaskType.MANUAL_INTERVENTION, "Vaal Haulage CC", "supplier_VH118",
     "Physical location verification could not be scheduled. Arrange an alternative visit.",
     9, -5, TaskPriority.LOW, TaskStatus.ACTION_REQUIRED, "Field Operations", None, 40),
    (TaskType.REPORT_APPROVAL, "Bushveld Drilling Services (Pty) Ltd", "report_BDS014",
     "Final vetting report with sanctions hit ready for sign-off.",
     12, -8, TaskPriority.HIGH, TaskStatus.APPROVED, "Reporting", "Critical", 30),
    (TaskType.USER_ACCESS_REQUEST, "External Auditor", "user_EXT003",
     "Temporary read-only access requested for the annual audit.",
     15, -10, TaskPriority.LOW, TaskStatus.REJECTED, "Access Control", None, 10),
    (TaskType.COMPLIANCE_REVIEW, "Welkom Safety Gear Pty Ltd", "supplier_WSG301",
     "Annual post-vetting review completed; confirm closure.",
     20, -14, TaskPriority.LOW, TaskStatus.COMPLETED, "Compliance", "Low", 20),
    (TaskType.RISK_ESCALATION, "Sipho Ndlovu (Director)", "DIR_04",
     "Director sits on four supplier boards. Concentration risk escalated by the risk engine.",
     0.5, 2, TaskPriority.HIGH, TaskStatus.PENDING_ADMIN_REVIEW, "Concentration Risk", "Critical", 60),
]


def sample_admin_tasks(as_of: pd.Timestamp) -> pd.DataFrame:
    rows = []
    for idx, (task_type, subject, subject_id, description, assigned_ago, due_in, priority, status, category,
              risk, minutes) in enumerate(_CURATED_TASKS):
        closed = status in (TaskStatus.APPROVED, TaskStatus.REJECTED, TaskStatus.COMPLETED)
        due = as_of + pd.Timedelta(days=due_in) if due_in is not None else pd.NaT
        rows.append(
            {
                "task_id": f"task_{idx + 1:03d}",
                "type": task_type.value,
                "subject_name": subject,
                "subject_id": subject_id,
                "description": description,
                "assigned_date": _ago(as_of, days=assigned_ago),
                "due_date": due,
                "priority": priority.value,
                "status": status.value,
                "assigned_to": "Super Admin",
                "notes": "",
                "category": category,
                "risk_level": risk,
                "estimated_minutes": minutes,
                "completed_date": due if closed else pd.NaT,
                "completed_by": "Super Admin" if closed else None,
            }
        )
    return pd.DataFrame(rows, columns=TASK_COLUMNS)


_CURATED_SCHEDULES = [
    # subject, subject id, entity, check id, frequency, status, next run offset days, history length, notes
    ("QuantumLeap Solutions (Pty) Ltd", "2012/112233/07", EntityType.COMPANY, "business_credit_report",
     ScheduleFrequency.QUARTERLY, ScheduleStatus.ACTIVE, 3, 3, "Monitor credit deterioration."),
    ("Thabo Mthembu", "8503125432087", EntityType.INDIVIDUAL, "criminal_record_afis",
     ScheduleFrequency.ANNUALLY, ScheduleStatus.ACTIVE, 45, 2, None),
    ("Gauteng Gold Refiners", "2001/556677/07", EntityType.COMPANY, "media_search_company",
     ScheduleFrequency.MONTHLY, ScheduleStatus.ACTIVE, -2, 4, "Adverse media watch."),
    ("Sarah Connor", "900303", EntityType.STAFF_MEDICAL, "med_fitness_cert",
     ScheduleFrequency.ANNUALLY, ScheduleStatus.ACTIVE, 6, 1, "Certificate renewal."),
    ("Bushveld Drilling Services (Pty) Ltd", "2014/334455/07", EntityType.COMPANY, "watchlist_screening",
     ScheduleFrequency.MONTHLY, ScheduleStatus.OVERDUE, -9, 5, "Provider outage delayed last run."),
    ("Marikana Heavy Machinery Lease", "2008/221100/07", EntityType.COMPANY, "bee_verification",
     ScheduleFrequency.ANNUALLY, ScheduleStatus.ACTIVE, 1, 2, "B-BBEE certificate expiring."),
    ("Lerato Dlamini", "9005050123086", EntityType.INDIVIDUAL, "credit_check_ind",
     ScheduleFrequency.BI_ANNUALLY, ScheduleStatus.PAUSED, -20, 2, "Paused during internal transfer."),
    ("Karabo Mokoena", "9102026123084", EntityType.STAFF_MEDICAL, "drug_alcohol_screen",
     ScheduleFrequency.QUARTERLY, ScheduleStatus.IN_PROGRESS, 0.5, 1, "Retest after non-negative result."),
    ("West Rand Water Purification", "2010/998877/07", EntityType.COMPANY, "tax_compliance_check",
     ScheduleFrequency.QUARTERLY, ScheduleStatus.ACTIVE, 30, 3, None),
    ("Welkom Safety Gear Pty Ltd", "2016/443322/07", EntityType.COMPANY, "cipc_company_check",
     ScheduleFrequency.ANNUALLY, ScheduleStatus.COMPLETED, 200, 3, "Contract ended."),
]


def sample_scheduled_checks(
    as_of: pd.Timestamp,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    rng = rng or np.random.default_rng(0)
    outcomes = [RiskLevel.LOW.value, RiskLevel.LOW.value, RiskLevel.MEDIUM.value, RiskLevel.HIGH.value]
    schedules: List[dict] = []
    runs: List[dict] = []
    for idx, (subject, subject_id, entity, check_id, frequency, status, next_offset, history,
              notes) in enumerate(_CURATED_SCHEDULES):
        schedule_id = f"SCH-{idx + 1:03d}"
        next_run = (as_of + pd.Timedelta(days=next_offset)).floor("h")
        run_dates: List[pd.Timestamp] = []
        cursor = next_run
        for _ in range(history):
            cursor = cursor - pd.DateOffset(months=_months(frequency))
            run_dates.append(cursor)
        run_dates.sort()
        start = run_dates[0] if run_dates else next_run - pd.DateOffset(months=_months(frequency))
        last_outcome = None
        for run_no, run_date in enumerate(run_dates, start=1):
            last_outcome = str(rng.choice(outcomes))
            runs.append(
                {
                    "schedule_id": schedule_id,
                    "run_date": run_date,
                    "outcome": last_outcome,
                    "report_id": f"SR-{idx + 1:03d}-{run_no:02d}",
                }
            )
        schedules.append(
            {
                "schedule_id": schedule_id,
                "subject_name": subject,
                "subject_id": subject_id,
                "entity_type": entity.value,
                "check_definition_id": check_id,
                "check_name": catalog.check_name(check_id),
                "frequency": frequency.value,
                "status": status.value,
                "start_date": start,
                "last_run_date": run_dates[-1] if run_dates else pd.NaT,
                "last_run_outcome": last_outcome,
                "next_run_date": next_run,
                "notes": notes,
            }
        )
    return pd.DataFrame(schedules, columns=SCHEDULE_COLUMNS), pd.DataFrame(runs, columns=SCHEDULE_RUN_COLUMNS)


def _months(frequency: ScheduleFrequency) -> int:
    return FREQUENCY_MONTHS[frequency.value]


def sample_intelligence_feed(
    cases: pd.DataFrame,
    case_checks: pd.DataFrame,
    as_of: pd.Timestamp,
    limit: int = 30,
) -> pd.DataFrame:
    """Recent case events (check completions, consent requests, overdue alerts), newest first."""
    if cases.empty:
        return pd.DataFrame(columns=FEED_COLUMNS)
    numbers = cases.set_index("case_id")["case_number"].to_dict()
    names = cases.set_index("case_id")["entity_name"].to_dict()
    events: List[dict] = []

    done = case_checks[case_checks["status"] == CheckStatus.COMPLETE.value]
    for row in done.to_dict("records"):
        flagged = row["result"] == "Flag"
        events.append(
            {
                "timestamp": row["completed_date"],
                "case_id": row["case_id"],
                "event_type": "Adverse Finding" if flagged else "Check Completed",
                "severity": "High" if flagged else "Informational",
                "message": f"{row['check_name']} {'flagged' if flagged else 'cleared'} for {names[row['case_id']]}",
            }
        )
    for row in cases[cases["status"] == VettingStatus.CONSENT_PENDING.value].to_dict("records"):
        events.append(
            {
                "timestamp": row["assigned_date"],
                "case_id": row["case_id"],
                "event_type": "Consent Requested",
                "severity": "Medium",
                "message": f"Consent request sent to {row['entity_name']}",
            }
        )
    for row in cases[cases["is_overdue"].astype(bool)].to_dict("records"):
        events.append(
            {
                "timestamp": row["target_completion_date"],
                "case_id": row["case_id"],
                "event_type": "Case Overdue",
                "severity": "Critical" if row["priority"] in ("High", "Urgent") else "High",
                "message": f"{row['case_number']} passed its target completion date",
            }
        )

    if not events:
        return pd.DataFrame(columns=FEED_COLUMNS)
    feed = pd.DataFrame(events)
    feed = feed[feed["timestamp"] <= as_of]
    feed = feed.sort_values("timestamp", ascending=False).head(limit).reset_index(drop=True)
    feed["case_number"] = feed["case_id"].map(numbers)
    feed["event_id"] = [f"EV-{i + 1:04d}" for i in range(len(feed))]
    return feed[FEED_COLUMNS]


def build_sample_bundle(settings: Settings, as_of: Optional[pd.Timestamp] = None) -> DataBundle:
    """Generate every table from the configured seed and reference time."""
    as_of = as_of if as_of is not None else settings.reference_time()
    rng = np.random.default_rng(settings.sample_seed)

    cases, case_checks = generate_active_cases(rng, as_of, settings.sample_case_count)
    reports, report_checks = sample_completed_reports(as_of, cases, case_checks)
    schedules, schedule_runs = sample_scheduled_checks(as_of, rng)

    return DataBundle(
        cases=cases,
        case_checks=case_checks,
        consents=sample_consent_requests(as_of, cases),
        reports=reports,
        report_checks=report_checks,
        tasks=sample_admin_tasks(as_of),
        schedules=schedules,
        schedule_runs=schedule_runs,
        feed=sample_intelligence_feed(cases, case_checks, as_of),
        mine_sites=mine_sites_frame(),
        suppliers=suppliers_frame(),
        directors=directors_frame(),
        events=events_frame(as_of),
        diagnostics={
            "source": "sample",
            "seed": settings.sample_seed,
            "as_of": as_of.isoformat(),
        },
    )
