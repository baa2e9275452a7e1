import pandas as pd
import pytest

from vetting_dashboard.data import actions, calculator, catalog
from vetting_dashboard.data.actions import ActionError, ManualConsentForm, VettingRequest

AS_OF = pd.Timestamp("2025-06-02 09:00", tz="UTC")


def _row(df, column, value):
    return df[df[column] == value].iloc[0]


@pytest.mark.parametrize(
    "action, status",
    [("approve", "Approved"), ("reject", "Rejected"), ("mark_reviewed", "Under Review")],
)
def test_task_actions(bundle, action, status):
    before = bundle.tasks.copy()
    updated = actions.apply_task_action(bundle.tasks, "task_001", action, as_of=AS_OF)
    task = _row(updated, "task_id", "task_001")
    assert task["status"] == status
    if action == "mark_reviewed":
        assert pd.isna(task["completed_date"])
        assert bool(task["is_overdue"])
    else:
        assert task["completed_date"] == AS_OF
        assert task["completed_by"] == "Super Admin"
        assert not bool(task["is_overdue"])
    pd.testing.assert_frame_equal(bundle.tasks, before)


def test_unknown_task_and_action(bundle):
    with pytest.raises(ActionError):
        actions.apply_task_action(bundle.tasks, "task_001", "escalate")
    with pytest.raises(ActionError, match="not found"):
        actions.apply_task_action(bundle.tasks, "task_999", "approve")


def test_request_more_info(bundle):
    with pytest.raises(ActionError):
        actions.request_more_info(bundle.tasks, "task_002", "   ")
    updated = actions.request_more_info(bundle.tasks, "task_002", " Upload the signed form ")
    task = _row(updated, "task_id", "task_002")
    assert task["status"] == "Information Requested"
    assert task["notes"].endswith("Admin requested: Upload the signed form")


def test_bulk_action(bundle):
    with pytest.raises(ActionError):
        actions.apply_bulk_action(bundle.tasks, [], "approve")
    updated = actions.apply_bulk_action(bundle.tasks, ["task_001", "task_003"], "approve", as_of=AS_OF)
    changed = updated[updated["task_id"].isin(["task_001", "task_003"])]
    assert set(changed["status"]) == {"Approved"}
    assert not changed["is_overdue"].any()
    untouched = _row(updated, "task_id", "task_007")
    assert untouched["status"] == "Action Required"


def test_verify_consent(bundle):
    submitted = _row(bundle.consents, "vetting_case_id", "VC-DEMO-001")["consent_id"]
    updated = actions.verify_consent(bundle.consents, submitted, "reject_signature", notes="Mismatch", as_of=AS_OF)
    consent = _row(updated, "consent_id", submitted)
    assert consent["status"] == "Verified - Rejected (Signature Mismatch)"
    assert consent["verified_date"] == AS_OF
    assert consent["verification_notes"] == "Mismatch"
    assert consent["status_variant"] == "danger"


def test_verify_consent_requires_submitted_status(bundle):
    pending = _row(bundle.consents, "vetting_case_id", "VC-DEMO-002")["consent_id"]
    with pytest.raises(ActionError, match="not awaiting verification"):
        actions.verify_consent(bundle.consents, pending, "approve")
    with pytest.raises(ActionError):
        actions.verify_consent(bundle.consents, pending, "maybe")


def test_record_manual_consent(bundle):
    form = ManualConsentForm(
        subject_name=" Noma Zulu ",
        subject_id="9001015800081",
        entity_type="Individual",
        check_ids=["id_verify_sa", "credit_check_ind"],
    )
    updated = actions.record_manual_consent(bundle.consents, form, as_of=AS_OF)
    assert len(updated) == len(bundle.consents) + 1
    record = updated.iloc[-1]
    assert record["subject_name"] == "Noma Zulu"
    assert record["channel"] == "Manual Upload"
    assert record["status"] == "Manually Recorded - Approved"
    assert record["check_names"] == ["SA ID Verification", "Individual Credit Report"]
    assert record["consent_id"].startswith("CR20250602-")
    assert record["consent_id"] not in set(bundle.consents["consent_id"])


def test_record_manual_consent_validation(bundle):
    with pytest.raises(ActionError):
        actions.record_manual_consent(bundle.consents, ManualConsentForm("", "1", "Individual", ["id_verify_sa"]))
    with pytest.raises(ActionError):
        actions.record_manual_consent(bundle.consents, ManualConsentForm("Someone", "1", "Individual", []))


def test_manual_consent_unknown_entity_type_is_an_action_error(bundle):
    form = ManualConsentForm("Someone", "1", "Trust", ["id_verify_sa"])
    with pytest.raises(ActionError, match="Unknown entity type"):
        actions.record_manual_consent(bundle.consents, form)


def _request(**overrides):
    fields = dict(
        entity_type="Individual",
        entity_name=" Thabo Mokoena ",
        entity_identifier="8501015800083",
        contact="+27821234567",
        check_ids=["id_verify_sa", "criminal_record_afis"],
        pre_authorised=True,
    )
    fields.update(overrides)
    return VettingRequest(**fields)


def test_initiate_case_with_selected_checks(bundle):
    before = bundle.cases.copy()
    updated = actions.initiate_case(bundle.cases, _request(), as_of=AS_OF)
    assert len(updated) == len(bundle.cases) + 1
    case = updated.iloc[-1]
    assert case["status"] == "Initiated"
    assert case["entity_name"] == "Thabo Mokoena"
    assert case["priority"] == "Medium"
    assert case["total_checks"] == 2
    assert case["overall_progress"] == 0
    assert case["initiated_date"] == AS_OF
    assert case["case_number"].startswith("VET-2025-")
    assert case["case_number"] not in set(bundle.cases["case_number"])
    assert case["case_id"] not in set(bundle.cases["case_id"])
    assert case["notes"] == "Consent request sent to +27821234567"
    pd.testing.assert_frame_equal(bundle.cases, before)


def test_initiate_case_from_package_uses_discounted_price(bundle):
    package = catalog.packages_by_entity_type("Company")[0]
    request = _request(
        entity_type="Company", entity_name="Acme Mining", entity_identifier="2019/123456/07",
        package_id=package.package_id, check_ids=[],
    )
    case = actions.initiate_case(bundle.cases, request, as_of=AS_OF).iloc[-1]
    assert case["total_checks"] == len(package.check_ids)
    assert case["total_estimated_cost"] == calculator.package_cost(package.package_id)["price"]


def test_initiated_case_numbers_increase(bundle):
    first = actions.initiate_case(bundle.cases, _request(), as_of=AS_OF)
    second = actions.initiate_case(first, _request(entity_name="Lerato Dube"), as_of=AS_OF)
    numbers = second["case_number"].iloc[-2:].tolist()
    assert int(numbers[1].rsplit("-", 1)[1]) == int(numbers[0].rsplit("-", 1)[1]) + 1


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"entity_name": "  "}, "Full name is required"),
        ({"entity_identifier": ""}, "ID or passport number is required"),
        ({"entity_type": "Company", "entity_identifier": ""}, "Registration number is required"),
        ({"check_ids": []}, "Select a package or at least one check"),
        ({"check_ids": ["cipc_company_check"]}, "not available for Individual"),
        ({"package_id": "missing_pkg"}, "not available"),
        ({"priority": "Critical"}, "Unknown priority"),
        ({"entity_type": "Trust"}, "Unknown entity type"),
        ({"pre_authorised": False}, "pre-authorisation"),
    ],
)
def test_initiate_case_validation(bundle, overrides, message):
    with pytest.raises(ActionError, match=message):
        actions.initiate_case(bundle.cases, _request(**overrides), as_of=AS_OF)


def test_approve_and_reject_case(bundle):
    case_id = bundle.cases["case_id"].iloc[0]
    approved = actions.approve_case(bundle.cases, case_id, "Looks good", as_of=AS_OF)
    case = _row(approved, "case_id", case_id)
    assert case["status"] == "Complete"
    assert not case["is_active"] and not case["is_overdue"]
    assert case["last_status_update"] == AS_OF
    assert case["notes"].endswith("Looks good")

    with pytest.raises(ActionError):
        actions.reject_case(bundle.cases, case_id, "  ")
    rejected = actions.reject_case(bundle.cases, case_id, "Fraudulent documents", as_of=AS_OF)
    assert _row(rejected, "case_id", case_id)["status"] == "Failed"


def test_update_and_escalate_case(bundle):
    cases = bundle.cases.copy()
    case_id = cases["case_id"].iloc[0]
    updated = actions.update_case(cases, case_id, priority="Low", assigned_officer="David Nel", notes="Call back")
    case = _row(updated, "case_id", case_id)
    assert (case["priority"], case["assigned_officer"], case["notes"]) == ("Low", "David Nel", "Call back")
    with pytest.raises(ActionError):
        actions.update_case(cases, case_id, priority="Critical")

    escalated = actions.escalate_case(updated, case_id)
    case = _row(escalated, "case_id", case_id)
    assert case["priority"] == "Medium"
    assert bool(case["flagged_for_review"])

    urgent = actions.update_case(cases, case_id, priority="Urgent")
    with pytest.raises(ActionError, match="already at Urgent"):
        actions.escalate_case(urgent, case_id)


def test_pause_and_resume_schedule(bundle):
    paused = actions.pause_schedule(bundle.schedules, "SCH-001")
    assert _row(paused, "schedule_id", "SCH-001")["status"] == "Paused"
    resumed = actions.resume_schedule(paused, "SCH-001")
    assert _row(resumed, "schedule_id", "SCH-001")["status"] == "Active"


def test_run_schedule_now(bundle):
    schedules, runs = actions.run_schedule_now(
        bundle.schedules, bundle.schedule_runs, "SCH-005", as_of=AS_OF, outcome="High"
    )
    schedule = _row(schedules, "schedule_id", "SCH-005")
    assert schedule["status"] == "Active"
    assert schedule["last_run_date"] == AS_OF
    assert schedule["last_run_outcome"] == "High"
    assert schedule["next_run_date"] == AS_OF + pd.DateOffset(months=1)
    assert not schedule["is_overdue"]
    assert schedule["run_history_count"] == 6
    assert len(runs) == len(bundle.schedule_runs) + 1
    assert runs.iloc[-1]["report_id"] == "SR-005-06"


def test_run_schedule_now_rejects_completed_and_bad_outcome(bundle):
    with pytest.raises(ActionError, match="completed"):
        actions.run_schedule_now(bundle.schedules, bundle.schedule_runs, "SCH-010", as_of=AS_OF)
    with pytest.raises(ActionError):
        actions.run_schedule_now(bundle.schedules, bundle.schedule_runs, "SCH-001", outcome="Severe")


def test_archive_report(bundle):
    report_id = bundle.reports["report_id"].iloc[0]
    updated = actions.archive_report(bundle.reports, report_id)
    assert len(updated) == len(bundle.reports) - 1
    assert report_id not in set(updated["report_id"])
    with pytest.raises(ActionError):
        actions.archive_report(updated, report_id)
