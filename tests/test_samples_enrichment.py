import numpy as np
import pandas as pd

from vetting_dashboard.config import Settings
from vetting_dashboard.data.enrichment import enrich_cases, enrich_consents, enrich_schedules
from vetting_dashboard.data.models import TABLE_COLUMNS, VettingStatus
from vetting_dashboard.data.samples import (
    build_sample_bundle,
    generate_active_cases,
    sample_admin_tasks,
    sample_intelligence_feed,
)

AS_OF = pd.Timestamp("2025-06-02 09:00", tz="UTC")


def test_sample_bundle_is_deterministic_for_a_seed():
    settings = Settings(as_of=AS_OF.isoformat(), sample_seed=7)
    first = build_sample_bundle(settings)
    second = build_sample_bundle(settings)
    pd.testing.assert_frame_equal(first.cases, second.cases)
    assert first.diagnostics == {"source": "sample", "seed": 7, "as_of": AS_OF.isoformat()}


def test_sample_tables_follow_schema(raw_bundle):
    for name, df in raw_bundle.tables().items():
        assert list(df.columns) == TABLE_COLUMNS[name], name
    assert len(raw_bundle.cases) == 40
    assert raw_bundle.cases["case_id"].is_unique
    assert len(raw_bundle.tasks) == 14
    assert len(raw_bundle.schedules) == 10


def test_generated_cases_are_consistent():
    cases, checks = generate_active_cases(np.random.default_rng(3), AS_OF, n=25)
    closed = {VettingStatus.COMPLETE.value, VettingStatus.CANCELLED.value, VettingStatus.FAILED.value}
    for case in cases.to_dict("records"):
        case_checks = checks[checks["case_id"] == case["case_id"]]
        assert len(case_checks) == case["total_checks"]
        assert (case_checks["status"] == "Complete").sum() == case["completed_checks"]
        expected_overdue = case["target_completion_date"] < AS_OF and case["status"] not in closed
        assert case["is_overdue"] == expected_overdue
    assert (checks["completed_date"].dropna() <= AS_OF).all()


def test_feed_is_newest_first_and_never_in_future(raw_bundle):
    feed = raw_bundle.feed
    assert (feed["timestamp"] <= AS_OF).all()
    assert feed["timestamp"].is_monotonic_decreasing
    assert feed["event_id"].is_unique


def test_feed_for_no_cases_is_empty():
    empty = build_sample_bundle(Settings(as_of=AS_OF.isoformat(), sample_case_count=0))
    assert empty.cases.empty
    assert sample_intelligence_feed(empty.cases, empty.case_checks, AS_OF).empty


def test_generated_complete_cases_get_reports(raw_bundle):
    complete = raw_bundle.cases[raw_bundle.cases["status"] == VettingStatus.COMPLETE.value]
    assert set(complete["case_number"]).issubset(set(raw_bundle.reports["vetting_case_id"]))
    assert raw_bundle.reports["report_id"].is_unique


def test_consent_pending_cases_have_linked_consents(raw_bundle):
    pending = raw_bundle.cases[raw_bundle.cases["status"] == VettingStatus.CONSENT_PENDING.value]
    assert set(pending["case_number"]).issubset(set(raw_bundle.consents["vetting_case_id"]))


def test_enrich_cases_derived_columns(raw_bundle):
    enriched = enrich_cases(raw_bundle.cases, raw_bundle.case_checks, AS_OF)
    row = enriched.iloc[0]
    elapsed = (AS_OF - row["initiated_date"]).total_seconds() / 86400
    assert row["days_since_initiated"] == int(np.ceil(elapsed))
    assert row["checks_label"] == f"{row['completed_checks']}/{row['total_checks']}"
    assert set(enriched["is_active"].unique()) <= {True, False}


def test_enrich_cases_empty_frame():
    empty = pd.DataFrame(columns=TABLE_COLUMNS["cases"])
    enriched = enrich_cases(empty, pd.DataFrame(columns=TABLE_COLUMNS["case_checks"]), AS_OF)
    assert "days_since_initiated" in enriched.columns
    assert enriched.empty


def test_consent_expiry_flags(raw_bundle):
    consents = enrich_consents(raw_bundle.consents, AS_OF, near_expiry_hours=24).set_index("vetting_case_id")
    expired = consents.loc["VC-DEMO-004"]
    assert expired["is_expired"] and expired["is_near_expiry"]

    closing = consents.loc["VC-DEMO-011"]
    assert closing["is_near_expiry"] and not closing["is_expired"]

    manual = consents.loc["VC-MANUAL-001"]
    assert not manual["is_expired"] and not manual["is_near_expiry"]
    assert manual["status_variant"] == "success"
    assert consents.loc["VC-DEMO-003", "checks_count"] == 3


def test_report_enrichment(bundle):
    reports = bundle.reports.set_index("subject_name")
    quantum = reports.loc["QuantumLeap Solutions (Pty) Ltd"]
    assert quantum["risk_description"] == "Critical (82/100)"
    assert quantum["check_results_count"] == 4


def test_task_overdue_flags():
    tasks = sample_admin_tasks(AS_OF)
    from vetting_dashboard.data.enrichment import enrich_tasks

    enriched = enrich_tasks(tasks, AS_OF).set_index("task_id")
    assert sorted(enriched.index[enriched["is_overdue"]]) == ["task_001", "task_003", "task_007", "task_010"]
    # closed tasks past due are not overdue
    assert not enriched.loc["task_011", "is_overdue"]


def test_schedule_flags(raw_bundle):
    schedules = enrich_schedules(raw_bundle.schedules, raw_bundle.schedule_runs, AS_OF, upcoming_days=7)
    schedules = schedules.set_index("schedule_id")
    assert sorted(schedules.index[schedules["is_overdue"]]) == ["SCH-003", "SCH-005", "SCH-007"]
    assert sorted(schedules.index[schedules["is_upcoming"]]) == ["SCH-001", "SCH-004", "SCH-006", "SCH-008"]
    assert schedules.loc["SCH-005", "run_history_count"] == 5
    assert schedules.loc["SCH-005", "last_run_date"] < schedules.loc["SCH-005", "next_run_date"]
