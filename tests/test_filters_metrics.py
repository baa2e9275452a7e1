import numpy as np
import pandas as pd
import pytest

from vetting_dashboard.data import metrics
from vetting_dashboard.data.enrichment import enrich_tasks
from vetting_dashboard.data.filters import (
    CaseFilters,
    ConsentFilters,
    ReportFilters,
    ScheduleFilters,
    SortState,
    TaskFilters,
    filter_cases,
    filter_consents,
    filter_reports,
    filter_schedules,
    filter_tasks,
    paginate,
    serialize_filters,
    sort_frame,
)
from vetting_dashboard.data.identifiers import next_case_id, next_case_number, next_consent_id, next_sequence_id
from vetting_dashboard.data.samples import sample_admin_tasks, sample_completed_reports
from vetting_dashboard.data.scheduling import advance_run_date

AS_OF = pd.Timestamp("2025-06-02 09:00", tz="UTC")


def test_case_filters_combine(bundle):
    cases = bundle.cases
    overdue = filter_cases(cases, CaseFilters(status="overdue"))
    assert overdue["is_overdue"].astype(bool).all()
    assert len(overdue) == int(cases["is_overdue"].astype(bool).sum())

    first = cases.iloc[0]
    by_number = filter_cases(cases, CaseFilters(search=first["case_number"].lower()))
    assert first["case_id"] in set(by_number["case_id"])

    narrowed = filter_cases(cases, CaseFilters(priority="High", entity_type="Company"))
    assert set(narrowed["priority"]) <= {"High"}
    assert set(narrowed["entity_type"]) <= {"Company"}


def test_consent_filters(bundle):
    expired = filter_consents(bundle.consents, ConsentFilters(show_expired_only=True))
    assert "VC-DEMO-004" in set(expired["vetting_case_id"])
    assert expired["is_expired"].all()

    manual = filter_consents(bundle.consents, ConsentFilters(channel="Manual Upload"))
    assert list(manual["vetting_case_id"]) == ["VC-MANUAL-001"]
    assert filter_consents(bundle.consents, ConsentFilters(search="kgosi"))["subject_name"].tolist() == [
        "Kgosi Mining Services"
    ]


def test_report_filters_date_range(bundle):
    start = AS_OF - pd.Timedelta(days=4)
    recent = filter_reports(bundle.reports, ReportFilters(date_range=(start, AS_OF)))
    assert (recent["completion_date"] >= start).all()
    assert "QuantumLeap Solutions (Pty) Ltd" in set(recent["subject_name"])
    critical = filter_reports(bundle.reports, ReportFilters(risk_level="Critical"))
    assert set(critical["overall_risk_level"]) == {"Critical"}


def test_task_and_schedule_filters(bundle):
    high = filter_tasks(bundle.tasks, TaskFilters(priorities=["High"], statuses=["Pending Admin Review"]))
    assert sorted(high["task_id"]) == ["task_001", "task_014"]
    assert filter_tasks(bundle.tasks, TaskFilters()).equals(bundle.tasks)

    overdue = filter_schedules(bundle.schedules, ScheduleFilters(overdue_only=True))
    assert sorted(overdue["schedule_id"]) == ["SCH-003", "SCH-005", "SCH-007"]
    paused = filter_schedules(bundle.schedules, ScheduleFilters(status="Paused"))
    assert paused["schedule_id"].tolist() == ["SCH-007"]


def test_filters_on_empty_frames_return_input():
    empty = pd.DataFrame()
    assert filter_cases(empty, CaseFilters(search="x")) is empty
    assert filter_tasks(empty, TaskFilters(types=["a"])) is empty


def test_sort_state_toggle():
    state = SortState().toggle("priority")
    assert state == SortState("priority", True)
    assert state.toggle("priority") == SortState("priority", False)
    assert state.toggle("status") == SortState("status", True)


def test_sort_frame_puts_missing_last_and_ignores_case():
    df = pd.DataFrame({"name": ["beta", None, "Alpha"], "score": [2.0, np.nan, 1.0]})
    assert sort_frame(df, SortState("name"))["name"].tolist()[:2] == ["Alpha", "beta"]
    assert sort_frame(df, SortState("score", False))["score"].tolist()[:2] == [2.0, 1.0]
    assert pd.isna(sort_frame(df, SortState("score", False))["score"].iloc[-1])
    assert sort_frame(df, SortState("missing")) is df


def test_sort_frame_text_column_without_missing_values():
    df = pd.DataFrame({"subject_name": ["bravo", "Charlie", "alpha"]})
    assert sort_frame(df, SortState("subject_name"))["subject_name"].tolist() == ["alpha", "bravo", "Charlie"]
    assert sort_frame(df, SortState("subject_name", False))["subject_name"].tolist() == ["Charlie", "bravo", "alpha"]


def test_paginate_clamps_page():
    df = pd.DataFrame({"n": range(25)})
    page, pages = paginate(df, 3, 10)
    assert pages == 3
    assert page["n"].tolist() == list(range(20, 25))
    page, _ = paginate(df, 99, 10)
    assert page["n"].tolist() == list(range(20, 25))
    page, pages = paginate(df.iloc[0:0], 1, 10)
    assert pages == 1 and page.empty


def test_serialize_filters():
    start = pd.Timestamp("2025-05-01", tz="UTC")
    payload = serialize_filters(ReportFilters(search="quantum", date_range=(start, None)))
    assert payload["search"] == "quantum"
    assert payload["date_range"] == [start.isoformat(), None]
    assert serialize_filters({"not": "a dataclass"}) == {}


def test_sequence_ids():
    assert next_sequence_id("SCH", ["SCH-001", "SCH-009", "OTHER-050"]) == "SCH-010"
    assert next_sequence_id("SCH", []) == "SCH-001"
    assert next_consent_id(["CR20250602-004"], AS_OF) == "CR20250602-005"
    assert next_case_number(["VET-2025-001207", "VET-2024-009999"], AS_OF) == "VET-2025-001208"
    assert next_case_id(["case_040", "case_007"]) == "case_041"


def test_advance_run_date_uses_calendar_months():
    start = pd.Timestamp("2025-01-31 09:00", tz="UTC")
    assert advance_run_date(start, "Monthly") == pd.Timestamp("2025-02-28 09:00", tz="UTC")
    assert advance_run_date(start, "Annually") == pd.Timestamp("2026-01-31 09:00", tz="UTC")
    with pytest.raises(ValueError):
        advance_run_date(start, "Weekly")


def test_task_summary():
    summary = metrics.task_summary(enrich_tasks(sample_admin_tasks(AS_OF), AS_OF))
    assert summary["total"] == 14
    assert summary["pending"] == 5
    assert summary["action_required"] == 4
    assert summary["approved"] == 1
    assert summary["rejected"] == 1
    assert summary["overdue"] == 4
    assert summary["high_priority"] == 5
    assert summary["by_type"]["Risk Escalation"] == 2


def test_schedule_stats(raw_bundle):
    stats = metrics.schedule_stats(raw_bundle.schedules, AS_OF, days=7)
    assert (stats["total"], stats["active"], stats["paused"]) == (10, 6, 1)
    assert stats["overdue"] == 2
    assert stats["upcoming"] == 3


def test_report_stats_for_curated_reports():
    reports, _ = sample_completed_reports(AS_OF)
    stats = metrics.report_stats(reports)
    assert stats["total"] == 8
    assert stats["complete"] == 6
    assert stats["critical"] == 2
    assert stats["high"] == 2
    assert stats["average_risk_score"] == 48
    assert stats["risk_distribution"]["Info Only"] == 1


def test_empty_metrics():
    assert metrics.report_stats(pd.DataFrame())["average_risk_score"] is None
    assert metrics.task_summary(pd.DataFrame())["total"] == 0
    assert metrics.operations_kpis(pd.DataFrame())["overdue"] == 0
    assert metrics.risk_posture(pd.DataFrame()) == dict.fromkeys(metrics.POSTURE_FACTORS)


def test_operations_kpis_match_case_table(bundle):
    kpis = metrics.operations_kpis(bundle.cases)
    assert kpis["overdue"] == int(bundle.cases["is_overdue"].astype(bool).sum())
    assert kpis["total_active"] == int(bundle.cases["is_active"].sum())


def test_consent_stats(bundle):
    stats = metrics.consent_stats(bundle.consents, AS_OF, days=7)
    assert stats["total_checks"] == int(bundle.consents["checks_count"].sum())
    assert stats["by_channel"]["Manual Upload"] == 1
    assert stats["expiring_soon"] >= 2


def test_risk_posture(bundle):
    posture = metrics.risk_posture(bundle.suppliers)
    assert set(posture) == set(metrics.POSTURE_FACTORS)
    assert all(0 <= value <= 100 for value in posture.values())


def test_vetting_stats_and_providers(bundle):
    stats = metrics.vetting_stats(bundle.cases, bundle.reports, bundle.case_checks)
    assert stats["total_cases"] == 40
    assert stats["total_revenue"] == float(bundle.cases["total_estimated_cost"].sum())
    assert len(stats["top_providers"]) <= 5
    cases = [p["cases"] for p in stats["top_providers"]]
    assert cases == sorted(cases, reverse=True)


def test_provider_performance_success_rate():
    checks = pd.DataFrame(
        {
            "case_id": ["c1", "c2", "c3", "c3"],
            "provider": ["Acme", "Acme", "Acme", "Other"],
            "status": ["Complete", "Failed", "Pending", "Complete"],
        }
    )
    ranked = metrics.provider_performance(checks)
    assert ranked[0] == {"provider": "Acme", "cases": 3, "success_rate": 50.0}
    assert ranked[1] == {"provider": "Other", "cases": 1, "success_rate": 100.0}
