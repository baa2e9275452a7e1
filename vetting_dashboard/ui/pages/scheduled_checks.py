from __future__ import annotations

import pandas as pd
import streamlit as st

from vetting_dashboard.data import actions
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.filters import ScheduleFilters, filter_schedules
from vetting_dashboard.data.metrics import schedule_stats
from vetting_dashboard.data.models import (
    RISK_LEVEL_VARIANTS,
    EntityType,
    RiskLevel,
    ScheduleFrequency,
    ScheduleStatus,
    values,
)
from vetting_dashboard.ui import state
from vetting_dashboard.ui.components.charts import bar_chart, counts_frame, render_plotly
from vetting_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from vetting_dashboard.ui.components.tables import render_table
from vetting_dashboard.ui.layout import filter_selectbox
from vetting_dashboard.ui.pages.context import PageContext
from vetting_dashboard.ui.pages.helpers import paginate_controls, sort_controls

SORTABLE = {
    "next_run_date": "Next run",
    "last_run_date": "Last run",
    "subject_name": "Subject",
    "frequency": "Frequency",
}
STATUS_VARIANTS = {
    ScheduleStatus.ACTIVE.value: "success",
    ScheduleStatus.PAUSED.value: "default",
    ScheduleStatus.OVERDUE.value: "danger",
    ScheduleStatus.IN_PROGRESS.value: "info",
    ScheduleStatus.COMPLETED.value: "info",
}


def _filters(schedules: pd.DataFrame) -> ScheduleFilters:
    col_search, col_status, col_freq, col_type = st.columns([2, 1, 1, 1])
    with col_search:
        search = st.text_input("Search", placeholder="Subject or check", key="vd_sched_search")
    with col_status:
        status = filter_selectbox("Status", values(ScheduleStatus), "vd_sched_status", schedules["status"])
    with col_freq:
        frequency = filter_selectbox("Frequency", values(ScheduleFrequency), "vd_sched_freq", schedules["frequency"])
    with col_type:
        entity_type = filter_selectbox("Entity type", values(EntityType), "vd_sched_entity", schedules["entity_type"])
    col_overdue, col_upcoming = st.columns(2)
    with col_overdue:
        overdue_only = st.checkbox("Overdue only", key="vd_sched_overdue")
    with col_upcoming:
        upcoming_only = st.checkbox("Upcoming only", key="vd_sched_upcoming")
    return ScheduleFilters(
        search=search,
        status=status,
        frequency=frequency,
        entity_type=entity_type,
        overdue_only=overdue_only,
        upcoming_only=upcoming_only,
    )


def _run_now(schedule_id: str, context: PageContext, outcome: str) -> None:
    """Run a schedule and persist both the schedule row and its run history."""
    try:
        schedules, runs = actions.run_schedule_now(
            state.get_table("schedules"), state.get_table("schedule_runs"), schedule_id,
            as_of=context.as_of, outcome=outcome,
        )
    except actions.ActionError as exc:
        st.error(str(exc))
        return
    state.set_table("schedules", schedules)
    state.set_table("schedule_runs", runs)
    state.flash(f"{schedule_id} ran with outcome {outcome}")
    st.rerun()


def _render_actions(schedules: pd.DataFrame, runs: pd.DataFrame, context: PageContext) -> None:
    st.markdown("#### Manage Schedule")
    labels = dict(zip(schedules["schedule_id"], schedules["schedule_id"] + " · " + schedules["subject_name"]))
    schedule_id = st.selectbox(
        "Schedule", schedules["schedule_id"].tolist(), format_func=labels.get, key="vd_sched_target"
    )
    if schedule_id is None:
        return
    row = schedules[schedules["schedule_id"] == schedule_id].iloc[0]
    st.caption(f"{row['check_name']} · {row['frequency']} · {row['status']}")

    col_outcome, col_run, col_pause, col_resume = st.columns([2, 1, 1, 1])
    with col_outcome:
        outcome = st.selectbox("Run outcome", values(RiskLevel), index=3, key="vd_sched_outcome")
    with col_run:
        st.write("")
        if st.button("▶️ Run now", key="vd_sched_run"):
            _run_now(schedule_id, context, outcome)
    with col_pause:
        st.write("")
        if st.button("⏸️ Pause", key="vd_sched_pause", disabled=row["status"] == ScheduleStatus.PAUSED.value):
            state.run_action("schedules", actions.pause_schedule, schedule_id, success=f"{schedule_id} paused")
    with col_resume:
        st.write("")
        if st.button("🔄 Resume", key="vd_sched_resume", disabled=row["status"] != ScheduleStatus.PAUSED.value):
            state.run_action("schedules", actions.resume_schedule, schedule_id, success=f"{schedule_id} resumed")

    history = runs[runs["schedule_id"] == schedule_id].sort_values("run_date", ascending=False)
    st.markdown("##### Run History")
    render_table(
        history,
        columns=["run_date", "outcome", "report_id"],
        labels={"run_date": "Run date", "outcome": "Outcome", "report_id": "Report"},
        column_config={
            "run_date": {"type": "date"},
            "outcome": {"type": "badge", "variants": RISK_LEVEL_VARIANTS},
        },
        height=220,
        export_file_name=f"{schedule_id}_runs.csv",
        key="sched_history",
    )


def render(bundle: DataBundle, context: PageContext) -> None:
    st.subheader("Scheduled Checks")
    schedules = bundle.schedules
    stats = schedule_stats(schedules, context.as_of, context.settings.upcoming_days)
    render_kpi_cards(
        [
            KpiCard("Schedules", stats["total"]),
            KpiCard("Active", stats["active"]),
            KpiCard("Paused", stats["paused"]),
            KpiCard("Overdue", stats["overdue"], alert_above=0),
            KpiCard("Due This Week", stats["upcoming"]),
        ],
        columns=5,
    )
    if schedules.empty:
        st.info("No scheduled checks loaded.")
        return

    filters = _filters(schedules)
    filtered = filter_schedules(schedules, filters)
    ordered = sort_controls(filtered, "schedules", SORTABLE, default="next_run_date")
    page = paginate_controls(ordered, "schedules")
    render_table(
        page,
        columns=[
            "schedule_id", "subject_name", "entity_type", "check_name", "frequency", "status",
            "last_run_date", "last_run_outcome", "next_run_date", "run_history_count",
        ],
        labels={
            "schedule_id": "Schedule", "subject_name": "Subject", "entity_type": "Type",
            "check_name": "Check", "frequency": "Frequency", "status": "Status", "last_run_date": "Last run",
            "last_run_outcome": "Outcome", "next_run_date": "Next run", "run_history_count": "Runs",
        },
        column_config={
            "status": {"type": "badge", "variants": STATUS_VARIANTS},
            "last_run_outcome": {"type": "badge", "variants": RISK_LEVEL_VARIANTS},
            "last_run_date": {"type": "date"},
            "next_run_date": {"type": "date"},
        },
        export_file_name="scheduled_checks.csv",
        key="sched_table",
    )

    left, right = st.columns([2, 1])
    with left:
        if not filtered.empty:
            _render_actions(filtered, bundle.schedule_runs, context)
    with right:
        frequency = counts_frame(stats["by_frequency"], "Frequency", "Schedules")
        render_plotly(
            bar_chart(
                frequency, x="Frequency", y="Schedules", title="Schedules by Frequency",
                category_orders={"Frequency": values(ScheduleFrequency)}, text_auto=True,
            ),
            key="sched_frequency",
        )
