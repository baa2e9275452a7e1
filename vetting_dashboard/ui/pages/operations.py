from __future__ import annotations

import pandas as pd
import streamlit as st

from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.metrics import operations_kpis, task_summary
from vetting_dashboard.data.models import PRIORITY_ORDER, VettingStatus, values
from vetting_dashboard.ui.components.charts import bar_chart, counts_frame, pie_chart, render_plotly
from vetting_dashboard.ui.components.formatting import format_time_ago
from vetting_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from vetting_dashboard.ui.components.tables import render_table
from vetting_dashboard.ui.pages.context import PageContext
from vetting_dashboard.ui.pages.helpers import severity_icon


def _status_counts(cases: pd.DataFrame) -> pd.DataFrame:
    counts = cases["status"].value_counts().reindex(values(VettingStatus), fill_value=0)
    return counts.rename_axis("Status").reset_index(name="Cases")


def _officer_workload(cases: pd.DataFrame) -> pd.DataFrame:
    active = cases[cases["is_active"]]
    if active.empty:
        return pd.DataFrame(columns=["Officer", "Priority", "Cases"])
    grouped = active.groupby(["assigned_officer", "priority"]).size().reset_index(name="Cases")
    return grouped.rename(columns={"assigned_officer": "Officer", "priority": "Priority"})


def _render_feed(feed: pd.DataFrame, as_of: pd.Timestamp, limit: int = 12) -> None:
    st.markdown("#### Intelligence Feed")
    if feed.empty:
        st.info("No recent activity.")
        return
    for event in feed.head(limit).to_dict("records"):
        st.markdown(
            f"{severity_icon(event['severity'])} **{event['event_type']}** · {event['message']}  \n"
            f"<small>{event['case_number']} · {format_time_ago(event['timestamp'], as_of)}</small>",
            unsafe_allow_html=True,
        )


def render(bundle: DataBundle, context: PageContext) -> None:
    st.subheader("Operations Overview")
    cases = bundle.cases
    if cases.empty:
        st.info("No vetting cases loaded.")
        return

    kpis = operations_kpis(cases)
    tasks = task_summary(bundle.tasks)
    render_kpi_cards(
        [
            KpiCard("Active Cases", kpis["total_active"], help_text="In progress, partially complete or awaiting consent"),
            KpiCard("Pending Consent", kpis["pending_consent"]),
            KpiCard("Overdue", kpis["overdue"], alert_above=0, help_text="Past target completion and not closed"),
            KpiCard("Ready for Review", kpis["ready_for_review"]),
            KpiCard("Open Admin Tasks", tasks["total"] - tasks["approved"] - tasks["rejected"]),
            KpiCard("Overdue Tasks", tasks["overdue"], alert_above=0),
        ],
        columns=6,
    )

    left, right = st.columns([2, 1])
    with left:
        fig = bar_chart(_status_counts(cases), x="Status", y="Cases", title="Cases by Status", text_auto=True)
        render_plotly(fig, key="ops_status")

        workload = _officer_workload(cases)
        if not workload.empty:
            fig = bar_chart(
                workload,
                x="Officer",
                y="Cases",
                color="Priority",
                barmode="stack",
                title="Active Workload by Officer",
                category_orders={"Priority": PRIORITY_ORDER},
            )
            render_plotly(fig, key="ops_workload")
    with right:
        priorities = counts_frame(cases["priority"].value_counts().to_dict(), "Priority", "Cases")
        render_plotly(pie_chart(priorities, names="Priority", values="Cases", title="Priority Mix"), key="ops_priority")
        _render_feed(bundle.feed, context.as_of)

    st.markdown("#### Overdue Cases")
    overdue = cases[cases["is_overdue"].astype(bool)].sort_values("target_completion_date")
    render_table(
        overdue,
        columns=[
            "case_number", "entity_name", "entity_type", "status", "priority",
            "assigned_officer", "target_completion_date", "checks_label",
        ],
        column_config={"target_completion_date": {"type": "date"}},
        labels={
            "case_number": "Case", "entity_name": "Entity", "entity_type": "Type", "status": "Status",
            "priority": "Priority", "assigned_officer": "Officer", "target_completion_date": "Target",
            "checks_label": "Checks",
        },
        height=300,
        export_file_name="overdue_cases.csv",
        key="ops_overdue",
    )
