from __future__ import annotations

import pandas as pd
import streamlit as st

from vetting_dashboard.data import actions
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.filters import TaskFilters, filter_tasks
from vetting_dashboard.data.metrics import task_summary
from vetting_dashboard.data.models import CLOSED_TASK_STATUSES, TaskPriority, TaskStatus, TaskType, values
from vetting_dashboard.ui import state
from vetting_dashboard.ui.components.charts import bar_chart, counts_frame, render_plotly
from vetting_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from vetting_dashboard.ui.components.tables import render_table
from vetting_dashboard.ui.pages.context import PageContext
from vetting_dashboard.ui.pages.helpers import paginate_controls, sort_controls

SORTABLE = {
    "due_date": "Due date",
    "assigned_date": "Assigned",
    "priority": "Priority",
    "type": "Type",
    "subject_name": "Subject",
}
PRIORITY_VARIANTS = {
    TaskPriority.HIGH.value: "danger",
    TaskPriority.MEDIUM.value: "warning",
    TaskPriority.LOW.value: "info",
}
ACTION_LABELS = {"approve": "✅ Approve", "reject": "❌ Reject", "mark_reviewed": "👀 Mark reviewed"}


def _filters() -> TaskFilters:
    search = st.text_input("Search", placeholder="Subject, description or task id", key="vd_tasks_search")
    col_type, col_priority, col_status = st.columns(3)
    with col_type:
        types = st.multiselect("Type", values(TaskType), key="vd_tasks_types")
    with col_priority:
        priorities = st.multiselect("Priority", values(TaskPriority), key="vd_tasks_priorities")
    with col_status:
        statuses = st.multiselect("Status", values(TaskStatus), key="vd_tasks_statuses")
    return TaskFilters(search=search, types=types, priorities=priorities, statuses=statuses)


def _render_single(tasks: pd.DataFrame, context: PageContext) -> None:
    st.markdown("#### Review Task")
    labels = dict(zip(tasks["task_id"], tasks["task_id"] + " · " + tasks["type"] + " · " + tasks["subject_name"]))
    task_id = st.selectbox("Task", tasks["task_id"].tolist(), format_func=labels.get, key="vd_tasks_target")
    if task_id is None:
        return
    task = tasks[tasks["task_id"] == task_id].iloc[0]
    st.write(task["description"])
    st.caption(f"{task['priority']} priority · {task['status']} · assigned to {task['assigned_to']}")
    if isinstance(task["notes"], str) and task["notes"].strip():
        st.caption(task["notes"])

    closed = task["status"] in CLOSED_TASK_STATUSES
    cols = st.columns(len(ACTION_LABELS))
    for col, (action, label) in zip(cols, ACTION_LABELS.items()):
        with col:
            if st.button(label, key=f"vd_tasks_{action}", disabled=closed):
                state.run_action(
                    "tasks", actions.apply_task_action, task_id, action, as_of=context.as_of,
                    success=f"{task_id}: {actions.TASK_ACTIONS[action]}",
                )

    with st.form("vd_tasks_info_form", clear_on_submit=True):
        request = st.text_area("Request more information")
        if st.form_submit_button("Send request", disabled=closed):
            state.run_action(
                "tasks", actions.request_more_info, task_id, request, success=f"Information requested on {task_id}"
            )


def _render_bulk(tasks: pd.DataFrame, context: PageContext) -> None:
    st.markdown("#### Bulk Actions")
    open_tasks = tasks[~tasks["status"].isin(CLOSED_TASK_STATUSES)]
    selected = st.multiselect(
        "Tasks",
        open_tasks["task_id"].tolist(),
        format_func=dict(zip(open_tasks["task_id"], open_tasks["task_id"] + " · " + open_tasks["subject_name"])).get,
        key="vd_tasks_bulk_selection",
    )
    action = st.radio(
        "Action", list(ACTION_LABELS), format_func=ACTION_LABELS.get, horizontal=True, key="vd_tasks_bulk_action"
    )
    if st.button(f"Apply to {len(selected)} task(s)", key="vd_tasks_bulk_apply"):
        state.run_action(
            "tasks", actions.apply_bulk_action, selected, action, as_of=context.as_of,
            success=f"{len(selected)} task(s): {actions.TASK_ACTIONS[action]}",
        )


def render(bundle: DataBundle, context: PageContext) -> None:
    st.subheader("Tasks & Approvals")
    tasks = bundle.tasks
    summary = task_summary(tasks)
    render_kpi_cards(
        [
            KpiCard("Total Tasks", summary["total"]),
            KpiCard("Pending Review", summary["pending"]),
            KpiCard("Action Required", summary["action_required"]),
            KpiCard("Overdue", summary["overdue"], alert_above=0),
            KpiCard("High Priority Open", summary["high_priority"]),
            KpiCard("Approved", summary["approved"]),
        ],
        columns=6,
    )
    if tasks.empty:
        st.info("No admin tasks loaded.")
        return

    filters = _filters()
    filtered = filter_tasks(tasks, filters)
    ordered = sort_controls(filtered, "tasks", SORTABLE, default="due_date")
    page = paginate_controls(ordered, "tasks")
    render_table(
        page,
        columns=[
            "task_id", "type", "subject_name", "priority", "status", "assigned_to",
            "assigned_date", "due_date", "is_overdue", "estimated_minutes",
        ],
        labels={
            "task_id": "Task", "type": "Type", "subject_name": "Subject", "priority": "Priority",
            "status": "Status", "assigned_to": "Assigned to", "assigned_date": "Assigned", "due_date": "Due",
            "is_overdue": "Overdue", "estimated_minutes": "Est. minutes",
        },
        column_config={
            "priority": {"type": "badge", "variants": PRIORITY_VARIANTS},
            "assigned_date": {"type": "date"},
            "due_date": {"type": "datetime"},
        },
        export_file_name="admin_tasks.csv",
        key="tasks_table",
    )

    if filtered.empty:
        return
    left, right = st.columns(2)
    with left:
        _render_single(filtered, context)
    with right:
        _render_bulk(filtered, context)
        by_type = counts_frame(summary["by_type"], "Type", "Tasks").sort_values("Tasks")
        render_plotly(
            bar_chart(by_type, x="Tasks", y="Type", orientation="h", title="Tasks by Type"),
            key="tasks_by_type",
        )
