from __future__ import annotations

import streamlit as st

from vetting_dashboard.data import actions
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.filters import CaseFilters, filter_cases, serialize_filters
from vetting_dashboard.data.models import PRIORITY_ORDER, EntityType, VettingStatus, values
from vetting_dashboard.ui import state
from vetting_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from vetting_dashboard.ui.components.tables import render_table
from vetting_dashboard.ui.layout import filter_selectbox
from vetting_dashboard.ui.pages.context import PageContext
from vetting_dashboard.ui.pages.helpers import paginate_controls, sort_controls

SORTABLE = {
    "initiated_date": "Initiated",
    "target_completion_date": "Target date",
    "case_number": "Case number",
    "entity_name": "Entity",
    "priority": "Priority",
    "overall_progress": "Progress",
    "total_estimated_cost": "Cost",
}
TABLE_COLUMNS = [
    "case_number", "entity_name", "entity_type", "status", "priority", "overall_progress",
    "checks_label", "primary_provider", "assigned_officer", "initiated_date",
    "target_completion_date", "days_since_initiated", "is_overdue", "total_estimated_cost",
]
LABELS = {
    "case_number": "Case", "entity_name": "Entity", "entity_type": "Type", "status": "Status",
    "priority": "Priority", "overall_progress": "Progress", "checks_label": "Checks",
    "primary_provider": "Provider", "assigned_officer": "Officer", "initiated_date": "Initiated",
    "target_completion_date": "Target", "days_since_initiated": "Days", "is_overdue": "Overdue",
    "total_estimated_cost": "Cost",
}


def _filters(cases) -> CaseFilters:
    col_search, col_status, col_priority, col_type = st.columns([2, 1, 1, 1])
    with col_search:
        search = st.text_input("Search", placeholder="Case number, entity or officer", key="vd_cases_search")
    with col_status:
        status = filter_selectbox("Status", values(VettingStatus) + ["overdue"], "vd_cases_status", cases["status"])
    with col_priority:
        priority = filter_selectbox("Priority", PRIORITY_ORDER, "vd_cases_priority", cases["priority"])
    with col_type:
        entity_type = filter_selectbox("Entity type", values(EntityType), "vd_cases_entity", cases["entity_type"])
    return CaseFilters(search=search, status=status, priority=priority, entity_type=entity_type)


def _case_actions(cases, context: PageContext) -> None:
    st.markdown("#### Case Actions")
    options = cases["case_id"].tolist()
    labels = dict(zip(cases["case_id"], cases["case_number"] + " · " + cases["entity_name"]))
    case_id = st.selectbox("Case", options, format_func=labels.get, key="vd_cases_action_target")
    if case_id is None:
        return
    row = cases[cases["case_id"] == case_id].iloc[0]

    approve_tab, reject_tab, edit_tab = st.tabs(["Approve", "Reject", "Update"])
    with approve_tab:
        comment = st.text_area("Comment (optional)", key="vd_cases_approve_comment")
        col_a, col_b = st.columns(2)
        with col_a:
            if st.button("✅ Approve case", key="vd_cases_approve"):
                state.run_action(
                    "cases", actions.approve_case, case_id, comment, as_of=context.as_of,
                    success=f"{row['case_number']} approved",
                )
        with col_b:
            if st.button("⏫ Escalate priority", key="vd_cases_escalate"):
                state.run_action("cases", actions.escalate_case, case_id, success=f"{row['case_number']} escalated")
    with reject_tab:
        reason = st.text_area("Reason", key="vd_cases_reject_reason")
        if st.button("❌ Reject case", key="vd_cases_reject"):
            state.run_action(
                "cases", actions.reject_case, case_id, reason, as_of=context.as_of,
                success=f"{row['case_number']} rejected",
            )
    with edit_tab:
        with st.form("vd_cases_edit_form"):
            current = row["priority"]
            priority = st.selectbox(
                "Priority", PRIORITY_ORDER, index=PRIORITY_ORDER.index(current) if current in PRIORITY_ORDER else 0
            )
            officers = sorted(cases["assigned_officer"].dropna().unique().tolist())
            officer = st.selectbox(
                "Assigned officer",
                officers,
                index=officers.index(row["assigned_officer"]) if row["assigned_officer"] in officers else 0,
            )
            notes = st.text_area("Notes", value=row["notes"] if isinstance(row["notes"], str) else "")
            if st.form_submit_button("Save changes"):
                state.run_action(
                    "cases", actions.update_case, case_id,
                    priority=priority, assigned_officer=officer, notes=notes,
                    success=f"{row['case_number']} updated",
                )


def render(bundle: DataBundle, context: PageContext) -> None:
    st.subheader("Active Cases")
    cases = bundle.cases
    if cases.empty:
        st.info("No vetting cases loaded.")
        return

    filters = _filters(cases)
    filtered = filter_cases(cases, filters)
    st.session_state["vd_cases_filters"] = serialize_filters(filters)

    render_kpi_cards(
        [
            KpiCard("Matching Cases", len(filtered)),
            KpiCard("Overdue", int(filtered["is_overdue"].astype(bool).sum())),
            KpiCard("Flagged for Review", int(filtered["flagged_for_review"].astype(bool).sum())),
            KpiCard("Estimated Spend", filtered["total_estimated_cost"].sum(), currency="R"),
        ],
        columns=4,
    )

    ordered = sort_controls(filtered, "cases", SORTABLE, default="initiated_date", ascending=False)
    page = paginate_controls(ordered, "cases")
    render_table(
        page,
        columns=TABLE_COLUMNS,
        labels=LABELS,
        column_config={
            "overall_progress": {"type": "percent", "decimals": 0},
            "initiated_date": {"type": "date"},
            "target_completion_date": {"type": "date"},
            "total_estimated_cost": {"type": "currency"},
        },
        export_file_name="active_cases.csv",
        key="cases_table",
    )

    if not filtered.empty:
        _case_actions(filtered, context)
