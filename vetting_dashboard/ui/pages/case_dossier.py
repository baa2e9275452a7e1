from __future__ import annotations

import json

import pandas as pd
import streamlit as st

from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.case_views import case_details, case_dossier, case_timeline, entity_details
from vetting_dashboard.ui.components.charts import progress_timeline, render_plotly
from vetting_dashboard.ui.components.formatting import format_currency, format_date, format_datetime
from vetting_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from vetting_dashboard.ui.components.tables import render_table
from vetting_dashboard.ui.pages.context import PageContext

TIMELINE_ICONS = {"created": "🆕", "assigned": "👤", "check_completed": "✅"}


def _check_schedule(checks: pd.DataFrame, as_of: pd.Timestamp) -> pd.DataFrame:
    started = checks.dropna(subset=["started_date"]).copy()
    if started.empty:
        return started
    started["finished"] = started["completed_date"].fillna(as_of)
    return started


def _render_timeline(events) -> None:
    st.markdown("#### Timeline")
    if not events:
        st.info("No events recorded for this case.")
        return
    for event in events:
        icon = TIMELINE_ICONS.get(event["type"], "•")
        st.markdown(
            f"{icon} **{event['title']}** · {format_datetime(event['timestamp'])}  \n"
            f"<small>{event['description']} · {event['user']}</small>",
            unsafe_allow_html=True,
        )


def _render_entity(entity) -> None:
    st.markdown("#### Entity Profile")
    if entity is None:
        st.info("No entity profile available.")
        return
    st.markdown(f"**{entity['name']}** ({entity['type']}) · `{entity['identifier']}`")
    profile = entity["risk_profile"]
    render_kpi_cards(
        [
            KpiCard("Overall Risk", profile["overall"]),
            KpiCard("Financial", profile["financial"]),
            KpiCard("Compliance", profile["compliance"]),
            KpiCard("Reputation", profile["reputation"]),
        ],
        columns=4,
    )
    history = pd.DataFrame(entity["relationship_history"])
    if len(history) > 1:
        st.caption("Relationship history")
        render_table(history, column_config={"value": {"type": "currency"}}, height=180, key="dossier_history")


def _dossier_json(dossier) -> bytes:
    return json.dumps(dossier, default=str, indent=2).encode("utf-8")


def render(bundle: DataBundle, context: PageContext) -> None:
    st.subheader("Case Dossier")
    cases = bundle.cases
    if cases.empty:
        st.info("No vetting cases loaded.")
        return

    labels = dict(zip(cases["case_id"], cases["case_number"] + " · " + cases["entity_name"]))
    case_id = st.selectbox("Case", cases["case_id"].tolist(), format_func=labels.get, key="vd_dossier_case")
    details = case_details(bundle, case_id)
    if details is None:
        st.warning("Case not found.")
        return

    render_kpi_cards(
        [
            KpiCard("Status", value_display=details["status"]),
            KpiCard("Priority", value_display=details["priority"]),
            KpiCard("Risk Score", details["risk_score"], help_text="Mean of completed check risk scores"),
            KpiCard("Estimated Cost", details["total_cost"], currency="R", compact=False),
            KpiCard("Target Date", value_display=format_date(details["estimated_completion"])),
        ],
        columns=5,
    )
    progress = float(details["progress"]) if pd.notna(details["progress"]) else 0.0
    st.progress(min(max(progress, 0.0), 100.0) / 100, text=f"{progress:.0f}% complete")
    st.caption(f"Officer {details['assigned_officer']} · {details['compliance_status']}")
    with st.expander("Case notes", expanded=False):
        for note in details["notes"]:
            st.write(f"- {note}")

    left, right = st.columns([1, 1])
    with left:
        _render_timeline(case_timeline(bundle, case_id))
    with right:
        _render_entity(entity_details(bundle, case_id))

    checks = bundle.case_checks[bundle.case_checks["case_id"] == case_id]
    schedule = _check_schedule(checks, context.as_of)
    if not schedule.empty:
        fig = progress_timeline(
            schedule, start="started_date", end="finished", y="check_name", color="status", title="Check Progress"
        )
        render_plotly(fig, key="dossier_checks")

    dossier = case_dossier(bundle, case_id, as_of=context.as_of)
    st.markdown("#### Dossier")
    render_kpi_cards(
        [
            KpiCard("Days Active", dossier["days_active"]),
            KpiCard("Checks Completed", value_display=f"{dossier['checks_completed']:.0f} / {dossier['total_checks']:.0f}"),
            KpiCard("Pending Checks", dossier["pending_checks"]),
            KpiCard("Overdue", value_display=dossier["overdue_status"]),
        ],
        columns=4,
    )
    st.info(dossier["risk_assessment"])

    docs_tab, consent_tab, results_tab = st.tabs(["Documents", "Consent Records", "Check Results"])
    with docs_tab:
        render_table(
            pd.DataFrame(dossier["documents"]),
            column_config={"upload_date": {"type": "date"}},
            height=200,
            key="dossier_docs",
        )
    with consent_tab:
        render_table(
            pd.DataFrame(dossier["consent_records"]),
            column_config={"obtained_date": {"type": "date"}},
            height=200,
            key="dossier_consents",
        )
    with results_tab:
        render_table(
            pd.DataFrame(dossier["check_results"]),
            column_config={"completed_date": {"type": "date"}, "cost": {"type": "currency"}},
            height=300,
            key="dossier_results",
        )

    st.download_button(
        "Download dossier (JSON)",
        data=_dossier_json(dossier),
        file_name=f"{dossier['case_reference']}_dossier.json",
        mime="application/json",
        key="vd_dossier_download",
    )
    st.caption(f"Dossier total {format_currency(dossier['total_cost'], compact=False)}")
