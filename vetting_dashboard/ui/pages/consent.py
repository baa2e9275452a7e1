from __future__ import annotations

import pandas as pd
import streamlit as st

from vetting_dashboard.data import actions, catalog
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.filters import ConsentFilters, filter_consents
from vetting_dashboard.data.metrics import consent_stats
from vetting_dashboard.data.models import (
    CONSENT_STATUS_VARIANTS,
    ConsentChannel,
    ConsentRequestStatus,
    EntityType,
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
    "request_sent_date": "Sent",
    "expiry_date": "Expires",
    "subject_name": "Subject",
    "status": "Status",
    "last_updated": "Last updated",
}
OUTCOME_LABELS = {
    "approve": "Approve",
    "reject_signature": "Reject (signature mismatch)",
    "reject_other": "Reject (other issue)",
}


def _filters(consents: pd.DataFrame) -> ConsentFilters:
    col_search, col_status, col_channel, col_type, col_expired = st.columns([2, 2, 1, 1, 1])
    with col_search:
        search = st.text_input("Search", placeholder="Subject, ID or case", key="vd_consent_search")
    with col_status:
        status = filter_selectbox("Status", values(ConsentRequestStatus), "vd_consent_status", consents["status"])
    with col_channel:
        channel = filter_selectbox("Channel", values(ConsentChannel), "vd_consent_channel", consents["channel"])
    with col_type:
        entity_type = filter_selectbox("Entity type", values(EntityType), "vd_consent_entity", consents["entity_type"])
    with col_expired:
        st.write("")
        expired_only = st.checkbox("Expired only", key="vd_consent_expired")
    return ConsentFilters(
        search=search, status=status, channel=channel, entity_type=entity_type, show_expired_only=expired_only
    )


def _render_verification(consents: pd.DataFrame, context: PageContext) -> None:
    st.markdown("#### Signature Verification")
    awaiting = consents[consents["status"] == ConsentRequestStatus.SUBMITTED_AWAITING_VERIFICATION.value]
    if awaiting.empty:
        st.caption("No consents are awaiting verification.")
        return
    labels = dict(zip(awaiting["consent_id"], awaiting["subject_name"] + " · " + awaiting["consent_id"]))
    with st.form("vd_consent_verify_form"):
        consent_id = st.selectbox("Consent", awaiting["consent_id"].tolist(), format_func=labels.get)
        outcome = st.radio("Outcome", list(OUTCOME_LABELS), format_func=OUTCOME_LABELS.get, horizontal=True)
        notes = st.text_input("Verification notes")
        if st.form_submit_button("Record verification"):
            state.run_action(
                "consents", actions.verify_consent, consent_id, outcome, notes=notes or None, as_of=context.as_of,
                success=f"Consent {consent_id}: {OUTCOME_LABELS[outcome].lower()}",
            )


def _render_manual_form(context: PageContext) -> None:
    st.markdown("#### Record Manual Consent")
    entity_type = st.radio("Entity type", values(EntityType), horizontal=True, key="vd_consent_manual_entity")
    consent_checks = [c for c in catalog.checks_by_entity_type(EntityType(entity_type)) if c.consent_required]
    names = {c.check_id: c.name for c in consent_checks}
    with st.form("vd_consent_manual_form", clear_on_submit=True):
        col_a, col_b = st.columns(2)
        with col_a:
            subject_name = st.text_input("Subject name")
            subject_id = st.text_input("ID / registration number")
        with col_b:
            case_ref = st.text_input("Vetting case reference (optional)")
            project = st.text_input("Project (optional)")
        check_ids = st.multiselect("Checks covered", list(names), format_func=names.get)
        approved = st.checkbox("Subject approved the checks", value=True)
        notes = st.text_area("Notes")
        if st.form_submit_button("Save consent"):
            form = actions.ManualConsentForm(
                subject_name=subject_name,
                subject_id=subject_id,
                entity_type=entity_type,
                check_ids=check_ids,
                approved=approved,
                vetting_case_id=case_ref or None,
                project_name=project or None,
                notes=notes or None,
            )
            state.run_action(
                "consents", actions.record_manual_consent, form, as_of=context.as_of,
                success=f"Manual consent recorded for {subject_name.strip()}",
            )


def render(bundle: DataBundle, context: PageContext) -> None:
    st.subheader("Consent Management")
    consents = bundle.consents
    stats = consent_stats(consents, context.as_of, context.settings.expiring_soon_days)
    render_kpi_cards(
        [
            KpiCard("Checks Under Consent", stats["total_checks"]),
            KpiCard("Via SMS", stats["by_channel"].get(ConsentChannel.SMS_LINK.value, 0)),
            KpiCard("Via Email", stats["by_channel"].get(ConsentChannel.EMAIL_LINK.value, 0)),
            KpiCard("Manual", stats["by_channel"].get(ConsentChannel.MANUAL_UPLOAD.value, 0)),
            KpiCard(
                "Expiring Soon",
                stats["expiring_soon"],
                help_text=f"Checks whose consent link expires within {context.settings.expiring_soon_days} days",
            ),
        ],
        columns=5,
    )

    if consents.empty:
        st.info("No consent requests loaded.")
        _render_manual_form(context)
        return

    near = consents[consents["is_near_expiry"] & ~consents["is_expired"]]
    if not near.empty:
        st.warning(
            f"{len(near)} consent link(s) expire within {context.settings.near_expiry_hours} hours: "
            + ", ".join(near["subject_name"].astype(str))
        )

    filters = _filters(consents)
    filtered = filter_consents(consents, filters)
    ordered = sort_controls(filtered, "consents", SORTABLE, default="request_sent_date", ascending=False)
    page = paginate_controls(ordered, "consents")
    render_table(
        page,
        columns=[
            "consent_id", "subject_name", "entity_type", "vetting_case_id", "status", "channel",
            "checks_count", "checks_tooltip", "request_sent_date", "expiry_date", "is_expired",
        ],
        labels={
            "consent_id": "Consent", "subject_name": "Subject", "entity_type": "Type",
            "vetting_case_id": "Case", "status": "Status", "channel": "Channel", "checks_count": "Checks",
            "checks_tooltip": "Check names", "request_sent_date": "Sent", "expiry_date": "Expires",
            "is_expired": "Expired",
        },
        column_config={
            "status": {"type": "badge", "variants": CONSENT_STATUS_VARIANTS},
            "request_sent_date": {"type": "datetime"},
            "expiry_date": {"type": "datetime"},
        },
        export_file_name="consent_requests.csv",
        key="consent_table",
    )

    by_type = counts_frame(stats["by_entity_type"], "Entity type", "Checks")
    if not by_type.empty:
        render_plotly(
            bar_chart(by_type, x="Entity type", y="Checks", title="Consented Checks by Entity Type", text_auto=True),
            key="consent_by_type",
        )

    left, right = st.columns(2)
    with left:
        _render_verification(consents, context)
    with right:
        _render_manual_form(context)
