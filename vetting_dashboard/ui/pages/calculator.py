from __future__ import annotations

import json
from typing import List

import pandas as pd
import streamlit as st

from vetting_dashboard.data import actions, calculator, catalog
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.identifiers import next_case_number
from vetting_dashboard.data.models import PRIORITY_ORDER, EntityType, Priority, values
from vetting_dashboard.ui import state
from vetting_dashboard.ui.components.charts import gauge_chart, render_plotly
from vetting_dashboard.ui.components.formatting import format_currency, format_date
from vetting_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from vetting_dashboard.ui.components.tables import render_table
from vetting_dashboard.ui.pages.context import PageContext
from vetting_dashboard.ui.state import clear_state_prefixes

SELECTION_KEY = "vd_calc_selection"
CURRENT_SELECTION = "__selection__"


def _checkbox_prefix(entity_type: str) -> str:
    return f"vd_calc_chk_{entity_type}_"


def _selection(entity_type: str) -> List[str]:
    selections = st.session_state.setdefault(SELECTION_KEY, {})
    if entity_type not in selections:
        selections[entity_type] = calculator.clear_selection(entity_type)
    return selections[entity_type]


def _set_selection(entity_type: str, selected: List[str]) -> None:
    st.session_state[SELECTION_KEY][entity_type] = selected
    # checkboxes re-read their value from the selection on the next run
    clear_state_prefixes([_checkbox_prefix(entity_type)])


def _on_toggle(entity_type: str, check_id: str) -> None:
    selections = st.session_state[SELECTION_KEY]
    selections[entity_type] = calculator.toggle_check(selections[entity_type], check_id, entity_type)


def _packages_frame(entity_type: str) -> pd.DataFrame:
    rows = []
    for package in catalog.packages_by_entity_type(EntityType(entity_type)):
        pricing = calculator.package_cost(package.package_id)
        rows.append(
            {
                "package_id": package.package_id,
                "Package": ("⭐ " if package.popular else "") + package.name,
                "Checks": len(package.check_ids),
                "List price": pricing["list_price"],
                "Discount": f"{package.discount_pct:.0f}%",
                "Price": pricing["price"],
                "Turnaround (days)": int(pricing["turnaround_days"]),
            }
        )
    return pd.DataFrame(rows)


def _render_packages(entity_type: str) -> None:
    st.markdown("#### Packages")
    packages = _packages_frame(entity_type)
    if packages.empty:
        st.caption("No packages for this entity type.")
        return
    render_table(
        packages.drop(columns=["package_id"]),
        column_config={"List price": {"type": "currency"}, "Price": {"type": "currency"}},
        height=200,
        export_file_name=f"packages_{entity_type.lower().replace(' ', '_')}.csv",
        key=f"calc_packages_{entity_type}",
    )
    labels = dict(zip(packages["package_id"], packages["Package"]))
    col_pick, col_apply = st.columns([3, 1])
    with col_pick:
        package_id = st.selectbox(
            "Start from package", packages["package_id"].tolist(), format_func=labels.get, key="vd_calc_package"
        )
    with col_apply:
        st.write("")
        if st.button("Apply package", key="vd_calc_apply_package"):
            config = {"selected_checks": list(catalog.get_package(package_id).check_ids)}
            _set_selection(entity_type, calculator.import_configuration(config, entity_type))
            st.rerun()


def _render_checklist(entity_type: str, selected: List[str]) -> None:
    st.markdown("#### Checks")
    col_all, col_clear = st.columns(2)
    with col_all:
        if st.button("Select all", key="vd_calc_select_all"):
            _set_selection(entity_type, calculator.select_all(entity_type))
            st.rerun()
    with col_clear:
        if st.button("Clear", key="vd_calc_clear"):
            _set_selection(entity_type, calculator.clear_selection(entity_type))
            st.rerun()

    required = calculator.required_check_ids(entity_type)
    checks = calculator.available_checks(entity_type)
    for category in sorted({check.category.value for check in checks}):
        with st.expander(category, expanded=True):
            for check in (c for c in checks if c.category.value == category):
                label = (
                    f"{check.name} · {format_currency(check.cost, compact=False)} · "
                    f"{check.turnaround_days}d{' · consent' if check.consent_required else ''}"
                )
                st.checkbox(
                    label,
                    value=check.check_id in selected,
                    key=f"{_checkbox_prefix(entity_type)}{check.check_id}",
                    disabled=check.check_id in required,
                    help=f"Provider: {check.provider}",
                    on_change=_on_toggle,
                    args=(entity_type, check.check_id),
                )


def _render_import(entity_type: str) -> None:
    uploaded = st.file_uploader("Import configuration", type=["json"], key="vd_calc_import")
    if uploaded is not None and st.button("Load configuration", key="vd_calc_load"):
        try:
            config = json.loads(uploaded.getvalue().decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            st.error(f"Could not read configuration: {exc}")
            return
        if not isinstance(config, dict):
            st.error("Configuration must be a JSON object")
            return
        _set_selection(entity_type, calculator.import_configuration(config, entity_type))
        st.rerun()


def _render_initiate(entity_type: str, selected: List[str], context: PageContext) -> None:
    st.markdown("#### Initiate Vetting")
    company = entity_type == EntityType.COMPANY.value
    packages = catalog.packages_by_entity_type(EntityType(entity_type))
    labels = {CURRENT_SELECTION: f"Selected checks ({len(selected)})"}
    labels.update({pkg.package_id: f"Package: {pkg.name}" for pkg in packages})
    suffix = entity_type.lower().replace(" ", "_")

    with st.form(f"vd_calc_initiate_{suffix}"):
        name = st.text_input("Company name" if company else "Full name", key=f"vd_calc_name_{suffix}")
        identifier = st.text_input(
            "Registration number" if company else "ID or passport number", key=f"vd_calc_identifier_{suffix}"
        )
        contact = st.text_input("Primary contact (mobile or email)", key=f"vd_calc_contact_{suffix}")
        project = st.text_input("Project (optional)", key=f"vd_calc_project_{suffix}")
        priority = st.selectbox(
            "Priority", PRIORITY_ORDER, index=PRIORITY_ORDER.index(Priority.MEDIUM.value),
            key=f"vd_calc_priority_{suffix}",
        )
        choice = st.selectbox("Checks", list(labels), format_func=labels.get, key=f"vd_calc_source_{suffix}")
        pre_authorised = st.checkbox(
            "I confirm pre-authorisation for these checks and their cost", key=f"vd_calc_preauth_{suffix}"
        )
        submitted = st.form_submit_button("Initiate vetting", type="primary")

    if submitted:
        request = actions.VettingRequest(
            entity_type=entity_type,
            entity_name=name,
            entity_identifier=identifier,
            contact=contact,
            package_id=None if choice == CURRENT_SELECTION else choice,
            check_ids=list(selected),
            priority=priority,
            project_name=project.strip() or None,
            pre_authorised=pre_authorised,
        )
        reference = next_case_number(state.get_table("cases")["case_number"].tolist(), context.as_of)
        state.run_action(
            "cases",
            actions.initiate_case,
            request,
            as_of=context.as_of,
            success=f"Vetting initiated for {name.strip()}. Case reference: {reference}",
        )


def _render_result(entity_type: str, selected: List[str], context: PageContext) -> None:
    result = calculator.calculate(selected)
    if result is None:
        st.info("Select at least one check to see a quote.")
        return
    render_kpi_cards(
        [
            KpiCard("Total Cost", result.total_cost, currency="R", compact=False),
            KpiCard("Turnaround", value_display=f"{result.total_turnaround_days} days"),
            KpiCard("Checks", len(result.selected_checks)),
            KpiCard("Residual Risk", value_display=result.risk_profile, help_text="Based on category coverage"),
        ],
        columns=2,
    )
    render_plotly(gauge_chart(result.compliance_score, "Compliance coverage"), key="calc_gauge")

    for suggestion in calculator.recommendations(entity_type, selected):
        st.warning(suggestion)

    draft = calculator.draft_case(entity_type, result, context.as_of)
    with st.expander("Draft case", expanded=False):
        st.write(f"Status: {draft['status']}")
        st.write(f"Estimated completion: {format_date(draft['estimated_completion_date'])}")
        st.write(f"Estimated cost: {format_currency(draft['total_estimated_cost'], compact=False)}")
        st.write(f"Checks: {draft['total_checks']}")

    export = calculator.export_configuration(entity_type, selected, context.as_of)
    st.download_button(
        "Export configuration",
        data=json.dumps(export, indent=2).encode("utf-8"),
        file_name=f"vetting_config_{entity_type.lower().replace(' ', '_')}.json",
        mime="application/json",
        key="vd_calc_export",
    )


def render(bundle: DataBundle, context: PageContext) -> None:
    st.subheader("Vetting Calculator")
    entity_type = st.radio("Entity type", values(EntityType), horizontal=True, key="vd_calc_entity")
    selected = _selection(entity_type)

    left, right = st.columns([3, 2])
    with left:
        _render_packages(entity_type)
        _render_checklist(entity_type, selected)
    with right:
        st.markdown("#### Quote")
        _render_result(entity_type, selected, context)
        _render_initiate(entity_type, selected, context)
        _render_import(entity_type)
