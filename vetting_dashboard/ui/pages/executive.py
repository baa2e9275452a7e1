from __future__ import annotations

import pandas as pd
import streamlit as st

from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.metrics import POSTURE_FACTORS, risk_posture, vetting_stats
from vetting_dashboard.data.models import RISK_LEVEL_COLORS, RISK_LEVEL_VARIANTS, RiskLevel, values
from vetting_dashboard.risk.network import build_relationship_graph, force_layout
from vetting_dashboard.risk.scoring import generate_risk_report
from vetting_dashboard.ui.components.charts import (
    bar_chart,
    counts_frame,
    gauge_chart,
    network_graph,
    render_plotly,
    risk_map,
)
from vetting_dashboard.ui.components.formatting import format_time_ago
from vetting_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from vetting_dashboard.ui.components.tables import render_table
from vetting_dashboard.ui.pages.context import PageContext
from vetting_dashboard.ui.pages.helpers import severity_icon


def _render_posture(suppliers: pd.DataFrame) -> None:
    st.markdown("#### Risk Posture")
    posture = risk_posture(suppliers)
    cols = st.columns(len(POSTURE_FACTORS))
    for col, factor in zip(cols, POSTURE_FACTORS):
        with col:
            render_plotly(gauge_chart(posture[factor], factor.title()), key=f"exec_posture_{factor}")


def _render_events(events: pd.DataFrame, as_of: pd.Timestamp) -> None:
    st.markdown("#### Strategic Events")
    if events.empty:
        st.info("No strategic events.")
        return
    for event in events.sort_values("timestamp", ascending=False).to_dict("records"):
        with st.container(border=True):
            st.markdown(f"{severity_icon(event['severity'])} **{event['title']}**")
            st.caption(f"{event['severity']} · {format_time_ago(event['timestamp'], as_of)}")
            st.write(event["description"])
            related = event["related_entity_ids"] if isinstance(event["related_entity_ids"], list) else []
            if related:
                st.caption("Related: " + ", ".join(related))
            if isinstance(event["action_label"], str) and event["action_label"]:
                st.caption(f"Suggested action: {event['action_label']}")


def _render_concentration(context: PageContext) -> None:
    st.markdown("#### Concentration Risk")
    concentration = context.risk.concentration
    left, right = st.columns(2)
    with left:
        st.caption("Directors on three or more boards")
        render_table(
            pd.DataFrame(concentration["directors"]),
            labels={"director_id": "Director", "name": "Name", "board_count": "Boards", "risk_score": "Risk"},
            height=200,
            export_file_name="concentration_directors.csv",
            key="exec_conc_directors",
        )
    with right:
        st.caption("Suppliers sharing directors")
        render_table(
            pd.DataFrame(concentration["suppliers"]),
            labels={
                "supplier_id": "Supplier", "name": "Name",
                "shared_director_count": "Shared directors", "risk_score": "Risk",
            },
            height=200,
            export_file_name="concentration_suppliers.csv",
            key="exec_conc_suppliers",
        )


def render(bundle: DataBundle, context: PageContext) -> None:
    st.subheader("Executive Risk")
    suppliers = context.risk.suppliers
    directors = context.risk.directors
    summary = context.risk.summary
    stats = vetting_stats(bundle.cases, bundle.reports, bundle.case_checks)

    render_kpi_cards(
        [
            KpiCard("Suppliers", summary["total_suppliers"]),
            KpiCard("High Risk Suppliers", summary["high_risk_suppliers"], help_text="Risk score of 50 or more"),
            KpiCard("Concentration Directors", summary["concentration_risk_directors"]),
            KpiCard("Average Supplier Risk", summary["avg_supplier_risk"]),
            KpiCard("Cases", stats["total_cases"]),
            KpiCard("Completed", stats["completed_cases"]),
            KpiCard(
                "Avg Turnaround",
                value_display=(
                    f"{stats['average_turnaround_days']:.1f} days"
                    if stats["average_turnaround_days"] is not None else "–"
                ),
            ),
            KpiCard("Vetting Spend", stats["total_revenue"], currency="R"),
        ],
        columns=4,
    )

    if suppliers.empty:
        st.info("No supplier risk profiles loaded.")
        return

    _render_posture(suppliers)

    left, right = st.columns([3, 2])
    with left:
        render_plotly(risk_map(bundle.mine_sites, suppliers, title="Supplier Risk by Location"), key="exec_map")
    with right:
        levels = suppliers["risk_level"].value_counts().reindex(values(RiskLevel), fill_value=0)
        levels = counts_frame(levels[levels > 0].to_dict(), "Risk level", "Suppliers")
        render_plotly(
            bar_chart(
                levels, x="Risk level", y="Suppliers", color="Risk level",
                color_discrete_map=RISK_LEVEL_COLORS, title="Suppliers by Risk Level", text_auto=True,
            ),
            key="exec_levels",
        )

    graph = build_relationship_graph(suppliers, directors)
    render_plotly(
        network_graph(graph, force_layout(graph), title="Supplier / Director Network"), key="exec_network"
    )

    _render_concentration(context)

    st.markdown("#### Supplier Risk Breakdown")
    render_table(
        suppliers.sort_values("risk_score", ascending=False),
        columns=[
            "supplier_id", "name", "category", "contract_value", "geographic_risk", "risk_score", "risk_level",
            "base_risk", "concentration_penalty", "network_multiplier", "geographic_multiplier",
            "contract_multiplier", "shared_director_count",
        ],
        labels={
            "supplier_id": "Supplier", "name": "Name", "category": "Category", "contract_value": "Contract",
            "geographic_risk": "Geo", "risk_score": "Risk", "risk_level": "Level", "base_risk": "Base",
            "concentration_penalty": "Concentration", "network_multiplier": "Network x",
            "geographic_multiplier": "Geo x", "contract_multiplier": "Contract x",
            "shared_director_count": "Shared directors",
        },
        column_config={
            "contract_value": {"type": "currency", "compact": True},
            "risk_level": {"type": "badge", "variants": RISK_LEVEL_VARIANTS},
            "network_multiplier": {"type": "number", "decimals": 3},
        },
        export_file_name="supplier_risk.csv",
        key="exec_suppliers",
    )

    left, right = st.columns([3, 2])
    with left:
        _render_events(bundle.events, context.as_of)
    with right:
        st.markdown("#### Provider Performance")
        render_table(
            pd.DataFrame(stats["top_providers"]),
            labels={"provider": "Provider", "cases": "Cases", "success_rate": "Success rate"},
            column_config={"success_rate": {"type": "percent", "decimals": 1}},
            height=240,
            export_file_name="providers.csv",
            key="exec_providers",
        )

    st.download_button(
        "Download risk report (Markdown)",
        data=generate_risk_report(context.risk, context.as_of).encode("utf-8"),
        file_name=f"risk_report_{context.as_of:%Y%m%d}.md",
        mime="text/markdown",
        key="vd_exec_report",
    )
