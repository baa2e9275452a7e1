from __future__ import annotations

from typing import Optional, Tuple

import pandas as pd
import streamlit as st

from vetting_dashboard.data import actions
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.filters import ReportFilters, filter_reports
from vetting_dashboard.data.metrics import report_stats
from vetting_dashboard.data.models import (
    RISK_LEVEL_COLORS,
    RISK_LEVEL_VARIANTS,
    CheckResultStatus,
    EntityType,
    ReportStatus,
    RiskLevel,
    values,
)
from vetting_dashboard.ui import state
from vetting_dashboard.ui.components.badges import render_badge
from vetting_dashboard.ui.components.charts import counts_frame, line_chart, pie_chart, render_plotly
from vetting_dashboard.ui.components.formatting import format_date
from vetting_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from vetting_dashboard.ui.components.tables import render_table
from vetting_dashboard.ui.layout import filter_selectbox
from vetting_dashboard.ui.pages.context import PageContext
from vetting_dashboard.ui.pages.helpers import paginate_controls, sort_controls

SORTABLE = {
    "completion_date": "Completed",
    "overall_risk_score": "Risk score",
    "subject_name": "Subject",
    "report_id": "Report",
}
RESULT_ICONS = {
    CheckResultStatus.CLEAR.value: "✅",
    CheckResultStatus.ADVERSE_FINDING.value: "⚠️",
    CheckResultStatus.NEUTRAL_INFO.value: "ℹ️",
    CheckResultStatus.NOT_PERFORMED.value: "⏸️",
}


def _date_range(reports: pd.DataFrame) -> Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]:
    dates = reports["completion_date"].dropna()
    if dates.empty:
        return None, None
    picked = st.date_input(
        "Completed between",
        value=(dates.min().date(), dates.max().date()),
        key="vd_reports_dates",
    )
    if not isinstance(picked, (list, tuple)) or len(picked) != 2:
        # a single date while the range picker is half-filled
        return None, None
    start = pd.Timestamp(picked[0], tz="UTC")
    end = pd.Timestamp(picked[1], tz="UTC") + pd.Timedelta(days=1) - pd.Timedelta(microseconds=1)
    return start, end


def _filters(reports: pd.DataFrame) -> ReportFilters:
    col_search, col_level, col_status, col_type = st.columns([2, 1, 1, 1])
    with col_search:
        search = st.text_input("Search", placeholder="Report, case or subject", key="vd_reports_search")
    with col_level:
        risk_level = filter_selectbox("Risk level", values(RiskLevel), "vd_reports_level", reports["overall_risk_level"])
    with col_status:
        report_status = filter_selectbox(
            "Report status", values(ReportStatus), "vd_reports_status", reports["report_status"]
        )
    with col_type:
        entity_type = filter_selectbox("Entity type", values(EntityType), "vd_reports_entity", reports["entity_type"])
    return ReportFilters(
        search=search,
        risk_level=risk_level,
        report_status=report_status,
        entity_type=entity_type,
        date_range=_date_range(reports),
    )


def _weekly_completions(reports: pd.DataFrame) -> pd.DataFrame:
    dated = reports.dropna(subset=["completion_date"])
    if dated.empty:
        return pd.DataFrame(columns=["Week", "Reports"])
    weekly = dated.set_index("completion_date")["report_id"].resample("W-MON").count()
    return weekly.rename("Reports").rename_axis("Week").reset_index()


def _render_detail(reports: pd.DataFrame, report_checks: pd.DataFrame) -> None:
    st.markdown("#### Report Detail")
    labels = dict(zip(reports["report_id"], reports["report_id"] + " · " + reports["subject_name"]))
    report_id = st.selectbox("Report", reports["report_id"].tolist(), format_func=labels.get, key="vd_reports_detail")
    if report_id is None:
        return
    report = reports[reports["report_id"] == report_id].iloc[0]

    col_info, col_badge = st.columns([3, 1])
    with col_info:
        st.markdown(f"**{report['subject_name']}** ({report['entity_type']}) · `{report['subject_id']}`")
        st.caption(
            f"Case {report['vetting_case_id']} · completed {format_date(report['completion_date'])} "
            f"· generated by {report['report_generated_by']}"
        )
        st.write(report["summary"])
    with col_badge:
        render_badge(report["risk_description"], RISK_LEVEL_VARIANTS.get(report["overall_risk_level"], "default"))
        st.write("")
        st.caption(report["report_status"])

    checks = report_checks[report_checks["report_id"] == report_id]
    if checks.empty:
        st.caption("No check results attached to this report.")
    for check in checks.to_dict("records"):
        st.markdown(f"{RESULT_ICONS.get(check['status'], '•')} **{check['check_name']}** · {check['summary']}")

    if isinstance(report["pdf_link"], str) and report["pdf_link"]:
        st.link_button("Open PDF", report["pdf_link"])
    if st.button("🗄️ Archive report", key="vd_reports_archive"):
        state.run_action("reports", actions.archive_report, report_id, success=f"Report {report_id} archived")


def render(bundle: DataBundle, context: PageContext) -> None:
    st.subheader("Completed Reports")
    reports = bundle.reports
    stats = report_stats(reports)
    render_kpi_cards(
        [
            KpiCard("Reports", stats["total"]),
            KpiCard("Complete", stats["complete"]),
            KpiCard("Critical Risk", stats["critical"], alert_above=0),
            KpiCard("High Risk", stats["high"]),
            KpiCard("Average Risk Score", stats["average_risk_score"]),
        ],
        columns=5,
    )
    if reports.empty:
        st.info("No completed reports loaded.")
        return

    distribution = counts_frame(stats["risk_distribution"], "Risk level", "Reports")
    left, right = st.columns([1, 2])
    with left:
        render_plotly(
            pie_chart(
                distribution, names="Risk level", values="Reports", title="Risk Distribution",
                color_discrete_map=RISK_LEVEL_COLORS,
            ),
            key="reports_risk_pie",
        )
        weekly = _weekly_completions(reports)
        if not weekly.empty:
            render_plotly(
                line_chart(weekly, x="Week", y="Reports", title="Reports Completed per Week"),
                key="reports_weekly",
            )
    with right:
        filters = _filters(reports)
        filtered = filter_reports(reports, filters)
        st.caption(f"{len(filtered)} of {len(reports)} reports match")

    ordered = sort_controls(filtered, "reports", SORTABLE, default="completion_date", ascending=False)
    page = paginate_controls(ordered, "reports")
    render_table(
        page,
        columns=[
            "report_id", "vetting_case_id", "subject_name", "entity_type", "completion_date",
            "report_status", "overall_risk_level", "risk_description", "check_results_count",
        ],
        labels={
            "report_id": "Report", "vetting_case_id": "Case", "subject_name": "Subject",
            "entity_type": "Type", "completion_date": "Completed", "report_status": "Status",
            "overall_risk_level": "Risk", "risk_description": "Risk detail", "check_results_count": "Checks",
        },
        column_config={
            "completion_date": {"type": "date"},
            "overall_risk_level": {"type": "badge", "variants": RISK_LEVEL_VARIANTS},
        },
        export_file_name="completed_reports.csv",
        key="reports_table",
    )

    if not filtered.empty:
        _render_detail(filtered, bundle.report_checks)
