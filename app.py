import vetting_dashboard.bootstrap_env  # must be first to set env/secrets
from dataclasses import replace

import gspread
import streamlit as st

from vetting_dashboard.config import TABS, load_settings
from vetting_dashboard.data.enrichment import enrich_bundle
from vetting_dashboard.data.loader import clear_cache, load_data
from vetting_dashboard.logger import get_logger
from vetting_dashboard.risk.scoring import apply_risk_scoring
from vetting_dashboard.ui.layout import render_sidebar_status, setup_page
from vetting_dashboard.ui.pages import (
    active_cases,
    calculator,
    case_dossier,
    completed_reports,
    consent,
    data_quality,
    executive,
    operations,
    scheduled_checks,
    tasks,
)
from vetting_dashboard.ui.pages.context import PageContext
from vetting_dashboard.ui.state import reset_session_data, session_reference_time, show_flash, working_bundle

PAGE_RENDERERS = {
    "operations": operations.render,
    "active_cases": active_cases.render,
    "case_dossier": case_dossier.render,
    "consent": consent.render,
    "completed_reports": completed_reports.render,
    "scheduled_checks": scheduled_checks.render,
    "tasks": tasks.render,
    "calculator": calculator.render,
    "executive": executive.render,
    "data_quality": data_quality.render,
}

logger = get_logger()


def _load(settings, as_of):
    """Load the configured source, falling back to sample data when the sheet is unavailable."""
    try:
        return load_data(settings, as_of)
    except (RuntimeError, FileNotFoundError, gspread.exceptions.GSpreadException) as exc:
        logger.error(f"Google Sheet load failed: {exc}")
        st.error(f"Could not load the Google Sheet ({exc}). Showing sample data instead.")
        bundle = load_data(replace(settings, data_source="sample"), as_of)
        diagnostics = dict(bundle.diagnostics, fallback_reason=str(exc))
        return bundle.with_tables(diagnostics=diagnostics)


def main() -> None:
    setup_page()
    st.title("Vetting Operations Dashboard")

    settings = load_settings()
    logger.set_level(settings.log_level)

    if st.sidebar.button("🔄 Refresh Data", type="primary"):
        clear_cache()
        reset_session_data()

    as_of = session_reference_time(settings)
    raw = _load(settings, as_of)
    if raw.is_empty:
        st.warning("No data loaded. Check the Google Sheet or switch DATA_SOURCE to sample.")
        return

    bundle = enrich_bundle(working_bundle(raw), as_of, settings)
    risk = apply_risk_scoring(bundle.suppliers, bundle.directors)

    render_sidebar_status(settings, bundle.diagnostics, as_of, row_counts=bundle.row_counts())
    show_flash()

    context = PageContext(raw=raw, settings=settings, as_of=as_of, risk=risk)

    tab_labels = [tab.label for tab in TABS]
    streamlit_tabs = st.tabs(tab_labels)

    for streamlit_tab, tab_config in zip(streamlit_tabs, TABS):
        renderer = PAGE_RENDERERS.get(tab_config.key)
        if renderer is None:
            continue
        with streamlit_tab:
            renderer(bundle, context)


if __name__ == "__main__":
    main()
