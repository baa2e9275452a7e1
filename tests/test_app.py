from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP_PATH = Path(__file__).resolve().parents[1] / "app.py"


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("DATA_SOURCE", "sample")
    monkeypatch.setenv("DASHBOARD_AS_OF", "2025-06-02T09:00:00+00:00")
    monkeypatch.setenv("SAMPLE_CASE_COUNT", "20")
    return AppTest.from_file(str(APP_PATH), default_timeout=120)


def test_dashboard_renders_every_tab(app):
    app.run()
    assert not app.exception
    assert app.title[0].value == "Vetting Operations Dashboard"
    assert len(app.tabs) >= 10


def test_refresh_keeps_rendering(app):
    app.run()
    refresh = [b for b in app.button if "Refresh" in b.label]
    assert refresh
    refresh[0].click().run()
    assert not app.exception


def test_sidebar_row_counts_follow_working_tables(app):
    app.run()
    reports = app.session_state["vd_table_reports"]
    app.session_state["vd_table_reports"] = reports.iloc[1:]
    app.run()
    assert not app.exception
    lines = [md.value for md in app.sidebar.markdown]
    assert f"- Reports: {len(reports) - 1}" in lines


def test_initiate_vetting_form_opens_a_case(app):
    app.run()
    before = len(app.session_state["vd_table_cases"])
    app.text_input(key="vd_calc_name_individual").input("Thabo Mokoena")
    app.text_input(key="vd_calc_identifier_individual").input("8501015800083")
    app.checkbox(key="vd_calc_preauth_individual").check()
    submit = [b for b in app.button if b.label == "Initiate vetting"]
    submit[0].click().run()
    assert not app.exception
    cases = app.session_state["vd_table_cases"]
    assert len(cases) == before + 1
    assert cases.iloc[-1]["status"] == "Initiated"
    assert cases.iloc[-1]["case_number"].startswith("VET-2025-")
