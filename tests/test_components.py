import pandas as pd
import plotly.graph_objects as go

from vetting_dashboard.ui.components import charts, tables


def _capture(calls, name):
    def record(*args, **kwargs):
        calls.append((name, args, kwargs))
    return record


def test_render_table_stretches_and_offers_csv(monkeypatch):
    calls = []
    monkeypatch.setattr(tables.st, "dataframe", _capture(calls, "dataframe"))
    monkeypatch.setattr(tables.st, "download_button", _capture(calls, "download"))

    df = pd.DataFrame({"report_id": ["VR-1"], "overall_risk_score": [82]})
    tables.render_table(df, labels={"report_id": "Report"}, height=200, export_file_name="reports.csv", key="t")

    (_, args, kwargs), (_, dl_args, dl_kwargs) = calls
    assert kwargs["width"] == "stretch"
    assert "use_container_width" not in kwargs
    assert list(args[0].columns) == ["Report", "overall_risk_score"]
    assert dl_kwargs["file_name"] == "reports.csv"
    assert dl_kwargs["data"].decode("utf-8").startswith("report_id,overall_risk_score")


def test_render_plotly_stretches(monkeypatch):
    calls = []
    monkeypatch.setattr(charts.st, "plotly_chart", _capture(calls, "plotly_chart"))
    charts.render_plotly(go.Figure(), key="chart")
    (_, _, kwargs), = calls
    assert kwargs["width"] == "stretch"
    assert "use_container_width" not in kwargs
    assert kwargs["key"] == "chart"
