import pandas as pd
import pytest

from vetting_dashboard.config import Settings
from vetting_dashboard.data.loader import clear_cache, load_data, normalize_table
from vetting_dashboard.data.models import TABLE_COLUMNS

AS_OF = pd.Timestamp("2025-06-02 09:00", tz="UTC")


def test_normalize_table_types_worksheet_values():
    raw = pd.DataFrame(
        {
            "task_id": ["t1", "t2", "t3"],
            "due_date": ["2025-06-01 10:00", "01/06/2025", "not a date"],
            "notes": ["N/A", "call supplier", " null "],
            "estimated_minutes": ["15", "x", ""],
            "unexpected": [1, 2, 3],
        }
    )
    typed, failures = normalize_table("tasks", raw)

    assert list(typed.columns) == TABLE_COLUMNS["tasks"]
    assert typed["due_date"].iloc[0] == pd.Timestamp("2025-06-01 10:00", tz="UTC")
    assert typed["due_date"].iloc[1] == pd.Timestamp("2025-06-01", tz="UTC")
    assert pd.isna(typed["due_date"].iloc[2])
    assert failures == {"due_date": 1}

    assert typed["notes"].tolist() == [None, "call supplier", None]
    assert typed.attrs["sentinel_replacements"]["notes"] == 2
    assert typed["estimated_minutes"].iloc[0] == 15
    assert typed["estimated_minutes"].isna().sum() == 2


def test_sentinels_cleared_in_all_text_columns():
    raw = pd.DataFrame({"task_id": ["t1", "t2"], "notes": ["N/A", "ok"], "subject_name": ["-", "x"]})
    typed, _ = normalize_table("tasks", raw)
    assert typed["notes"].tolist() == [None, "ok"]
    assert typed["subject_name"].tolist() == [None, "x"]
    assert typed.attrs["sentinel_replacements"] == {"notes": 1, "subject_name": 1}


def test_normalize_table_lists_and_booleans():
    consents, _ = normalize_table("consents", pd.DataFrame({"check_ids": ["id_verify_sa, credit_check_ind", None]}))
    assert consents["check_ids"].tolist() == [["id_verify_sa", "credit_check_ind"], []]

    cases, _ = normalize_table("cases", pd.DataFrame({"is_overdue": ["Yes", "no", "TRUE"]}))
    assert cases["is_overdue"].tolist() == [True, False, True]


def test_normalize_empty_worksheet_returns_schema():
    typed, failures = normalize_table("schedules", pd.DataFrame())
    assert typed.empty
    assert list(typed.columns) == TABLE_COLUMNS["schedules"]
    assert failures == {}


def test_load_sample_data_records_diagnostics():
    settings = Settings(as_of=AS_OF.isoformat(), sample_case_count=12)
    clear_cache()
    bundle = load_data(settings)
    assert bundle.diagnostics["source"] == "sample"
    assert bundle.diagnostics["as_of"] == AS_OF.isoformat()
    assert bundle.diagnostics["row_counts"]["cases"] == 12


def test_gsheet_source_requires_spreadsheet_id():
    with pytest.raises(RuntimeError, match="SPREADSHEET_ID"):
        load_data(Settings(data_source="gsheet", as_of=AS_OF.isoformat()))


def test_gsheet_source_requires_credentials(monkeypatch, tmp_path):
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", str(tmp_path / "missing.json"))
    with pytest.raises(FileNotFoundError):
        load_data(Settings(data_source="gsheet", spreadsheet_id="abc", as_of=AS_OF.isoformat()))
