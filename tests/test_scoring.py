import pandas as pd
import pytest

from vetting_dashboard.risk.profiles import directors_frame, suppliers_frame
from vetting_dashboard.risk.scoring import (
    RiskScoringEngine,
    apply_risk_scoring,
    generate_risk_report,
    round_half_up,
)


@pytest.fixture
def engine():
    return RiskScoringEngine.from_frames(suppliers_frame(), directors_frame())


@pytest.fixture
def result():
    return apply_risk_scoring(suppliers_frame(), directors_frame())


def test_round_half_up():
    assert round_half_up(30.5) == 31
    assert round_half_up(46.75) == 47
    assert round_half_up(2.5) == 3


def test_base_risk_is_weighted_factor_sum(engine):
    assert engine.base_risk(engine.suppliers["SUP_301"].factors) == pytest.approx(22.75)


@pytest.mark.parametrize(
    "supplier_id, score",
    [("SUP_301", 26), ("SUP_302", 28), ("SUP_401", 32), ("SUP_101", 100)],
)
def test_supplier_scores(engine, supplier_id, score):
    assert engine.supplier_risk(supplier_id) == score


@pytest.mark.parametrize("director_id, score", [("DIR_09", 31), ("DIR_10", 47), ("DIR_04", 100)])
def test_director_scores(engine, director_id, score):
    assert engine.director_risk(director_id) == score


def test_concentration_penalty_steps(engine):
    assert engine.concentration_penalty(1) == 0
    assert engine.concentration_penalty(2) == 5
    assert engine.concentration_penalty(3) == 12
    assert engine.concentration_penalty(6) == 20


def test_unknown_supplier_raises(engine):
    with pytest.raises(KeyError):
        engine.supplier_risk("SUP_999")


def test_with_config_overrides_without_mutating(engine):
    tweaked = engine.with_config(adverse_media_penalty=0)
    assert tweaked.config.adverse_media_penalty == 0
    assert engine.config.adverse_media_penalty == 8


def test_concentration_risks(engine):
    concentration = engine.concentration_risks()
    assert {d["director_id"] for d in concentration["directors"]} == {"DIR_04", "DIR_06"}
    shared = {s["supplier_id"] for s in concentration["suppliers"]}
    assert len(shared) == 11
    assert "SUP_401" not in shared and "SUP_402" not in shared
    scores = [s["risk_score"] for s in concentration["suppliers"]]
    assert scores == sorted(scores, reverse=True)


def test_apply_risk_scoring_adds_columns(result):
    suppliers = result.suppliers.set_index("supplier_id")
    assert suppliers.loc["SUP_301", "risk_score"] == 26
    assert suppliers.loc["SUP_301", "risk_level"] == "Medium"
    assert suppliers.loc["SUP_301", "base_risk"] == 23
    assert suppliers.loc["SUP_401", "shared_director_count"] == 0

    directors = result.directors.set_index("director_id")
    assert directors.loc["DIR_04", "board_count"] == 4
    assert bool(directors.loc["DIR_04", "is_concentration_risk"])
    assert not bool(directors.loc["DIR_09", "is_concentration_risk"])

    assert result.summary["total_suppliers"] == 13
    assert result.summary["concentration_risk_directors"] == 2


def test_generate_risk_report(result):
    report = generate_risk_report(result, pd.Timestamp("2025-06-02 09:00", tz="UTC"), top_n=3)
    assert report.startswith("# EXECUTIVE RISK SCORING REPORT")
    assert "### Sipho Ndlovu (DIR_04)" in report
    assert report.count("- Base Risk:") == 3
