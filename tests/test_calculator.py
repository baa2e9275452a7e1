import pandas as pd
import pytest

from vetting_dashboard.data import calculator

AS_OF = pd.Timestamp("2025-06-02 09:00", tz="UTC")


def test_calculate_empty_selection_returns_none():
    assert calculator.calculate([]) is None
    assert calculator.calculate(["not_a_check"]) is None


def test_calculate_basic_individual_selection():
    result = calculator.calculate(["id_verify_sa", "criminal_record_afis", "credit_check_ind"])
    assert result.total_cost == 320
    assert result.total_turnaround_days == 2
    # identity 20 + criminal 40 + financial 30
    assert result.coverage_score == 90
    assert result.risk_profile == "Low"
    assert result.compliance_score == 90


def test_low_coverage_is_high_risk():
    result = calculator.calculate(["vat_verify_sars"])
    assert result.coverage_score == 10
    assert result.risk_profile == "High"


def test_package_cost_applies_discount():
    pricing = calculator.package_cost("pkg_comprehensive_supplier")
    assert pricing["list_price"] == 1960
    assert pricing["discount"] == 294
    assert pricing["price"] == 1666
    assert pricing["turnaround_days"] == 3


def test_package_cost_unknown_package():
    with pytest.raises(KeyError):
        calculator.package_cost("pkg_missing")


def test_required_checks_cannot_be_toggled_off():
    selected = calculator.clear_selection("Individual")
    assert selected == ["id_verify_sa"]
    assert calculator.toggle_check(selected, "id_verify_sa", "Individual") == ["id_verify_sa"]
    added = calculator.toggle_check(selected, "credit_check_ind", "Individual")
    assert added == ["id_verify_sa", "credit_check_ind"]
    assert calculator.toggle_check(added, "credit_check_ind", "Individual") == ["id_verify_sa"]


def test_select_all_matches_entity_checks():
    company = calculator.select_all("Company")
    assert "cipc_company_check" in company
    assert "id_verify_sa" not in company


def test_recommendations():
    individual = calculator.recommendations("Individual", ["id_verify_sa"])
    assert len(individual) == 2
    assert calculator.recommendations("Individual", ["criminal_record_afis", "credit_check_ind"]) == []
    company = calculator.recommendations("Company", ["cipc_company_check"])
    assert company == ["SARS Tax Compliance check recommended for all business entities"]
    assert calculator.recommendations("Staff Medical", []) == []


def test_draft_case():
    assert calculator.draft_case("Company", None, AS_OF) == {}
    result = calculator.calculate(["cipc_company_check", "physical_loc_verify"])
    draft = calculator.draft_case("Company", result, AS_OF)
    assert draft["status"] == "Initiated"
    assert draft["total_checks"] == 2
    assert draft["estimated_completion_date"] == AS_OF + pd.Timedelta(days=3)


def test_export_then_import_keeps_valid_checks():
    exported = calculator.export_configuration("Individual", ["credit_check_ind", "id_verify_sa"], AS_OF)
    assert exported["selected_checks"] == ["credit_check_ind", "id_verify_sa"]
    assert exported["result"]["total_cost"] == 170

    exported["selected_checks"].append("cipc_company_check")
    imported = calculator.import_configuration(exported, "Individual")
    assert set(imported) == {"credit_check_ind", "id_verify_sa"}


def test_import_adds_missing_required_check():
    assert calculator.import_configuration({"selected_checks": ["bee_verification"]}, "Company") == [
        "cipc_company_check",
        "bee_verification",
    ]
    assert calculator.import_configuration({"selected_checks": "bad"}, "Company") == ["cipc_company_check"]
