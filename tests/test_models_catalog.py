import pytest

from vetting_dashboard.data import catalog
from vetting_dashboard.data.bundle import DataBundle, empty_table
from vetting_dashboard.data.models import (
    CONSENT_STATUS_VARIANTS,
    PRIORITY_ORDER,
    TABLE_COLUMNS,
    CheckCategory,
    ConsentRequestStatus,
    EntityType,
    risk_level_for_score,
    values,
)


@pytest.mark.parametrize(
    "score, level",
    [(100, "Critical"), (75, "Critical"), (74.9, "High"), (50, "High"), (49, "Medium"), (25, "Medium"), (24, "Low"), (0, "Low")],
)
def test_risk_level_thresholds(score, level):
    assert risk_level_for_score(score) == level


def test_priority_order_low_to_urgent():
    assert PRIORITY_ORDER == ["Low", "Medium", "High", "Urgent"]


def test_every_consent_status_has_a_badge_variant():
    assert set(CONSENT_STATUS_VARIANTS) == set(values(ConsentRequestStatus))


def test_empty_bundle_has_schema_columns():
    bundle = DataBundle()
    assert bundle.is_empty
    for name, df in bundle.tables().items():
        assert list(df.columns) == TABLE_COLUMNS[name]
    assert list(empty_table("tasks").columns) == TABLE_COLUMNS["tasks"]


def test_catalog_lookup_and_unknown_check():
    check = catalog.get_check("id_verify_sa")
    assert check.cost == 50
    assert check.consent_required
    assert catalog.get_check("nope") is None
    assert catalog.check_name("nope") == "Unknown Check"


def test_checks_filtered_by_entity_type():
    company = {c.check_id for c in catalog.checks_by_entity_type(EntityType.COMPANY)}
    assert "cipc_company_check" in company
    assert "id_verify_sa" not in company
    medical = catalog.checks_by_entity_type(EntityType.STAFF_MEDICAL)
    assert any(c.category == CheckCategory.MEDICAL for c in medical)


def test_package_totals():
    assert catalog.total_cost(["id_verify_sa", "criminal_record_afis", "credit_check_ind"]) == 320
    assert catalog.max_turnaround(["id_verify_sa", "employment_verify"]) == 5
    assert catalog.max_turnaround([]) == 0
    assert [c.check_id for c in catalog.checks_in_package("missing")] == []
    assert {p.package_id for p in catalog.packages_by_entity_type(EntityType.COMPANY)} == {
        "pkg_basic_supplier",
        "pkg_comprehensive_supplier",
    }


def test_catalog_frame_lists_every_check():
    frame = catalog.catalog_frame()
    assert len(frame) == len(catalog.CHECK_CATALOG)
    assert frame["check_id"].is_unique
