"""
Vetting cost and turnaround calculator used by the calculator page to price a
selection of checks and draft a new case from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from vetting_dashboard.data import catalog
from vetting_dashboard.data.catalog import CheckDefinition
from vetting_dashboard.data.models import CheckCategory, EntityType, VettingStatus

# Coverage contributed by each selected check, per category
CATEGORY_WEIGHTS: Dict[CheckCategory, int] = {
    CheckCategory.CRIMINAL: 40,
    CheckCategory.FINANCIAL: 30,
    CheckCategory.IDENTITY: 20,
    CheckCategory.COMPLIANCE: 10,
    CheckCategory.OPERATIONAL: 15,
    CheckCategory.REPUTATIONAL: 25,
    CheckCategory.MEDICAL: 35,
    CheckCategory.BUSINESS_SPECIFIC: 20,
}

REQUIRED_CHECKS: Dict[EntityType, tuple] = {
    EntityType.INDIVIDUAL: ("id_verify_sa",),
    EntityType.STAFF_MEDICAL: ("id_verify_sa",),
    EntityType.COMPANY: ("cipc_company_check",),
}

CRIMINAL_CHECKS = ("criminal_record_afis", "criminal_record_enhanced")
CREDIT_CHECKS = ("credit_check_ind",)
TAX_CHECKS = ("tax_compliance_check",)


@dataclass(frozen=True)
class CalculatorResult:
    total_cost: float
    total_turnaround_days: int
    selected_checks: List[CheckDefinition]
    coverage_score: int
    risk_profile: str
    compliance_score: float


def available_checks(entity_type: str) -> List[CheckDefinition]:
    return catalog.checks_by_entity_type(EntityType(entity_type))


def required_check_ids(entity_type: str) -> List[str]:
    return list(REQUIRED_CHECKS.get(EntityType(entity_type), ()))


def calculate(check_ids: Iterable[str]) -> Optional[CalculatorResult]:
    """Price a selection. Returns None for an empty (or entirely unknown) selection."""
    selected_ids = set(check_ids)
    selected = [check for check in catalog.CHECK_CATALOG if check.check_id in selected_ids]
    if not selected:
        return None

    coverage = sum(CATEGORY_WEIGHTS.get(check.category, 0) for check in selected)
    if coverage >= 70:
        profile = "Low"
    elif coverage <= 30:
        profile = "High"
    else:
        profile = "Medium"

    return CalculatorResult(
        total_cost=float(sum(check.cost for check in selected)),
        total_turnaround_days=max(check.turnaround_days for check in selected),
        selected_checks=selected,
        coverage_score=coverage,
        risk_profile=profile,
        compliance_score=float(min(100, coverage)),
    )


def package_cost(package_id: str) -> Dict[str, float]:
    """List price, discount and discounted price of a package."""
    package = catalog.get_package(package_id)
    if package is None:
        raise KeyError(f"Package {package_id} not found")
    list_price = catalog.total_cost(package.check_ids)
    discount = round(list_price * package.discount_pct / 100, 2)
    return {
        "list_price": list_price,
        "discount": discount,
        "price": round(list_price - discount, 2),
        "turnaround_days": float(catalog.max_turnaround(package.check_ids)),
    }


def toggle_check(selected: Sequence[str], check_id: str, entity_type: str) -> List[str]:
    """Add or remove a check; required checks always stay selected."""
    current = list(selected)
    if check_id in required_check_ids(entity_type):
        return current
    if check_id in current:
        return [c for c in current if c != check_id]
    return current + [check_id]


def select_all(entity_type: str) -> List[str]:
    return [check.check_id for check in available_checks(entity_type)]


def clear_selection(entity_type: str) -> List[str]:
    return required_check_ids(entity_type)


def recommendations(entity_type: str, selected: Iterable[str]) -> List[str]:
    chosen = set(selected)
    entity = EntityType(entity_type)
    suggestions: List[str] = []
    if entity == EntityType.INDIVIDUAL:
        if not chosen.intersection(CRIMINAL_CHECKS):
            suggestions.append("Consider adding Criminal Record Check for comprehensive screening")
        if not chosen.intersection(CREDIT_CHECKS):
            suggestions.append("Financial verification recommended for positions involving money handling")
    if entity == EntityType.COMPANY:
        if not chosen.intersection(TAX_CHECKS):
            suggestions.append("SARS Tax Compliance check recommended for all business entities")
    return suggestions


def draft_case(entity_type: str, result: Optional[CalculatorResult], as_of: pd.Timestamp) -> Dict[str, Any]:
    """Skeleton case record for the current selection; empty when nothing is priced."""
    if result is None:
        return {}
    return {
        "entity_type": EntityType(entity_type).value,
        "total_estimated_cost": result.total_cost,
        "estimated_completion_date": as_of + pd.Timedelta(days=result.total_turnaround_days),
        "status": VettingStatus.INITIATED.value,
        "overall_progress": 0,
        "completed_checks": 0,
        "total_checks": len(result.selected_checks),
    }


def export_configuration(entity_type: str, selected: Iterable[str], as_of: pd.Timestamp) -> Dict[str, Any]:
    result = calculate(selected)
    return {
        "entity_type": EntityType(entity_type).value,
        "selected_checks": sorted(set(selected)),
        "result": None if result is None else {
            "total_cost": result.total_cost,
            "total_turnaround_days": result.total_turnaround_days,
            "risk_profile": result.risk_profile,
            "compliance_score": result.compliance_score,
        },
        "timestamp": as_of.isoformat(),
    }


def import_configuration(config: Dict[str, Any], entity_type: str) -> List[str]:
    """Selection from an exported configuration, keeping only checks valid for the entity type."""
    raw = config.get("selected_checks")
    if not isinstance(raw, list):
        return clear_selection(entity_type)
    allowed = {check.check_id for check in available_checks(entity_type)}
    chosen = [str(c) for c in raw if str(c) in allowed]
    for required in required_check_ids(entity_type):
        if required not in chosen:
            chosen.insert(0, required)
    return chosen
