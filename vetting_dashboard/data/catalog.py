"""
Catalogue of vetting check definitions and packaged bundles offered to
officers when initiating a case. Costs are in ZAR.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from vetting_dashboard.data.models import CheckCategory, EntityType

IND = EntityType.INDIVIDUAL
COM = EntityType.COMPANY
MED = EntityType.STAFF_MEDICAL


@dataclass(frozen=True)
class CheckDefinition:
    check_id: str
    name: str
    category: CheckCategory
    applicable_to: Tuple[EntityType, ...]
    cost: float
    turnaround_days: int
    consent_required: bool
    provider: str


@dataclass(frozen=True)
class VettingPackage:
    package_id: str
    name: str
    applicable_to: Tuple[EntityType, ...]
    check_ids: Tuple[str, ...]
    discount_pct: float
    popular: bool = False


def _check(check_id, name, category, applicable_to, cost, days, consent, provider) -> CheckDefinition:
    return CheckDefinition(check_id, name, category, tuple(applicable_to), float(cost), days, consent, provider)


CHECK_CATALOG: List[CheckDefinition] = [
    _check("id_verify_sa", "SA ID Verification", CheckCategory.IDENTITY, [IND, MED], 50, 1, True,
           "MIE (Managed Integrity Evaluation)"),
    _check("passport_verify", "Passport Verification", CheckCategory.IDENTITY, [IND, MED], 120, 2, True,
           "International Verification Services"),
    _check("education_verify", "Education Qualification Verification", CheckCategory.IDENTITY, [IND, MED], 200, 3,
           True, "MIE Education Services"),
    _check("employment_verify", "Employment History Verification", CheckCategory.IDENTITY, [IND, MED], 300, 5, True,
           "Reference Check Specialists"),
    _check("criminal_record_afis", "Criminal Record Check (AFIS)", CheckCategory.CRIMINAL, [IND, MED], 150, 2, True,
           "MIE Criminal Services"),
    _check("criminal_record_enhanced", "Enhanced Criminal Record Check", CheckCategory.CRIMINAL, [IND], 300, 5, True,
           "Advanced Criminal Intelligence"),
    _check("watchlist_screening", "Watchlist & Sanctions Screening", CheckCategory.CRIMINAL, [IND, COM], 100, 1, True,
           "LexisNexis Risk Solutions"),
    _check("credit_check_ind", "Individual Credit Report", CheckCategory.FINANCIAL, [IND], 120, 1, True,
           "XDS (Experian)"),
    _check("business_credit_report", "Business Credit Report", CheckCategory.FINANCIAL, [COM], 300, 1, False,
           "CPB (Credit Provider Bureau)"),
    _check("bank_acc_verify_ind", "Individual Bank Account Verification", CheckCategory.FINANCIAL, [IND], 80, 1, True,
           "MIE Banking Services"),
    _check("bank_acc_verify_biz", "Business Bank Account Verification", CheckCategory.FINANCIAL, [COM], 90, 1, True,
           "MIE Banking Services"),
    _check("pep_sanctions_ind", "PEP & Sanctions Screening (Individual)", CheckCategory.COMPLIANCE, [IND, MED], 80, 1,
           True, "LexisNexis WorldCompliance"),
    _check("pep_sanctions_company", "PEP & Sanctions Screening (Company)", CheckCategory.COMPLIANCE, [COM], 150, 1,
           False, "LexisNexis WorldCompliance"),
    _check("vat_verify_sars", "VAT Registration Verification (SARS)", CheckCategory.COMPLIANCE, [COM], 70, 1, False,
           "Internal/SARS Integration"),
    _check("tax_compliance_check", "Tax Compliance Status Check", CheckCategory.COMPLIANCE, [IND, COM], 100, 2, True,
           "SARS Compliance Services"),
    _check("cipc_company_check", "CIPC Company Registration Check", CheckCategory.BUSINESS_SPECIFIC, [COM], 100, 1,
           False, "MIE Business Services"),
    _check("bee_verification", "BEE Certificate Verification", CheckCategory.BUSINESS_SPECIFIC, [COM], 150, 2, False,
           "BEE Verification Agency"),
    _check("professional_licenses", "Professional Licenses Verification", CheckCategory.BUSINESS_SPECIFIC, [IND, COM],
           250, 3, True, "Professional Bodies Verification"),
    _check("physical_loc_verify", "Physical Location Verification", CheckCategory.OPERATIONAL, [COM], 800, 3, False,
           "Field Verification Agents"),
    _check("operational_capacity", "Operational Capacity Assessment", CheckCategory.OPERATIONAL, [COM], 1200, 5, False,
           "Operational Assessment Specialists"),
    _check("media_search_ind", "Media & Internet Search (Individual)", CheckCategory.REPUTATIONAL, [IND], 200, 2, True,
           "Digital Intelligence Specialists"),
    _check("media_search_company", "Media & Internet Search (Company)", CheckCategory.REPUTATIONAL, [COM], 300, 2,
           False, "Digital Intelligence Specialists"),
    _check("lifestyle_audit_ind", "Individual Lifestyle Audit (Basic)", CheckCategory.REPUTATIONAL, [IND], 500, 5, True,
           "Lifestyle Audit Specialists"),
    _check("litigation_search", "Litigation & Legal History Search", CheckCategory.REPUTATIONAL, [IND, COM], 180, 3,
           True, "Legal Research Services"),
    _check("med_fitness_cert", "Certificate of Fitness (Mining)", CheckCategory.MEDICAL, [MED], 600, 2, True,
           "Occupational Health Clinic"),
    _check("chronic_med_history", "Chronic Medication History Review", CheckCategory.MEDICAL, [MED], 250, 3, True,
           "Specialized Medical Reviewer"),
    _check("drug_alcohol_screen", "Drug & Alcohol Screening", CheckCategory.MEDICAL, [MED], 350, 1, True,
           "Pathology Laboratory"),
    _check("psychological_assessment", "Psychological Fitness Assessment", CheckCategory.MEDICAL, [MED], 1200, 5, True,
           "Occupational Psychologist"),
    _check("infectious_disease_screen", "Infectious Disease Screening", CheckCategory.MEDICAL, [MED], 400, 2, True,
           "Pathology Laboratory"),
]

VETTING_PACKAGES: List[VettingPackage] = [
    VettingPackage(
        "pkg_basic_supplier", "Basic Supplier Onboarding", (COM,),
        ("cipc_company_check", "vat_verify_sars", "bank_acc_verify_biz", "business_credit_report"),
        10, popular=True,
    ),
    VettingPackage(
        "pkg_comprehensive_supplier", "Comprehensive Supplier Due Diligence", (COM,),
        (
            "cipc_company_check", "vat_verify_sars", "bank_acc_verify_biz", "business_credit_report",
            "physical_loc_verify", "bee_verification", "media_search_company", "pep_sanctions_company",
        ),
        15,
    ),
    VettingPackage(
        "pkg_basic_individual", "Basic Individual Verification", (IND,),
        ("id_verify_sa", "criminal_record_afis", "credit_check_ind"),
        5, popular=True,
    ),
    VettingPackage(
        "pkg_high_risk_ind", "High-Risk Individual Due Diligence", (IND,),
        (
            "id_verify_sa", "criminal_record_enhanced", "credit_check_ind", "pep_sanctions_ind",
            "lifestyle_audit_ind", "education_verify", "employment_verify",
        ),
        20,
    ),
    VettingPackage(
        "pkg_director_verification", "Director & Key Personnel Verification", (IND,),
        (
            "id_verify_sa", "criminal_record_enhanced", "credit_check_ind", "pep_sanctions_ind",
            "professional_licenses", "litigation_search", "media_search_ind",
        ),
        12, popular=True,
    ),
    VettingPackage(
        "pkg_mining_medical_std", "Standard Mining Staff Medical", (MED,),
        ("id_verify_sa", "med_fitness_cert", "chronic_med_history", "drug_alcohol_screen"),
        8, popular=True,
    ),
    VettingPackage(
        "pkg_mining_medical_comprehensive", "Comprehensive Mining Staff Medical", (MED,),
        (
            "id_verify_sa", "med_fitness_cert", "chronic_med_history", "drug_alcohol_screen",
            "psychological_assessment", "infectious_disease_screen", "criminal_record_afis",
        ),
        15,
    ),
    VettingPackage(
        "pkg_security_clearance", "Security Clearance Package", (IND,),
        (
            "id_verify_sa", "criminal_record_enhanced", "pep_sanctions_ind", "watchlist_screening",
            "lifestyle_audit_ind", "education_verify", "employment_verify", "media_search_ind",
        ),
        18,
    ),
]

_CHECKS_BY_ID: Dict[str, CheckDefinition] = {check.check_id: check for check in CHECK_CATALOG}
_PACKAGES_BY_ID: Dict[str, VettingPackage] = {pkg.package_id: pkg for pkg in VETTING_PACKAGES}


def get_check(check_id: str) -> Optional[CheckDefinition]:
    return _CHECKS_BY_ID.get(check_id)


def get_package(package_id: str) -> Optional[VettingPackage]:
    return _PACKAGES_BY_ID.get(package_id)


def check_name(check_id: str) -> str:
    check = get_check(check_id)
    return check.name if check else "Unknown Check"


def checks_by_entity_type(entity_type: EntityType) -> List[CheckDefinition]:
    return [check for check in CHECK_CATALOG if EntityType(entity_type) in check.applicable_to]


def packages_by_entity_type(entity_type: EntityType) -> List[VettingPackage]:
    return [pkg for pkg in VETTING_PACKAGES if EntityType(entity_type) in pkg.applicable_to]


def checks_in_package(package_id: str) -> List[CheckDefinition]:
    pkg = get_package(package_id)
    if pkg is None:
        return []
    return [check for check in CHECK_CATALOG if check.check_id in pkg.check_ids]


def total_cost(check_ids: Iterable[str]) -> float:
    selected = set(check_ids)
    return float(sum(check.cost for check in CHECK_CATALOG if check.check_id in selected))


def max_turnaround(check_ids: Iterable[str]) -> int:
    selected = set(check_ids)
    return max([check.turnaround_days for check in CHECK_CATALOG if check.check_id in selected] + [0])


def catalog_frame() -> pd.DataFrame:
    """Flat view of the catalogue for tables and CSV export."""
    return pd.DataFrame(
        [
            {
                "check_id": check.check_id,
                "name": check.name,
                "category": check.category.value,
                "applicable_to": ", ".join(e.value for e in check.applicable_to),
                "cost": check.cost,
                "turnaround_days": check.turnaround_days,
                "consent_required": check.consent_required,
                "provider": check.provider,
            }
            for check in CHECK_CATALOG
        ]
    )
