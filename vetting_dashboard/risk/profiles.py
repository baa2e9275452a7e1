"""
Supplier and director risk profiles used by the executive risk views,
plus the mine sites and strategic events they are linked to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from vetting_dashboard.data.models import (
    DIRECTOR_COLUMNS,
    EVENT_COLUMNS,
    MINE_SITE_COLUMNS,
    SUPPLIER_COLUMNS,
    EventSeverity,
)

RISK_FACTOR_KEYS = ("operational", "financial", "compliance", "reputational", "contractual")
GEO_RISK_LEVELS = ("low", "medium", "high")
COMPLIANCE_HISTORIES = ("clean", "minor", "major")


@dataclass(frozen=True)
class RiskFactors:
    operational: float
    financial: float
    compliance: float
    reputational: float
    contractual: float

    def as_dict(self) -> Dict[str, float]:
        return {key: getattr(self, key) for key in RISK_FACTOR_KEYS}


@dataclass(frozen=True)
class SupplierProfile:
    supplier_id: str
    name: str
    factors: RiskFactors
    contract_value: float
    director_ids: Tuple[str, ...]
    category: str
    geographic_risk: str
    linked_mine_site_ids: Tuple[str, ...]
    coordinates: Tuple[float, float] = (float("nan"), float("nan"))


@dataclass(frozen=True)
class DirectorProfile:
    director_id: str
    name: str
    board_positions: Tuple[str, ...]
    years_experience: float
    has_adverse_media: bool
    compliance_history: str = "clean"


@dataclass(frozen=True)
class MineSite:
    mine_site_id: str
    name: str
    province: str
    coordinates: Tuple[float, float]
    metals: Tuple[str, ...]
    aggregated_risk_score: float
    active_suppliers: int


@dataclass(frozen=True)
class StrategicEvent:
    event_id: str
    hours_ago: float
    title: str
    description: str
    severity: EventSeverity
    related_entity_ids: Tuple[str, ...] = field(default_factory=tuple)
    action_label: str = "View Details"
    action_type: str = "DRILL_DOWN"


def _supplier(sid, name, factors, value, directors, category, geo, sites, coords) -> SupplierProfile:
    return SupplierProfile(
        supplier_id=sid,
        name=name,
        factors=RiskFactors(*factors),
        contract_value=float(value),
        director_ids=tuple(directors),
        category=category,
        geographic_risk=geo,
        linked_mine_site_ids=tuple(sites),
        coordinates=coords,
    )


DIRECTOR_PROFILES: List[DirectorProfile] = [
    DirectorProfile("DIR_01", "Jabulani Zuma", ("SUP_101", "SUP_104"), 12, True, "minor"),
    DirectorProfile("DIR_02", "Pieter van der Merwe", ("SUP_102", "SUP_105"), 18, False, "clean"),
    DirectorProfile("DIR_03", "Naledi Molefe", ("SUP_201", "SUP_203"), 8, False, "clean"),
    DirectorProfile("DIR_04", "Sipho Ndlovu", ("SUP_101", "SUP_102", "SUP_103", "SUP_104"), 15, True, "minor"),
    DirectorProfile("DIR_05", "Liam O'Connell", ("SUP_105", "SUP_202"), 22, False, "clean"),
    DirectorProfile("DIR_06", "Fatima Khan", ("SUP_201", "SUP_202", "SUP_203"), 10, False, "clean"),
    DirectorProfile("DIR_07", "Thabo Mthembu", ("SUP_301", "SUP_303"), 14, False, "clean"),
    DirectorProfile("DIR_08", "Sarah Mitchell", ("SUP_302", "SUP_303"), 16, False, "clean"),
    DirectorProfile("DIR_09", "Ahmed Hassan", ("SUP_401",), 6, False, "clean"),
    DirectorProfile("DIR_10", "Nomsa Dlamini", ("SUP_402",), 9, False, "clean"),
]

# factors: operational, financial, compliance, reputational, contractual
SUPPLIER_PROFILES: List[SupplierProfile] = [
    _supplier("SUP_101", "Rustenburg Explosives Inc.", (90, 65, 85, 70, 60), 50_000_000,
              ("DIR_01", "DIR_04"), "Explosives & Chemicals", "high", ("MS_01", "MS_02"), (-25.6, 27.3)),
    _supplier("SUP_102", "Marikana Heavy Machinery Lease", (70, 80, 65, 85, 70), 75_000_000,
              ("DIR_02", "DIR_04"), "Heavy Machinery", "high", ("MS_01", "MS_02"), (-25.7, 27.5)),
    _supplier("SUP_103", "Limpopo Logistix", (85, 60, 70, 50, 65), 30_000_000,
              ("DIR_04", "DIR_06"), "Logistics & Transportation", "high", ("MS_01", "MS_03"), (-25.5, 27.6)),
    _supplier("SUP_104", "North West Mining Supplies", (75, 65, 80, 55, 70), 45_000_000,
              ("DIR_01", "DIR_04"), "Mining Supplies", "high", ("MS_01", "MS_02"), (-25.75, 27.35)),
    _supplier("SUP_105", "Platinum Province Chemicals", (80, 70, 90, 60, 65), 65_000_000,
              ("DIR_02", "DIR_05"), "Chemicals", "high", ("MS_01", "MS_02"), (-25.68, 27.42)),
    _supplier("SUP_201", "Gauteng Gold Refiners", (60, 55, 65, 70, 50), 120_000_000,
              ("DIR_03", "DIR_06"), "Gold Refining", "medium", ("MS_03", "MS_04"), (-26.3, 27.5)),
    _supplier("SUP_202", "West Rand Water Purification", (45, 50, 55, 40, 45), 25_000_000,
              ("DIR_05", "DIR_06"), "Water Treatment", "medium", ("MS_03", "MS_04"), (-26.45, 27.4)),
    _supplier("SUP_203", "Johannesburg Engineering Services", (40, 45, 50, 35, 40), 85_000_000,
              ("DIR_03", "DIR_06"), "Engineering Services", "medium", ("MS_03", "MS_04"), (-26.35, 27.55)),
    _supplier("SUP_301", "Welkom Safety Gear Pty Ltd", (20, 25, 30, 15, 20), 15_000_000,
              ("DIR_07",), "Safety Equipment", "low", ("MS_05",), (-28.2, 26.8)),
    _supplier("SUP_302", "Free State Catering Co.", (25, 30, 20, 25, 25), 8_000_000,
              ("DIR_08",), "Catering Services", "low", ("MS_05",), (-28.3, 26.7)),
    _supplier("SUP_303", "Free State Transportation Hub", (35, 30, 25, 20, 30), 18_000_000,
              ("DIR_07", "DIR_08"), "Transportation", "low", ("MS_05",), (-28.15, 26.85)),
    _supplier("SUP_401", "Cape Town Tech Solutions", (40, 35, 30, 25, 35), 22_000_000,
              ("DIR_09",), "IT Services", "medium", ("MS_06",), (-26.2, 27.8)),
    _supplier("SUP_402", "Independent Security Services", (55, 45, 60, 40, 50), 38_000_000,
              ("DIR_10",), "Security Services", "medium", ("MS_06",), (-25.9, 27.7)),
]

MINE_SITES: List[MineSite] = [
    MineSite("MS_01", "Marikana Operations", "North West", (-25.688, 27.489),
             ("Platinum", "Palladium", "Rhodium"), 72.5, 124),
    MineSite("MS_02", "Rustenburg Operations", "North West", (-25.66, 27.24), ("Platinum", "Palladium"), 61.0, 210),
    MineSite("MS_03", "Driefontein Operations", "Gauteng", (-26.40, 27.49), ("Gold",), 45.5, 180),
    MineSite("MS_04", "Kloof Operations", "Gauteng", (-26.41, 27.61), ("Gold",), 38.0, 155),
    MineSite("MS_05", "Beatrix Operations", "Free State", (-28.25, 26.78), ("Gold",), 25.0, 95),
]

STRATEGIC_EVENTS: List[StrategicEvent] = [
    StrategicEvent(
        "EVT_001", 0, "CRITICAL: Director Concentration Risk",
        "Director Sipho Ndlovu (DIR_04) sits on four high-risk supplier boards in the North West "
        "cluster, concentrating operational exposure on a single individual.",
        EventSeverity.CRITICAL, ("DIR_04", "SUP_101", "SUP_102", "SUP_103", "SUP_104"),
        "View Network Impact",
    ),
    StrategicEvent(
        "EVT_002", 2, "Compliance Failure Cascade",
        "Five key suppliers for Marikana Operations, including Marikana Heavy Machinery Lease, "
        "have B-BBEE certificates expiring this week.",
        EventSeverity.HIGH, ("MS_01", "SUP_102"), "Request Portfolio Review", "INITIATE_REVIEW",
    ),
    StrategicEvent(
        "EVT_003", 24, "Adverse Media Finding",
        "An international news outlet has flagged Gauteng Gold Refiners in a report on sourcing practices.",
        EventSeverity.HIGH, ("SUP_201",), "View Supplier Profile",
    ),
    StrategicEvent(
        "EVT_004", 48, "Financial Anomaly",
        "Invoices from West Rand Water Purification show a 40% cost increase over the last quarter "
        "with no corresponding change in scope.",
        EventSeverity.MEDIUM, ("SUP_202",), "View Financials",
    ),
    StrategicEvent(
        "EVT_005", 72, "Positive Compliance Update",
        "Welkom Safety Gear Pty Ltd completed its annual post-vetting review.",
        EventSeverity.INFORMATIONAL, ("SUP_301",), "View Report",
    ),
]


def suppliers_frame(profiles: Sequence[SupplierProfile] = SUPPLIER_PROFILES) -> pd.DataFrame:
    rows = []
    for profile in profiles:
        rows.append(
            {
                "supplier_id": profile.supplier_id,
                "name": profile.name,
                "category": profile.category,
                "latitude": profile.coordinates[0],
                "longitude": profile.coordinates[1],
                "contract_value": profile.contract_value,
                "director_ids": list(profile.director_ids),
                "linked_mine_site_ids": list(profile.linked_mine_site_ids),
                "geographic_risk": profile.geographic_risk,
                **profile.factors.as_dict(),
            }
        )
    return pd.DataFrame(rows, columns=SUPPLIER_COLUMNS)


def directors_frame(profiles: Sequence[DirectorProfile] = DIRECTOR_PROFILES) -> pd.DataFrame:
    rows = [
        {
            "director_id": profile.director_id,
            "name": profile.name,
            "board_positions": list(profile.board_positions),
            "years_experience": profile.years_experience,
            "has_adverse_media": profile.has_adverse_media,
            "compliance_history": profile.compliance_history,
        }
        for profile in profiles
    ]
    return pd.DataFrame(rows, columns=DIRECTOR_COLUMNS)


def mine_sites_frame(sites: Sequence[MineSite] = MINE_SITES) -> pd.DataFrame:
    rows = [
        {
            "mine_site_id": site.mine_site_id,
            "name": site.name,
            "province": site.province,
            "latitude": site.coordinates[0],
            "longitude": site.coordinates[1],
            "metals": list(site.metals),
            "aggregated_risk_score": site.aggregated_risk_score,
            "active_suppliers": site.active_suppliers,
        }
        for site in sites
    ]
    return pd.DataFrame(rows, columns=MINE_SITE_COLUMNS)


def events_frame(as_of: pd.Timestamp, events: Sequence[StrategicEvent] = STRATEGIC_EVENTS) -> pd.DataFrame:
    rows = [
        {
            "event_id": event.event_id,
            "timestamp": as_of - pd.Timedelta(hours=event.hours_ago),
            "title": event.title,
            "description": event.description,
            "severity": event.severity.value,
            "related_entity_ids": list(event.related_entity_ids),
            "action_label": event.action_label,
            "action_type": event.action_type,
        }
        for event in events
    ]
    return pd.DataFrame(rows, columns=EVENT_COLUMNS)


def supplier_profiles_from_frame(df: pd.DataFrame) -> List[SupplierProfile]:
    profiles = []
    for row in df.to_dict("records"):
        profiles.append(
            SupplierProfile(
                supplier_id=str(row["supplier_id"]),
                name=str(row.get("name") or row["supplier_id"]),
                factors=RiskFactors(*(float(row.get(key) or 0) for key in RISK_FACTOR_KEYS)),
                contract_value=float(row.get("contract_value") or 0),
                director_ids=tuple(row.get("director_ids") or ()),
                category=str(row.get("category") or ""),
                geographic_risk=str(row.get("geographic_risk") or "low").lower(),
                linked_mine_site_ids=tuple(row.get("linked_mine_site_ids") or ()),
                coordinates=(row.get("latitude"), row.get("longitude")),
            )
        )
    return profiles


def director_profiles_from_frame(df: pd.DataFrame) -> List[DirectorProfile]:
    profiles = []
    for row in df.to_dict("records"):
        profiles.append(
            DirectorProfile(
                director_id=str(row["director_id"]),
                name=str(row.get("name") or row["director_id"]),
                board_positions=tuple(row.get("board_positions") or ()),
                years_experience=float(row.get("years_experience") or 0),
                has_adverse_media=bool(row.get("has_adverse_media")),
                compliance_history=str(row.get("compliance_history") or "clean").lower(),
            )
        )
    return profiles
