"""
Risk scoring engine for the executive dashboard.

Supplier scores combine weighted base risk factors with geographic and
contract value multipliers, director concentration penalties and network
effects. Director scores are derived from the suppliers whose boards they
sit on plus their personal risk factors. All scores are clamped to 0-100
and rounded half up.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from vetting_dashboard.data.models import risk_level_for_score
from vetting_dashboard.risk.profiles import (
    RISK_FACTOR_KEYS,
    DirectorProfile,
    RiskFactors,
    SupplierProfile,
    director_profiles_from_frame,
    supplier_profiles_from_frame,
)

CONCENTRATION_BOARD_THRESHOLD = 3
HIGH_RISK_SCORE = 50


@dataclass(frozen=True)
class RiskScoringConfig:
    base_weights: Mapping[str, float] = field(
        default_factory=lambda: {
            "operational": 0.25,
            "financial": 0.20,
            "compliance": 0.25,
            "reputational": 0.15,
            "contractual": 0.15,
        }
    )
    # board count -> penalty; the highest key applies to anything above it
    concentration_penalties: Mapping[int, float] = field(default_factory=lambda: {2: 5, 3: 12, 4: 20})
    shared_director_multiplier: float = 1.1
    geographic_concentration_multiplier: float = 1.15
    geographic_concentration_threshold: int = 2
    # (exclusive lower bound, multiplier), checked in order
    contract_value_tiers: Tuple[Tuple[float, float], ...] = ((100_000_000, 1.1), (50_000_000, 1.05))
    default_contract_multiplier: float = 1.0
    geographic_multipliers: Mapping[str, float] = field(
        default_factory=lambda: {"low": 1.0, "medium": 1.05, "high": 1.15}
    )
    adverse_media_penalty: float = 8
    compliance_history_penalties: Mapping[str, float] = field(
        default_factory=lambda: {"clean": 0, "minor": 3, "major": 10}
    )
    experience_bonus_per_year: float = -0.5
    experience_cap_years: float = 10
    high_risk_supplier_base: float = 60
    high_risk_supplier_step: float = 0.15
    high_geo_director_multiplier: float = 1.1


DEFAULT_RISK_CONFIG = RiskScoringConfig()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


class RiskScoringEngine:
    def __init__(
        self,
        suppliers: Sequence[SupplierProfile],
        directors: Sequence[DirectorProfile],
        config: Optional[RiskScoringConfig] = None,
    ) -> None:
        self.config = config or DEFAULT_RISK_CONFIG
        self.suppliers: Dict[str, SupplierProfile] = {s.supplier_id: s for s in suppliers}
        self.directors: Dict[str, DirectorProfile] = {d.director_id: d for d in directors}

    @classmethod
    def from_frames(
        cls,
        suppliers: pd.DataFrame,
        directors: pd.DataFrame,
        config: Optional[RiskScoringConfig] = None,
    ) -> "RiskScoringEngine":
        return cls(supplier_profiles_from_frame(suppliers), director_profiles_from_frame(directors), config)

    def with_config(self, **overrides: Any) -> "RiskScoringEngine":
        """Return a new engine with selected config fields replaced."""
        return RiskScoringEngine(
            list(self.suppliers.values()),
            list(self.directors.values()),
            replace(self.config, **overrides),
        )

    # ─── building blocks ──────────────────────────────────────────

    def base_risk(self, factors: RiskFactors) -> float:
        weights = self.config.base_weights
        return sum(getattr(factors, key) * weights.get(key, 0) for key in RISK_FACTOR_KEYS)

    def concentration_penalty(self, board_count: int) -> float:
        penalties = self.config.concentration_penalties
        if not penalties or board_count < min(penalties):
            return 0
        eligible = [count for count in penalties if count <= board_count]
        return penalties[max(eligible)]

    def contract_multiplier(self, contract_value: float) -> float:
        for lower_bound, multiplier in self.config.contract_value_tiers:
            if contract_value > lower_bound:
                return multiplier
        return self.config.default_contract_multiplier

    def geographic_multiplier(self, geographic_risk: str) -> float:
        return self.config.geographic_multipliers.get(geographic_risk, 1.0)

    def shared_director_count(self, supplier: SupplierProfile) -> int:
        directors = set(supplier.director_ids)
        return sum(
            1
            for other in self.suppliers.values()
            if other.supplier_id != supplier.supplier_id and directors.intersection(other.director_ids)
        )

    def network_multiplier(self, supplier: SupplierProfile) -> float:
        multiplier = 1.0
        if self.shared_director_count(supplier) > 0:
            multiplier *= self.config.shared_director_multiplier

        sites = set(supplier.linked_mine_site_ids)
        same_region = sum(
            1
            for other in self.suppliers.values()
            if other.supplier_id != supplier.supplier_id
            and other.geographic_risk == supplier.geographic_risk
            and sites.intersection(other.linked_mine_site_ids)
        )
        if same_region > self.config.geographic_concentration_threshold:
            multiplier *= self.config.geographic_concentration_multiplier
        return multiplier

    def personal_penalty(self, director: DirectorProfile) -> float:
        penalty = 0.0
        if director.has_adverse_media:
            penalty += self.config.adverse_media_penalty
        penalty += self.config.compliance_history_penalties.get(director.compliance_history, 0)
        experience = min(director.years_experience, self.config.experience_cap_years)
        penalty += experience * self.config.experience_bonus_per_year
        return penalty

    def _supplier(self, supplier_id: str) -> SupplierProfile:
        try:
            return self.suppliers[supplier_id]
        except KeyError:
            raise KeyError(f"Supplier {supplier_id} not found") from None

    def _director(self, director_id: str) -> DirectorProfile:
        try:
            return self.directors[director_id]
        except KeyError:
            raise KeyError(f"Director {director_id} not found") from None

    def _supplier_directors(self, supplier: SupplierProfile) -> List[DirectorProfile]:
        return [self.directors[d] for d in supplier.director_ids if d in self.directors]

    # ─── scores ───────────────────────────────────────────────────

    def _supplier_components(self, supplier: SupplierProfile) -> Dict[str, float]:
        directors = self._supplier_directors(supplier)
        return {
            "base_risk": self.base_risk(supplier.factors),
            "geographic_multiplier": self.geographic_multiplier(supplier.geographic_risk),
            "contract_multiplier": self.contract_multiplier(supplier.contract_value),
            "concentration_penalty": sum(self.concentration_penalty(len(d.board_positions)) for d in directors),
            "network_multiplier": self.network_multiplier(supplier),
            "director_penalties": sum(self.personal_penalty(d) for d in directors),
        }

    def supplier_risk(self, supplier_id: str) -> int:
        parts = self._supplier_components(self._supplier(supplier_id))
        score = parts["base_risk"] * parts["geographic_multiplier"] * parts["contract_multiplier"]
        score += parts["concentration_penalty"]
        score *= parts["network_multiplier"]
        score += parts["director_penalties"]
        return clamp_score(score)

    def director_suppliers(self, director_id: str) -> List[SupplierProfile]:
        return [s for s in self.suppliers.values() if director_id in s.director_ids]

    def director_risk(self, director_id: str) -> int:
        director = self._director(director_id)
        associated = self.director_suppliers(director_id)
        bases = [self.base_risk(s.factors) for s in associated]
        score = sum(bases) / len(bases) if bases else 0.0

        score += self.concentration_penalty(len(director.board_positions))

        high_risk = [b for b in bases if b > self.config.high_risk_supplier_base]
        if len(high_risk) > 1:
            score *= 1 + (len(high_risk) - 1) * self.config.high_risk_supplier_step

        score *= self.contract_multiplier(sum(s.contract_value for s in associated))
        score += self.personal_penalty(director)

        regions = {s.geographic_risk for s in associated}
        if regions == {"high"}:
            score *= self.config.high_geo_director_multiplier
        return clamp_score(score)

    def all_scores(self) -> Dict[str, Dict[str, int]]:
        return {
            "suppliers": {sid: self.supplier_risk(sid) for sid in self.suppliers},
            "directors": {did: self.director_risk(did) for did in self.directors},
        }

    @staticmethod
    def risk_level(score: float) -> str:
        return risk_level_for_score(score)

    def concentration_risks(self) -> Dict[str, List[Dict[str, Any]]]:
        directors = [
            {
                "director_id": d.director_id,
                "name": d.name,
                "board_count": len(d.board_positions),
                "risk_score": self.director_risk(d.director_id),
            }
            for d in self.directors.values()
            if len(d.board_positions) >= CONCENTRATION_BOARD_THRESHOLD
        ]
        suppliers = [
            {
                "supplier_id": s.supplier_id,
                "name": s.name,
                "shared_director_count": self.shared_director_count(s),
                "risk_score": self.supplier_risk(s.supplier_id),
            }
            for s in self.suppliers.values()
        ]
        suppliers = [s for s in suppliers if s["shared_director_count"] > 0]
        directors.sort(key=lambda item: item["risk_score"], reverse=True)
        suppliers.sort(key=lambda item: item["risk_score"], reverse=True)
        return {"directors": directors, "suppliers": suppliers}

    def supplier_breakdown(self, supplier_id: str) -> Dict[str, float]:
        supplier = self._supplier(supplier_id)
        parts = self._supplier_components(supplier)
        parts["base_risk"] = round_half_up(parts["base_risk"])
        parts["final_score"] = self.supplier_risk(supplier_id)
        return parts


@dataclass
class RiskScoringResult:
    suppliers: pd.DataFrame
    directors: pd.DataFrame
    concentration: Dict[str, List[Dict[str, Any]]]
    summary: Dict[str, Any]


def apply_risk_scoring(
    suppliers: pd.DataFrame,
    directors: pd.DataFrame,
    config: Optional[RiskScoringConfig] = None,
) -> RiskScoringResult:
    """Score every supplier and director and attach level and breakdown columns."""
    engine = RiskScoringEngine.from_frames(suppliers, directors, config)

    scored_suppliers = suppliers.copy()
    breakdowns = [engine.supplier_breakdown(sid) for sid in scored_suppliers["supplier_id"].astype(str)]
    scored_suppliers["risk_score"] = [b["final_score"] for b in breakdowns]
    scored_suppliers["risk_level"] = scored_suppliers["risk_score"].apply(risk_level_for_score)
    for key in ("base_risk", "concentration_penalty", "network_multiplier", "geographic_multiplier",
                "contract_multiplier", "director_penalties"):
        scored_suppliers[key] = [b[key] for b in breakdowns]
    scored_suppliers["shared_director_count"] = [
        engine.shared_director_count(engine.suppliers[sid]) for sid in scored_suppliers["supplier_id"].astype(str)
    ]

    scored_directors = directors.copy()
    scored_directors["risk_score"] = [
        engine.director_risk(did) for did in scored_directors["director_id"].astype(str)
    ]
    scored_directors["risk_level"] = scored_directors["risk_score"].apply(risk_level_for_score)
    scored_directors["board_count"] = scored_directors["board_positions"].apply(lambda v: len(v or []))
    scored_directors["is_concentration_risk"] = scored_directors["board_count"] >= CONCENTRATION_BOARD_THRESHOLD

    summary = {
        "total_suppliers": int(len(scored_suppliers)),
        "total_directors": int(len(scored_directors)),
        "high_risk_suppliers": int((scored_suppliers["risk_score"] >= HIGH_RISK_SCORE).sum()),
        "concentration_risk_directors": int(scored_directors["is_concentration_risk"].sum()),
        "avg_supplier_risk": round_half_up(scored_suppliers["risk_score"].mean()) if len(scored_suppliers) else None,
        "avg_director_risk": round_half_up(scored_directors["risk_score"].mean()) if len(scored_directors) else None,
    }
    return RiskScoringResult(
        suppliers=scored_suppliers,
        directors=scored_directors,
        concentration=engine.concentration_risks(),
        summary=summary,
    )


def generate_risk_report(result: RiskScoringResult, generated_at: pd.Timestamp, top_n: int = 10) -> str:
    """Render the scoring result as a Markdown report."""
    summary = result.summary
    lines = [
        "# EXECUTIVE RISK SCORING REPORT",
        f"Generated: {pd.Timestamp(generated_at).isoformat()}",
        "",
        "## SUMMARY STATISTICS",
        f"- Total Suppliers: {summary['total_suppliers']}",
        f"- Total Directors: {summary['total_directors']}",
        f"- High Risk Suppliers (≥{HIGH_RISK_SCORE}%): {summary['high_risk_suppliers']}",
        f"- Concentration Risk Directors (≥{CONCENTRATION_BOARD_THRESHOLD} boards): "
        f"{summary['concentration_risk_directors']}",
        f"- Average Supplier Risk: {summary['avg_supplier_risk']}%",
        f"- Average Director Risk: {summary['avg_director_risk']}%",
        "",
        "## TOP RISK DIRECTORS (Concentration Risk)",
    ]
    concentrated = result.directors[result.directors["is_concentration_risk"]]
    for row in concentrated.sort_values("risk_score", ascending=False).to_dict("records"):
        lines += [
            "",
            f"### {row['name']} ({row['director_id']})",
            f"- Risk Score: {row['risk_score']}% ({row['risk_level']})",
            f"- Board Positions: {row['board_count']}",
            "- Concentration Risk: YES",
        ]

    lines += ["", "## TOP RISK SUPPLIERS"]
    top = result.suppliers.sort_values("risk_score", ascending=False).head(top_n)
    for row in top.to_dict("records"):
        lines += [
            "",
            f"### {row['name']} ({row['supplier_id']})",
            f"- Risk Score: {row['risk_score']}% ({row['risk_level']})",
            f"- Base Risk: {row['base_risk']}%",
            f"- Concentration Penalty: +{row['concentration_penalty']:g}",
            f"- Network Multiplier: {row['network_multiplier']:.3g}x",
            f"- Geographic Multiplier: {row['geographic_multiplier']:g}x",
        ]
    return "\n".join(lines) + "\n"
