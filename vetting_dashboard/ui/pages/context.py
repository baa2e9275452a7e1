from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from vetting_dashboard.config import Settings
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.risk.scoring import RiskScoringResult


@dataclass
class PageContext:
    raw: DataBundle
    settings: Settings
    as_of: pd.Timestamp
    risk: RiskScoringResult
