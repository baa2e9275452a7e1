from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict

import pandas as pd

from vetting_dashboard.data.models import TABLE_COLUMNS


def empty_table(name: str) -> pd.DataFrame:
    return pd.DataFrame(columns=TABLE_COLUMNS[name])


@dataclass
class DataBundle:
    """All tables the dashboard renders, keyed by the same names as TABLE_COLUMNS."""

    cases: pd.DataFrame = field(default_factory=lambda: empty_table("cases"))
    case_checks: pd.DataFrame = field(default_factory=lambda: empty_table("case_checks"))
    consents: pd.DataFrame = field(default_factory=lambda: empty_table("consents"))
    reports: pd.DataFrame = field(default_factory=lambda: empty_table("reports"))
    report_checks: pd.DataFrame = field(default_factory=lambda: empty_table("report_checks"))
    tasks: pd.DataFrame = field(default_factory=lambda: empty_table("tasks"))
    schedules: pd.DataFrame = field(default_factory=lambda: empty_table("schedules"))
    schedule_runs: pd.DataFrame = field(default_factory=lambda: empty_table("schedule_runs"))
    feed: pd.DataFrame = field(default_factory=lambda: empty_table("feed"))
    mine_sites: pd.DataFrame = field(default_factory=lambda: empty_table("mine_sites"))
    suppliers: pd.DataFrame = field(default_factory=lambda: empty_table("suppliers"))
    directors: pd.DataFrame = field(default_factory=lambda: empty_table("directors"))
    events: pd.DataFrame = field(default_factory=lambda: empty_table("events"))
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def tables(self) -> Dict[str, pd.DataFrame]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "diagnostics"}

    def row_counts(self) -> Dict[str, int]:
        return {name: int(len(df)) for name, df in self.tables().items()}

    def with_tables(self, **tables: pd.DataFrame) -> "DataBundle":
        return replace(self, **tables)

    @property
    def is_empty(self) -> bool:
        return self.cases.empty and self.consents.empty and self.reports.empty
