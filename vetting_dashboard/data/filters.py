"""
Filter utilities that apply per-page filters, sorting and pagination to the
dashboard tables.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from vetting_dashboard.logger import get_logger

logger = get_logger()

ALL = "all"


@dataclass
class CaseFilters:
    search: str = ""
    status: str = ALL  # a VettingStatus value, "overdue" or "all"
    priority: str = ALL
    entity_type: str = ALL


@dataclass
class ConsentFilters:
    search: str = ""
    status: str = ALL
    channel: str = ALL
    entity_type: str = ALL
    show_expired_only: bool = False


@dataclass
class ReportFilters:
    search: str = ""
    risk_level: str = ALL
    report_status: str = ALL
    entity_type: str = ALL
    date_range: Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]] = (None, None)


@dataclass
class TaskFilters:
    search: str = ""
    types: List[str] = field(default_factory=list)
    priorities: List[str] = field(default_factory=list)
    statuses: List[str] = field(default_factory=list)


@dataclass
class ScheduleFilters:
    search: str = ""
    status: str = ALL
    frequency: str = ALL
    entity_type: str = ALL
    overdue_only: bool = False
    upcoming_only: bool = False


@dataclass
class SortState:
    key: Optional[str] = None
    ascending: bool = True

    def toggle(self, key: str) -> "SortState":
        """Same key flips direction; a new key starts ascending."""
        if key == self.key:
            return SortState(key, not self.ascending)
        return SortState(key, True)


def _search_mask(df: pd.DataFrame, query: str, columns: Iterable[str]) -> pd.Series:
    needle = query.strip().lower()
    mask = pd.Series(False, index=df.index)
    for col in columns:
        if col in df.columns:
            mask |= df[col].fillna("").astype(str).str.lower().str.contains(needle, regex=False)
    return mask


def _equals(df: pd.DataFrame, column: str, value: str) -> pd.DataFrame:
    if value and value != ALL and column in df.columns:
        return df[df[column] == value]
    return df


def _apply_search(df: pd.DataFrame, query: str, columns: Iterable[str]) -> pd.DataFrame:
    if query and query.strip():
        return df[_search_mask(df, query, columns)]
    return df


def filter_cases(df: pd.DataFrame, filters: CaseFilters) -> pd.DataFrame:
    if df.empty:
        return df
    filtered = _apply_search(df, filters.search, ["case_number", "entity_name", "assigned_officer"])
    if filters.status == "overdue":
        filtered = filtered[filtered["is_overdue"].astype(bool)]
    else:
        filtered = _equals(filtered, "status", filters.status)
    filtered = _equals(filtered, "priority", filters.priority)
    filtered = _equals(filtered, "entity_type", filters.entity_type)
    logger.filters_applied("cases", serialize_filters(filters), len(df), len(filtered))
    return filtered


def filter_consents(df: pd.DataFrame, filters: ConsentFilters) -> pd.DataFrame:
    if df.empty:
        return df
    filtered = _apply_search(df, filters.search, ["consent_id", "subject_name", "subject_id", "vetting_case_id"])
    filtered = _equals(filtered, "status", filters.status)
    filtered = _equals(filtered, "channel", filters.channel)
    filtered = _equals(filtered, "entity_type", filters.entity_type)
    if filters.show_expired_only and "is_expired" in filtered:
        filtered = filtered[filtered["is_expired"].astype(bool)]
    logger.filters_applied("consents", serialize_filters(filters), len(df), len(filtered))
    return filtered


def filter_reports(df: pd.DataFrame, filters: ReportFilters) -> pd.DataFrame:
    if df.empty:
        return df
    filtered = _apply_search(df, filters.search, ["report_id", "vetting_case_id", "subject_name", "subject_id"])
    filtered = _equals(filtered, "overall_risk_level", filters.risk_level)
    filtered = _equals(filtered, "report_status", filters.report_status)
    filtered = _equals(filtered, "entity_type", filters.entity_type)

    start, end = filters.date_range
    if start is not None:
        filtered = filtered[filtered["completion_date"] >= start]
    if end is not None:
        filtered = filtered[filtered["completion_date"] <= end]
    logger.filters_applied("reports", serialize_filters(filters), len(df), len(filtered))
    return filtered


def filter_tasks(df: pd.DataFrame, filters: TaskFilters) -> pd.DataFrame:
    if df.empty:
        return df
    filtered = _apply_search(df, filters.search, ["subject_name", "description", "task_id"])
    if filters.types:
        filtered = filtered[filtered["type"].isin(filters.types)]
    if filters.priorities:
        filtered = filtered[filtered["priority"].isin(filters.priorities)]
    if filters.statuses:
        filtered = filtered[filtered["status"].isin(filters.statuses)]
    logger.filters_applied("tasks", serialize_filters(filters), len(df), len(filtered))
    return filtered


def filter_schedules(df: pd.DataFrame, filters: ScheduleFilters) -> pd.DataFrame:
    if df.empty:
        return df
    filtered = _apply_search(df, filters.search, ["subject_name", "subject_id", "check_name"])
    filtered = _equals(filtered, "status", filters.status)
    filtered = _equals(filtered, "frequency", filters.frequency)
    filtered = _equals(filtered, "entity_type", filters.entity_type)
    if filters.overdue_only and "is_overdue" in filtered:
        filtered = filtered[filtered["is_overdue"].astype(bool)]
    if filters.upcoming_only and "is_upcoming" in filtered:
        filtered = filtered[filtered["is_upcoming"].astype(bool)]
    logger.filters_applied("schedules", serialize_filters(filters), len(df), len(filtered))
    return filtered


def sort_frame(df: pd.DataFrame, state: SortState) -> pd.DataFrame:
    """Sort by the state's key with missing values last; unknown keys leave order as-is."""
    if df.empty or not state.key or state.key not in df.columns:
        return df
    column = df[state.key]
    if pd.api.types.is_object_dtype(column) or pd.api.types.is_string_dtype(column):
        # mixed or text columns sort case-insensitively
        return df.sort_values(
            state.key,
            ascending=state.ascending,
            na_position="last",
            kind="mergesort",
            key=lambda s: s.map(lambda v: v.lower() if isinstance(v, str) else v),
        )
    return df.sort_values(state.key, ascending=state.ascending, na_position="last", kind="mergesort")


def page_count(total_rows: int, page_size: int) -> int:
    if page_size <= 0:
        return 1
    return max(1, math.ceil(total_rows / page_size))


def paginate(df: pd.DataFrame, page: int, page_size: int) -> Tuple[pd.DataFrame, int]:
    """Return the rows for 1-based `page` (clamped to range) and the page count."""
    pages = page_count(len(df), page_size)
    if page_size <= 0:
        return df, pages
    page = min(max(int(page), 1), pages)
    start = (page - 1) * page_size
    return df.iloc[start:start + page_size], pages


def _json_safe(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def serialize_filters(filters: Any) -> Dict[str, Any]:
    """
    Convert a filter dataclass to a JSON-serialisable dictionary to be stored
    in session_state or used for logging/debugging.
    """
    if not is_dataclass(filters):
        return {}
    return {key: _json_safe(value) for key, value in asdict(filters).items()}
