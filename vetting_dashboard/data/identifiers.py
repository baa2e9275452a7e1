from __future__ import annotations

import re
from typing import Iterable

import pandas as pd


def next_sequence_id(prefix: str, existing_ids: Iterable[str], width: int = 3, sep: str = "-") -> str:
    """Return `{prefix}{sep}{NNN}` using one more than the highest suffix already taken."""
    pattern = re.compile(rf"^{re.escape(prefix)}{re.escape(sep)}(\d+)$")
    highest = 0
    for value in existing_ids:
        match = pattern.match(str(value))
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{sep}{highest + 1:0{width}d}"


def next_consent_id(existing_ids: Iterable[str], when: pd.Timestamp) -> str:
    return next_sequence_id(f"CR{when:%Y%m%d}", existing_ids)


def next_report_id(existing_ids: Iterable[str], when: pd.Timestamp) -> str:
    return next_sequence_id(f"VR{when:%Y%m}", existing_ids)


def next_case_id(existing_ids: Iterable[str]) -> str:
    return next_sequence_id("case", existing_ids, sep="_")


def next_case_number(existing_numbers: Iterable[str], when: pd.Timestamp) -> str:
    return next_sequence_id(f"VET-{when.year}", existing_numbers, width=6)
