from __future__ import annotations

from typing import Dict

import pandas as pd

from vetting_dashboard.data.models import ScheduleFrequency

FREQUENCY_MONTHS: Dict[str, int] = {
    ScheduleFrequency.MONTHLY.value: 1,
    ScheduleFrequency.QUARTERLY.value: 3,
    ScheduleFrequency.BI_ANNUALLY.value: 6,
    ScheduleFrequency.ANNUALLY.value: 12,
}


def advance_run_date(run_date: pd.Timestamp, frequency: str) -> pd.Timestamp:
    """Next run date one frequency period after `run_date` (calendar months)."""
    months = FREQUENCY_MONTHS.get(ScheduleFrequency(frequency).value)
    return pd.Timestamp(run_date) + pd.DateOffset(months=months)
