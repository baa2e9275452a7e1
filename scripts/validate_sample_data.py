"""Quick validation script for the generated sample bundle.

Run with `python scripts/validate_sample_data.py` to ensure every table is
generated, the derived columns are produced and the risk engine scores
every supplier.
"""

from __future__ import annotations

import pandas as pd

from vetting_dashboard.config import Settings
from vetting_dashboard.data.enrichment import enrich_bundle
from vetting_dashboard.data.samples import build_sample_bundle
from vetting_dashboard.risk.scoring import apply_risk_scoring

DERIVED_COLUMNS = {
    "cases": ["days_since_initiated", "primary_provider", "checks_label", "is_active"],
    "consents": ["checks_count", "is_expired", "is_near_expiry", "status_variant"],
    "reports": ["risk_description", "check_results_count"],
    "tasks": ["is_overdue"],
    "schedules": ["is_overdue", "is_upcoming", "run_history_count"],
}


def main() -> None:
    settings = Settings(as_of="2025-06-02T09:00:00+00:00")
    as_of = settings.reference_time()
    bundle = enrich_bundle(build_sample_bundle(settings, as_of), as_of, settings)

    tables = bundle.tables()
    missing = {
        name: [col for col in cols if col not in tables[name].columns]
        for name, cols in DERIVED_COLUMNS.items()
    }
    missing = {name: cols for name, cols in missing.items() if cols}
    if missing:
        raise SystemExit(f"Missing derived columns: {missing}")

    empty = [name for name, df in tables.items() if df.empty]
    if empty:
        raise SystemExit(f"Empty sample tables: {empty}")

    assert (bundle.feed["timestamp"] <= as_of).all(), "Feed events must not be in the future"
    assert bundle.cases["case_id"].is_unique, "Case ids must be unique"

    risk = apply_risk_scoring(bundle.suppliers, bundle.directors)
    assert risk.suppliers["risk_score"].between(0, 100).all(), "Risk scores must stay within 0-100"

    counts = pd.Series(bundle.row_counts())
    print("Sample data validation passed.")
    print(counts.to_string())


if __name__ == "__main__":
    main()
