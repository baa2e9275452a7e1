from __future__ import annotations

import pandas as pd
import streamlit as st

from vetting_dashboard.data import catalog
from vetting_dashboard.data.bundle import DataBundle
from vetting_dashboard.data.calculator import package_cost
from vetting_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from vetting_dashboard.ui.components.tables import render_table
from vetting_dashboard.ui.pages.context import PageContext


def _percentage_missing(df: pd.DataFrame) -> float:
    cells = df.size
    if cells == 0:
        return 0.0
    return float(df.isna().sum().sum() / cells * 100)


def _table_quality(bundle: DataBundle) -> pd.DataFrame:
    rows = []
    for name, df in bundle.tables().items():
        worst = df.isna().mean().sort_values(ascending=False) if not df.empty else pd.Series(dtype=float)
        rows.append(
            {
                "Table": name,
                "Rows": len(df),
                "Columns": len(df.columns),
                "Missing %": _percentage_missing(df),
                "Sparsest column": worst.index[0] if not worst.empty and worst.iloc[0] > 0 else "–",
            }
        )
    return pd.DataFrame(rows)


def _packages_frame() -> pd.DataFrame:
    rows = []
    for package in catalog.VETTING_PACKAGES:
        pricing = package_cost(package.package_id)
        rows.append(
            {
                "package_id": package.package_id,
                "name": package.name,
                "applicable_to": ", ".join(e.value for e in package.applicable_to),
                "checks": ", ".join(package.check_ids),
                "discount_pct": package.discount_pct,
                "price": pricing["price"],
                "popular": package.popular,
            }
        )
    return pd.DataFrame(rows)


def render(bundle: DataBundle, context: PageContext) -> None:
    st.subheader("Data & Definitions")
    quality = _table_quality(context.raw)
    diagnostics = context.raw.diagnostics

    total_rows = int(quality["Rows"].sum())
    date_failures = sum(sum(cols.values()) for cols in diagnostics.get("date_parse_failures", {}).values())
    sentinels = sum(sum(cols.values()) for cols in diagnostics.get("sentinel_replacements", {}).values())
    render_kpi_cards(
        [
            KpiCard("Rows Loaded", total_rows),
            KpiCard("Empty Tables", int((quality["Rows"] == 0).sum())),
            KpiCard("Date Parse Failures", date_failures),
            KpiCard("Sentinel Values Cleared", sentinels),
        ],
        columns=4,
    )

    st.markdown("#### Diagnostics Summary")
    if diagnostics:
        for key, value in diagnostics.items():
            if key == "row_counts":
                continue
            st.write(f"- **{key.replace('_', ' ').title()}**: {value}")
    else:
        st.info("No diagnostics metadata available.")

    st.markdown("#### Table Completeness")
    render_table(
        quality,
        column_config={"Missing %": {"type": "percent", "decimals": 1}},
        height=320,
        export_file_name="table_quality.csv",
        key="dq_quality",
    )

    st.markdown("#### Check Catalogue")
    render_table(
        catalog.catalog_frame(),
        column_config={"cost": {"type": "currency"}},
        height=320,
        export_file_name="check_catalog.csv",
        key="dq_catalog",
    )

    st.markdown("#### Packages")
    render_table(
        _packages_frame(),
        column_config={"price": {"type": "currency"}, "discount_pct": {"type": "percent", "decimals": 0}},
        height=240,
        export_file_name="packages.csv",
        key="dq_packages",
    )

    st.markdown("#### Metric Definitions")
    st.write(
        f"""
        - **Overdue case**: target completion date before the reference time and status not Complete, Cancelled or Failed.
        - **Active case**: In Progress, Partially Complete or Consent Pending.
        - **Near-expiry consent**: link expires within {context.settings.near_expiry_hours} hours (expired links included).
        - **Expiring soon**: consent-bearing checks whose link expires within {context.settings.expiring_soon_days} days.
        - **Upcoming schedule**: next run within {context.settings.upcoming_days} days of the reference time.
        - **Case risk score**: mean of the completed check risk scores, rounded half up.
        """
    )

    st.markdown("#### Supplier Risk Scoring")
    st.write(
        """
        - **Base risk**: operational 25%, financial 20%, compliance 25%, reputational 15%, contractual 15%.
        - **Concentration penalty**: +5 for a director on two boards, +12 on three, +20 on four or more.
        - **Network multiplier**: x1.1 when a director is shared with another supplier, x1.15 more when
          over two same-region suppliers share a mine site.
        - **Geographic multiplier**: low x1.0, medium x1.05, high x1.15.
        - **Contract multiplier**: x1.05 above R 50M, x1.1 above R 100M.
        - **Levels**: Critical 75+, High 50-74, Medium 25-49, Low below 25.
        """
    )
