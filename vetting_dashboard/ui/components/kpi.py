from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import streamlit as st

from vetting_dashboard.ui.components.formatting import format_currency, format_number


@dataclass
class KpiCard:
    label: str
    value: Optional[float] = None
    value_display: Optional[str] = None
    currency: Optional[str] = None
    decimals: int = 0
    compact: bool = True
    help_text: Optional[str] = None
    # counts above this threshold get a red "needs attention" marker
    alert_above: Optional[float] = None


def _card_value(card: KpiCard) -> str:
    if card.value_display is not None:
        return card.value_display
    if card.currency:
        return format_currency(card.value, currency=card.currency, decimals=card.decimals, compact=card.compact)
    return format_number(card.value, decimals=card.decimals)


def _needs_attention(card: KpiCard) -> bool:
    if card.alert_above is None or card.value is None:
        return False
    return float(card.value) > card.alert_above


def render_kpi_cards(cards: Sequence[KpiCard], columns: int = 4) -> None:
    """Lay the cards out in rows of `columns` bordered metrics."""
    cards = list(cards)
    if not cards:
        st.info("No KPIs available for the current selection.")
        return

    per_row = max(columns, 1)
    rows = [cards[start:start + per_row] for start in range(0, len(cards), per_row)]
    for row in rows:
        for slot, card in zip(st.columns(len(row)), row):
            alert = _needs_attention(card)
            slot.metric(
                label=card.label,
                value=_card_value(card),
                delta="needs attention" if alert else None,
                delta_color="inverse" if alert else "off",
                help=card.help_text,
                border=True,
            )
