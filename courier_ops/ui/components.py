"""
Shared UI helpers: status badges, table rows, pager.
"""

import streamlit as st
import pandas as pd
from typing import List, Optional

from courier_ops.core.lifecycle import get_status_config
from courier_ops.core.models import ShipmentRecord
from courier_ops.core.money import format_display_currency
from courier_ops.core.pagination import Page

STYLE_COLORS = {
    "amber": "#f59e0b",
    "yellow": "#ca8a04",
    "blue": "#2563eb",
    "cyan": "#0891b2",
    "orange": "#f97316",
    "teal": "#0d9488",
    "rose": "#e11d48",
    "green": "#16a34a",
    "emerald": "#059669",
    "purple": "#9333ea",
    "violet": "#7c3aed",
    "pink": "#db2777",
    "gray": "#4b5563",
    "slate": "#475569",
}


def status_badge(state: Optional[str]) -> str:
    """Inline HTML badge for a lifecycle state (unknown -> generic badge)."""
    label, style = get_status_config(state)
    color = STYLE_COLORS.get(style, STYLE_COLORS["slate"])
    return (
        f"<span style='border:1px solid {color};color:{color};"
        f"border-radius:8px;padding:2px 8px;font-size:11px;font-weight:700'>{label}</span>"
    )


def shipments_frame(records: List[ShipmentRecord]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "Tracking ID": r.tracking_id,
            "Status": get_status_config(r.status)[0],
            "From": r.sender.address or "N/A",
            "To": r.receiver.address or "N/A",
            "Service": r.service_type,
            "Category": r.category,
            "Weight": r.weight,
            "Branch": r.branch_name,
            "Fee": format_display_currency(r.fee_minor_units),
            "Booked": r.booking_date or "N/A",
        }
        for r in records
    ])


def render_pager(page: Page, state_key: str) -> Optional[int]:
    """
    Prev / next controls. Returns the newly requested page, or None.
    """
    col_prev, col_label, col_next = st.columns([1, 2, 1])
    requested = None

    with col_prev:
        if st.button("◀ Prev", key=f"{state_key}_prev", disabled=page.page <= 1):
            requested = page.page - 1
    with col_label:
        st.caption(f"Page {page.page} of {page.total_pages}")
    with col_next:
        if st.button("Next ▶", key=f"{state_key}_next", disabled=page.page >= page.total_pages):
            requested = page.page + 1

    return requested
