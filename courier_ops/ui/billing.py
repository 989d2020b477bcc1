"""
Billing Page - bill lookup by tracking id, bill id, date
"""

import streamlit as st
import pandas as pd

from courier_ops import config
from courier_ops.core.filter_engine import BillFilterCriteria, apply_bill_filters
from courier_ops.core.money import format_display_currency
from courier_ops.core.pagination import paginate
from courier_ops.integrations.api_client import ApiError, CourierApiClient
from courier_ops.security.viewer_scope import ViewerScope
from courier_ops.ui.components import render_pager

_PAGE_KEY = "_billing_page"


def render_billing(client: CourierApiClient, viewer: ViewerScope) -> None:
    st.markdown("## 🧾 Billing")

    col1, col2, col3 = st.columns(3)
    tracking_id = col1.text_input("Tracking ID")
    bill_id = col2.text_input("Bill ID")
    bill_date = col3.date_input("Date", value=None)

    criteria = BillFilterCriteria.from_mapping({
        "tracking_id": tracking_id,
        "bill_id": bill_id,
        "date": bill_date.isoformat() if bill_date else "",
    })

    if st.session_state.get("_billing_criteria") != criteria:
        st.session_state["_billing_criteria"] = criteria
        st.session_state[_PAGE_KEY] = 1

    try:
        bills = client.fetch_bills(criteria.tracking_id, criteria.bill_id, criteria.date)
    except ApiError as e:
        st.error(f"Unable to load bills: {str(e)}")
        return

    bills = apply_bill_filters(bills, criteria, viewer)
    page = paginate(bills, st.session_state.get(_PAGE_KEY, 1), config.LIST_PAGE_SIZE)

    if not page.records:
        st.info("No bills found")
        return

    df = pd.DataFrame([
        {
            "Bill ID": b.bill_id,
            "Tracking ID": b.tracking_id,
            "Customer": b.customer_name,
            "Date": b.date,
            "Amount": format_display_currency(b.amount_minor_units),
        }
        for b in page.records
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)

    requested = render_pager(page, "billing")
    if requested is not None:
        st.session_state[_PAGE_KEY] = requested
        st.rerun()
