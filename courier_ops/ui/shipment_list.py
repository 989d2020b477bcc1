"""
Phase-scoped shipment list (Pickup / In Transit / Delivered / Return / Issue)

All five pages read the SAME feed through FeedLoader and differ only by
phase. Filter controls are shown only for fields the viewer may apply;
the filter engine enforces the same rule regardless.
"""

import streamlit as st
from typing import List

from courier_ops import config
from courier_ops.core.filter_engine import FilterCriteria, apply_filters
from courier_ops.core.models import Branch
from courier_ops.core.pagination import ListViewState, paginate
from courier_ops.core.phase_classifier import ALL_PHASES
from courier_ops.performance.data_loader import FeedLoader
from courier_ops.security.roles import FIELD_BRANCH, FIELD_PHONE
from courier_ops.security.viewer_scope import ViewerScope
from courier_ops.ui.components import render_pager, shipments_frame, status_badge

_STATE_KEY = "_shipment_list_state"

PHASE_TITLES = {
    "PICKUP": "🚚 Pickup",
    "IN_TRANSIT": "🛣️ In Transit",
    "DELIVERED": "✅ Delivered",
    "RETURN": "↩️ Returns",
    "ISSUE": "⚠️ Issues",
}

SERVICE_TYPES = ["", "Standard", "Express", "Economy"]


def _list_state() -> ListViewState:
    if _STATE_KEY not in st.session_state:
        st.session_state[_STATE_KEY] = ListViewState()
    return st.session_state[_STATE_KEY]


def _render_filters(state: ListViewState, viewer: ViewerScope, branches: List[Branch]) -> FilterCriteria:
    criteria = state.criteria

    with st.expander("🔎 Filters", expanded=True):
        cols = st.columns(4)

        tracking_text = cols[0].text_input(
            "Tracking ID", value=criteria.tracking_text, placeholder="CX-88..."
        )

        phone = criteria.phone
        if viewer.can_filter(FIELD_PHONE):
            phone = cols[1].text_input("Phone Number", value=criteria.phone)

        branch = criteria.branch
        if viewer.can_filter(FIELD_BRANCH):
            options = [""] + [b.name for b in branches]
            index = options.index(branch) if branch in options else 0
            branch = cols[2].selectbox(
                "Branch", options, index=index, format_func=lambda v: v or "All Branches"
            )

        index = SERVICE_TYPES.index(criteria.service_type) if criteria.service_type in SERVICE_TYPES else 0
        service_type = cols[3].selectbox(
            "Service Type", SERVICE_TYPES, index=index, format_func=lambda v: v or "All Services"
        )

        if st.button("↺ Reset All", key="shipment_filters_reset"):
            st.session_state[_STATE_KEY] = state.reset_filters()
            st.rerun()

    return FilterCriteria.from_mapping({
        "tracking_text": tracking_text,
        "phone": phone,
        "branch": branch,
        "service_type": service_type,
    })


def render_shipment_list(
    phase: str,
    loader: FeedLoader,
    viewer: ViewerScope,
    branches: List[Branch],
) -> None:
    """Render one phase view with filters and pagination."""
    if phase not in ALL_PHASES:
        st.error(f"Unknown view: {phase}")
        return

    st.markdown(f"## {PHASE_TITLES.get(phase, phase)}")

    state = _list_state().with_phase(phase)
    state = state.with_criteria(_render_filters(state, viewer, branches))

    records = loader.get_phase_view(phase)
    if loader.last_error is not None:
        st.warning(f"Showing last loaded data: {loader.last_error}")
        if st.button("🔄 Retry", key="shipment_list_retry"):
            loader.invalidate()
            st.rerun()

    filtered = apply_filters(records, state.criteria, viewer)
    page = paginate(filtered, state.page, config.LIST_PAGE_SIZE)
    state = state.with_page(page.page)

    st.caption(f"{len(filtered)} shipment(s)")
    statuses = sorted({r.status for r in filtered if r.status})
    if statuses:
        st.markdown(" ".join(status_badge(s) for s in statuses), unsafe_allow_html=True)

    if page.records:
        st.dataframe(shipments_frame(page.records), use_container_width=True, hide_index=True)
    else:
        st.info("No shipments match the current filters")

    requested = render_pager(page, "shipment_list")
    st.session_state[_STATE_KEY] = state
    if requested is not None:
        st.session_state[_STATE_KEY] = state.with_page(requested)
        st.rerun()
