"""
Courier Operations Dashboard
Minimal entry file: viewer selection, page routing, lazy page imports
"""
import logging

import streamlit as st
from datetime import datetime

from courier_ops.config import configure_logging

# ═══════════════════════════════════════════════════════════════
# PAGE CONFIG (MUST BE FIRST)
# ═══════════════════════════════════════════════════════════════
st.set_page_config(
    page_title="Courier Operations Dashboard",
    layout="wide",
)

configure_logging()
logger = logging.getLogger("courier_ops.app")

from courier_ops.integrations import ApiError, CourierApiClient
from courier_ops.performance import FeedLoader
from courier_ops.security.roles import ALL_ROLES
from courier_ops.security.viewer_scope import build_viewer_scope
from courier_ops.sync import shipment_channel
from courier_ops.ui.session import session_liveness

PAGES = ["📊 Dashboard", "🚚 Pickup", "🛣️ In Transit", "✅ Delivered", "↩️ Returns", "⚠️ Issues", "🧾 Billing"]
PAGE_PHASES = {
    "🚚 Pickup": "PICKUP",
    "🛣️ In Transit": "IN_TRANSIT",
    "✅ Delivered": "DELIVERED",
    "↩️ Returns": "RETURN",
    "⚠️ Issues": "ISSUE",
}

# ═══════════════════════════════════════════════════════════════
# SESSION STATE (MINIMAL)
# ═══════════════════════════════════════════════════════════════
if "initialized" not in st.session_state:
    st.session_state.initialized = True
    st.session_state.active_page = None
    st.session_state.client = CourierApiClient()
    st.session_state.loader = None

client = st.session_state.client

# ═══════════════════════════════════════════════════════════════
# VIEWER (SIDEBAR)
# ═══════════════════════════════════════════════════════════════
with st.sidebar:
    st.markdown("### 👤 Viewer")
    role = st.selectbox("Role", ALL_ROLES)
    user_id = st.text_input("User ID", value="")
    branch_id = st.text_input("Branch ID", value="") if role == "AGENT" else None
    page_name = st.radio("Page", PAGES)

viewer = build_viewer_scope(role, user_id or None, branch_id or None)

loader = st.session_state.get("loader")
if loader is None or loader.viewer.identity != viewer.identity:
    if loader is not None:
        loader.unwatch()
    loader = FeedLoader(client, viewer, is_alive=session_liveness())
    loader.watch(shipment_channel)
    st.session_state.loader = loader


def get_branches():
    """Branch directory once per viewer identity."""
    cached = st.session_state.get("_branches")
    if cached and cached[0] == viewer.identity:
        return cached[1]
    try:
        branches = client.fetch_branches(viewer)
    except ApiError as e:
        logger.warning(f"Branch directory unavailable: {str(e)}")
        return []
    st.session_state["_branches"] = (viewer.identity, branches)
    return branches


# ═══════════════════════════════════════════════════════════════
# HEADER
# ═══════════════════════════════════════════════════════════════
st.title("📦 Courier Operations Dashboard")
st.caption(f"{viewer.role} • {viewer.visibility} scope")

# ═══════════════════════════════════════════════════════════════
# ROUTING (LAZY)
# ═══════════════════════════════════════════════════════════════
if st.session_state.active_page != page_name:
    if st.session_state.active_page == PAGES[0]:
        from courier_ops.ui import stop_dashboard_sync
        stop_dashboard_sync()
    st.session_state.active_page = page_name

if page_name == PAGES[0]:
    from courier_ops.ui import render_dashboard
    render_dashboard(client, viewer, get_branches())

elif page_name in PAGE_PHASES:
    from courier_ops.ui import render_shipment_list
    render_shipment_list(PAGE_PHASES[page_name], loader, viewer, get_branches())

else:
    from courier_ops.ui import render_billing
    render_billing(client, viewer)

# ═══════════════════════════════════════════════════════════════
# FOOTER
# ═══════════════════════════════════════════════════════════════
st.divider()
st.caption(f"⚡ Live sync • Last rendered: {datetime.now().strftime('%H:%M:%S')}")
