"""
Dashboard Page - live stats + charts

One SyncCoordinator per active dashboard, kept in st.session_state.
Background triggers (debounced shipment notifications, polling) only swap
the coordinator's snapshot; the fragment below re-reads it on its own
rerun cadence.
"""

import logging
from typing import List, Optional

import pandas as pd
import plotly.express as px
import streamlit as st

from courier_ops.core.models import Branch, DashboardSnapshot
from courier_ops.core.money import format_display_currency, to_display_amount
from courier_ops.integrations.api_client import DASHBOARD_PERIODS, CourierApiClient
from courier_ops.reports.compositor import ReportGenerationError
from courier_ops.reports.pdf_export import build_dashboard_report
from courier_ops.security.viewer_scope import ViewerScope
from courier_ops.sync import SyncCoordinator, ThreadingScheduler, shipment_channel
from courier_ops.ui.session import session_liveness

logger = logging.getLogger(__name__)

_SYNC_KEY = "_dashboard_sync"
_REPORT_KEY = "_dashboard_report"
RERENDER_SECONDS = 2

PERIOD_LABELS = {"week": "This Week", "month": "This Month", "year": "This Year"}


# ==================================================
# COORDINATOR LIFECYCLE
# ==================================================

def get_dashboard_sync(client: CourierApiClient) -> SyncCoordinator:
    """Create (once per session) and start the dashboard coordinator."""
    sync = st.session_state.get(_SYNC_KEY)
    if sync is None:
        def fetch(period="week", branch_id=None, viewer=None):
            return client.fetch_dashboard(period=period, branch_id=branch_id)

        sync = SyncCoordinator(
            fetch,
            scheduler=ThreadingScheduler(),
            channel=shipment_channel,
            is_alive=session_liveness(),
        )
        st.session_state[_SYNC_KEY] = sync
    return sync


def stop_dashboard_sync() -> None:
    """Tear down the coordinator when the dashboard is left."""
    st.session_state.pop(_REPORT_KEY, None)
    sync = st.session_state.pop(_SYNC_KEY, None)
    if sync is not None:
        sync.stop()


# ==================================================
# SECTIONS
# ==================================================

def render_stats(snapshot: DashboardSnapshot) -> None:
    stats = snapshot.stats
    col1, col2, col3 = st.columns(3)
    col1.metric("Total Shipments", stats.total)
    col2.metric("Pending", stats.pending)
    col3.metric("In Transit", stats.in_transit)

    col4, col5, col6 = st.columns(3)
    col4.metric("Delivered", stats.delivered)
    col5.metric("Branches", stats.total_branches)
    col6.metric("Revenue", format_display_currency(stats.total_revenue_minor_units))


def _frame(snapshot: DashboardSnapshot, name: str) -> pd.DataFrame:
    return pd.DataFrame(snapshot.series(name))


def render_charts(snapshot: DashboardSnapshot) -> None:
    revenue = _frame(snapshot, "weeklyRevenue")
    trend = _frame(snapshot, "weeklyDeliveryTrend")
    flows = _frame(snapshot, "categoryFlows")
    mix = _frame(snapshot, "branchProductMix")
    top = _frame(snapshot, "topBranches")

    left, right = st.columns(2)

    with left:
        if not revenue.empty and "revenue" in revenue:
            revenue["revenue"] = revenue["revenue"].map(lambda v: float(to_display_amount(v)))
            fig = px.area(revenue, x="name", y="revenue", title="💰 Revenue")
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No revenue data for this period")

    with right:
        if not trend.empty:
            y = [c for c in trend.columns if c != "name"]
            fig = px.line(trend, x="name", y=y, markers=True, title="📈 Delivery Trend")
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No delivery trend data")

    left, right = st.columns(2)

    with left:
        if not flows.empty:
            y = [c for c in flows.columns if c != "name"]
            fig = px.line(flows, x="name", y=y, title="📦 Category Flows")
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No category flow data")

    with right:
        if not mix.empty:
            y = [c for c in mix.columns if c != "name"]
            fig = px.bar(mix, x="name", y=y, barmode="group", title="🏢 Branch Product Mix")
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No branch mix data")

    if not top.empty:
        st.markdown("### 🏆 Top Branches")
        st.dataframe(top, use_container_width=True, hide_index=True)


def render_export(snapshot: Optional[DashboardSnapshot]) -> None:
    """Export button; the last generated PDF survives fragment reruns."""
    if st.button("📄 Export Report", disabled=snapshot is None):
        try:
            with st.spinner("Composing report..."):
                st.session_state[_REPORT_KEY] = build_dashboard_report(snapshot)
        except ReportGenerationError as e:
            logger.error(f"Report export failed: {str(e)}")
            st.session_state.pop(_REPORT_KEY, None)
            st.error(f"Failed to export report: {str(e)}")
            return

    report = st.session_state.get(_REPORT_KEY)
    if report is not None:
        file_name, pdf_bytes = report
        st.download_button(
            "⬇️ Download PDF",
            data=pdf_bytes,
            file_name=file_name,
            mime="application/pdf",
        )


# ==================================================
# PAGE
# ==================================================

def render_dashboard(client: CourierApiClient, viewer: ViewerScope, branches: List[Branch]) -> None:
    st.markdown("## 📊 Operations Dashboard")

    col_period, col_branch = st.columns(2)
    period = col_period.selectbox(
        "Period", DASHBOARD_PERIODS, format_func=lambda p: PERIOD_LABELS[p]
    )

    branch_id = viewer.branch_id
    if viewer.is_admin:
        options = [None] + [b.id for b in branches]
        names = {b.id: b.name for b in branches}
        branch_id = col_branch.selectbox(
            "Branch", options, format_func=lambda b: names.get(b, "All Branches")
        )

    sync = get_dashboard_sync(client)
    sync.set_params(period=period, branch_id=branch_id, viewer=viewer.identity)
    sync.start()

    @st.fragment(run_every=RERENDER_SECONDS)
    def live_section():
        snapshot = sync.snapshot

        if sync.last_error is not None:
            st.warning(f"Could not refresh dashboard: {sync.last_error}")
            if st.button("🔄 Retry"):
                sync.refresh()

        if snapshot is None:
            st.info("Loading dashboard...")
            return

        render_stats(snapshot)
        st.divider()
        render_charts(snapshot)
        st.divider()
        render_export(snapshot)

    live_section()
