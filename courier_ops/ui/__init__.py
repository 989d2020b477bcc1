# Streamlit pages

from .billing import render_billing
from .dashboard import render_dashboard, stop_dashboard_sync
from .shipment_list import render_shipment_list

__all__ = [
    'render_billing',
    'render_dashboard',
    'stop_dashboard_sync',
    'render_shipment_list',
]
