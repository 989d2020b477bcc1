# courier_ops/core/models.py

"""
READ MODELS

Typed, immutable snapshots of what the courier backend returns. Built only
by courier_ops.integrations.adapters; everything downstream reads them.

Rules:
- No business logic
- No IO
- Frozen: the system of record owns the data, this core only reads it
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class Participant:
    name: str = NOT_AVAILABLE
    phone: str = NOT_AVAILABLE
    address: str = ""


@dataclass(frozen=True)
class ShipmentRecord:
    """One shipment as seen by the dashboard (possibly stale)."""

    id: str
    tracking_id: str
    status: Optional[str]
    sender: Participant = field(default_factory=Participant)
    receiver: Participant = field(default_factory=Participant)
    service_type: str = "Standard"
    category: str = "Parcel"
    weight: str = NOT_AVAILABLE
    dimensions: str = NOT_AVAILABLE
    fee_minor_units: int = 0
    branch_id: Optional[str] = None
    branch_name: str = NOT_AVAILABLE
    customer_id: Optional[str] = None
    booking_date: Optional[str] = None
    eta: Optional[str] = None
    vehicle_type: str = NOT_AVAILABLE
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None


@dataclass(frozen=True)
class BillRecord:
    id: str
    bill_id: str
    tracking_id: str = NOT_AVAILABLE
    amount_minor_units: int = 0
    date: str = NOT_AVAILABLE
    customer_name: str = NOT_AVAILABLE
    customer_id: Optional[str] = None
    branch_id: Optional[str] = None


@dataclass(frozen=True)
class Branch:
    id: str
    name: str


@dataclass(frozen=True)
class DashboardStats:
    pending: int = 0
    in_transit: int = 0
    delivered: int = 0
    total: int = 0
    total_branches: int = 0
    total_revenue_minor_units: float = 0


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    Stats and chart series from ONE dashboard response.

    Swapped in as a whole object so a reader never observes stats from
    one fetch next to charts from another.
    """

    stats: DashboardStats = field(default_factory=DashboardStats)
    charts: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    period: str = "week"
    branch_id: Optional[str] = None
    fetched_at: Optional[float] = None

    def series(self, name: str) -> List[Dict[str, Any]]:
        return self.charts.get(name) or []
