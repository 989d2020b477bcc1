"""
COLLABORATOR RESPONSE ADAPTERS

Purpose:
- Fold the many optional / alternate field names the courier backend
  emits into one typed record shape
- Isolate every fallback default at the collaborator boundary

Field precedence (first non-empty wins):

  ShipmentRecord
    id            id > shipment_id
    tracking_id   trackingId > tracking_id > "CX-" + zero-padded id
    status        status > shipment_status
    branch_name   branchName > branch_name > branch.name > branch (str) > branchId > "N/A"
    branch_id     branchId > branch_id > branch.id
    service_type  serviceType > service_type > "Standard"
    category      details.type > goods_type > "Parcel"
    weight        actualWeight > details.weight > "N/A"
    dimensions    details.dimensions > "N/A"
    fee           pricing.total > fee > 0 (rounded to whole minor units)
    customer_id   customerId > customer_id > userId > user_id
    booking_date  bookingDate > created_at

  BillRecord
    id            id > bill_id
    bill_id       bill_id > billId > id
    tracking_id   tracking_id > trackingId > "N/A"
    amount        amount > total_amount > 0
    date          date > created_at > "N/A"
    customer_name customer_name > customer > "N/A"

  DashboardSnapshot
    counts default to 0; missing chart series default to []
    chart points: "name"/"city" are text, every other value a number
    (unparseable -> 0)
    branchProductMix > regionalProductMix

Rules:
- Never raise on missing/odd fields, only on a payload that is not a mapping
"""

import logging
import math
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional

from courier_ops.core.models import (
    NOT_AVAILABLE,
    BillRecord,
    Branch,
    DashboardSnapshot,
    DashboardStats,
    Participant,
    ShipmentRecord,
)

logger = logging.getLogger(__name__)


class MalformedRecordError(ValueError):
    """Raised when a payload item is not a mapping at all."""
    pass


# ==================================================
# HELPERS
# ==================================================

def _first(*candidates: Any, default: Any = None) -> Any:
    for value in candidates:
        if value is None:
            continue
        if isinstance(value, str) and value.strip() == "":
            continue
        return value
    return default


def _get(source: Any, *path: str) -> Any:
    current = source
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _as_text(value: Any, default: str = NOT_AVAILABLE) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _as_optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_number(value: Any, default: float = 0) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else default
    try:
        number = float(str(value).replace(",", "").strip())
    except ValueError:
        return default
    if not math.isfinite(number):
        return default
    return int(number) if number.is_integer() else number


def _as_count(value: Any) -> int:
    return int(_as_number(value, 0))


def _as_minor_units(value: Any) -> int:
    """Minor units are whole numbers; fractional input is rounded."""
    return int(round(_as_number(value, 0)))


def _participant(raw: Any) -> Participant:
    if not isinstance(raw, Mapping):
        return Participant()
    return Participant(
        name=_as_text(raw.get("name")),
        phone=_as_text(raw.get("phone")),
        address=_as_text(raw.get("address"), default=""),
    )


def _require_mapping(raw: Any, kind: str) -> Mapping:
    if not isinstance(raw, Mapping):
        raise MalformedRecordError(f"{kind} payload is not an object: {type(raw).__name__}")
    return raw


# ==================================================
# SHIPMENTS
# ==================================================

def normalize_shipment(raw: Any) -> ShipmentRecord:
    raw = _require_mapping(raw, "Shipment")

    record_id = _as_text(_first(raw.get("id"), raw.get("shipment_id")), default="")
    branch = raw.get("branch")

    tracking_id = _first(raw.get("trackingId"), raw.get("tracking_id"))
    if tracking_id is None:
        tracking_id = f"CX-{record_id.zfill(10)}" if record_id else NOT_AVAILABLE

    return ShipmentRecord(
        id=record_id,
        tracking_id=_as_text(tracking_id),
        status=_as_optional_text(_first(raw.get("status"), raw.get("shipment_status"))),
        sender=_participant(raw.get("sender")),
        receiver=_participant(raw.get("receiver")),
        service_type=_as_text(
            _first(raw.get("serviceType"), raw.get("service_type")), default="Standard"
        ),
        category=_as_text(
            _first(_get(raw, "details", "type"), raw.get("goods_type")), default="Parcel"
        ),
        weight=_as_text(_first(raw.get("actualWeight"), _get(raw, "details", "weight"))),
        dimensions=_as_text(_get(raw, "details", "dimensions")),
        fee_minor_units=_as_minor_units(_first(_get(raw, "pricing", "total"), raw.get("fee"))),
        branch_id=_as_optional_text(
            _first(raw.get("branchId"), raw.get("branch_id"), _get(branch, "id"))
        ),
        branch_name=_as_text(_first(
            raw.get("branchName"),
            raw.get("branch_name"),
            _get(branch, "name"),
            branch if isinstance(branch, str) else None,
            raw.get("branchId"),
        )),
        customer_id=_as_optional_text(_first(
            raw.get("customerId"),
            raw.get("customer_id"),
            raw.get("userId"),
            raw.get("user_id"),
        )),
        booking_date=_as_optional_text(_first(raw.get("bookingDate"), raw.get("created_at"))),
        eta=_as_optional_text(raw.get("eta")),
        vehicle_type=_as_text(raw.get("vehicleType")),
        payment_method=_as_optional_text(raw.get("paymentMethod")),
        payment_status=_as_optional_text(raw.get("paymentStatus")),
    )


def normalize_shipments(items: Optional[Iterable[Any]]) -> List[ShipmentRecord]:
    """Normalize a list, skipping (and logging) items that are not objects."""
    records = []
    for item in items or []:
        try:
            records.append(normalize_shipment(item))
        except MalformedRecordError as e:
            logger.warning(f"Skipping shipment item: {e}")
    return records


# ==================================================
# BILLS
# ==================================================

def normalize_bill(raw: Any) -> BillRecord:
    raw = _require_mapping(raw, "Bill")

    bill_id = _first(raw.get("bill_id"), raw.get("billId"), raw.get("id"))
    return BillRecord(
        id=_as_text(_first(raw.get("id"), raw.get("bill_id")), default=""),
        bill_id=_as_text(bill_id, default=""),
        tracking_id=_as_text(_first(raw.get("tracking_id"), raw.get("trackingId"))),
        amount_minor_units=_as_minor_units(_first(raw.get("amount"), raw.get("total_amount"))),
        date=_as_text(_first(raw.get("date"), raw.get("created_at"))),
        customer_name=_as_text(_first(raw.get("customer_name"), raw.get("customer"))),
        customer_id=_as_optional_text(_first(raw.get("customer_id"), raw.get("user_id"))),
        branch_id=_as_optional_text(raw.get("branch_id")),
    )


def normalize_bills(items: Optional[Iterable[Any]]) -> List[BillRecord]:
    records = []
    for item in items or []:
        try:
            records.append(normalize_bill(item))
        except MalformedRecordError as e:
            logger.warning(f"Skipping bill item: {e}")
    return records


# ==================================================
# BRANCHES
# ==================================================

def normalize_branches(items: Optional[Iterable[Any]]) -> List[Branch]:
    branches = []
    for item in items or []:
        if not isinstance(item, Mapping):
            continue
        branch_id = _as_optional_text(_first(item.get("id"), item.get("branch_id")))
        if branch_id is None:
            continue
        branches.append(Branch(id=branch_id, name=_as_text(item.get("name"))))
    return branches


# ==================================================
# DASHBOARD
# ==================================================

CHART_SERIES = (
    "weeklyRevenue",
    "weeklyDeliveryTrend",
    "categoryFlows",
    "branchProductMix",
    "topBranches",
    "citySuccessMetrics",
)

_SERIES_ALIASES = {
    "branchProductMix": ("branchProductMix", "regionalProductMix"),
}

# Axis labels; every other key of a chart point is a measure
CHART_LABEL_KEYS = ("name", "city")


def _chart_point(point: Mapping) -> Dict[str, Any]:
    """Labels as text, measures as numbers (unparseable measures read as 0)."""
    return {
        key: _as_text(value, default="") if key in CHART_LABEL_KEYS else _as_number(value)
        for key, value in point.items()
    }


def normalize_dashboard(
    payload: Any,
    period: str = "week",
    branch_id: Optional[str] = None,
) -> DashboardSnapshot:
    """
    Build a DashboardSnapshot from the `data` object of /dashboard/stats.

    Absent stats read as zero and absent chart series as empty lists.
    """
    payload = payload if isinstance(payload, Mapping) else {}
    stats = payload.get("stats") if isinstance(payload.get("stats"), Mapping) else {}
    charts = payload.get("charts") if isinstance(payload.get("charts"), Mapping) else {}

    normalized_charts: Dict[str, List[Dict[str, Any]]] = {}
    for name in CHART_SERIES:
        series = None
        for alias in _SERIES_ALIASES.get(name, (name,)):
            if isinstance(charts.get(alias), list):
                series = charts[alias]
                break
        normalized_charts[name] = [
            _chart_point(point) for point in (series or []) if isinstance(point, Mapping)
        ]

    return DashboardSnapshot(
        stats=DashboardStats(
            pending=_as_count(stats.get("pendingCouriers")),
            in_transit=_as_count(stats.get("inTransitCouriers")),
            delivered=_as_count(stats.get("deliveredCouriers")),
            total=_as_count(stats.get("totalCouriers")),
            total_branches=_as_count(stats.get("totalBranches")),
            total_revenue_minor_units=_as_number(stats.get("totalRevenue")),
        ),
        charts=normalized_charts,
        period=period,
        branch_id=branch_id,
        fetched_at=time.time(),
    )
