# courier_ops/core/lifecycle.py

"""
COURIER LIFECYCLE TAXONOMY

Closed set of lifecycle states a shipment can hold, plus the display label
and style token used wherever a state is rendered.

Rules:
- Pure data, no side effects
- Transitions happen in the system of record, never here
- Unknown values fail soft to a generic label and style
"""

from typing import Dict, List, Optional, Tuple


# ==================================================
# LIFECYCLE STATES
# ==================================================

# Booking & pickup preparation
BOOKED = "BOOKED"
PRICE_ESTIMATED = "PRICE_ESTIMATED"
BRANCH_ASSIGNED = "BRANCH_ASSIGNED"
PICKUP_SCHEDULED = "PICKUP_SCHEDULED"
PICKUP_RESCHEDULED = "PICKUP_RESCHEDULED"

# Pickup
ON_THE_WAY_PICKUP = "ON_THE_WAY_PICKUP"
VERIFIED_ITEM = "VERIFIED_ITEM"
ADJUST_ITEM = "ADJUST_ITEM"
CONFIRMED_PRICE = "CONFIRMED_PRICE"
ADJUSTED_PRICE = "ADJUSTED_PRICE"
PENDING_PAYMENT = "PENDING_PAYMENT"
CONFIRM_PAYMENT = "CONFIRM_PAYMENT"
PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"
PICKUP_COMPLETE = "PICKUP_COMPLETE"
PICKUP_COMPLETED = "PICKUP_COMPLETED"  # legacy spelling still emitted by older clients

# Warehouses & line haul
IN_ORIGIN_WAREHOUSE = "IN_ORIGIN_WAREHOUSE"
IN_TRANSIT = "IN_TRANSIT"
IN_DEST_WAREHOUSE = "IN_DEST_WAREHOUSE"

# Last mile
OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
DELIVERY_FAILED = "DELIVERY_FAILED"
DELIVERED_SUCCESS = "DELIVERED_SUCCESS"

# Returns & closure
RETURN_CREATED = "RETURN_CREATED"
RETURN_IN_TRANSIT = "RETURN_IN_TRANSIT"
RETURNED_TO_ORIGIN = "RETURNED_TO_ORIGIN"
RETURN_COMPLETED = "RETURN_COMPLETED"
DISPOSED = "DISPOSED"
CLOSED = "CLOSED"

# Exception
ISSUE = "ISSUE"


ALL_LIFECYCLE_STATES: List[str] = [
    BOOKED,
    PRICE_ESTIMATED,
    BRANCH_ASSIGNED,
    PICKUP_SCHEDULED,
    PICKUP_RESCHEDULED,
    ON_THE_WAY_PICKUP,
    VERIFIED_ITEM,
    ADJUST_ITEM,
    CONFIRMED_PRICE,
    ADJUSTED_PRICE,
    PENDING_PAYMENT,
    CONFIRM_PAYMENT,
    PAYMENT_CONFIRMED,
    PICKUP_COMPLETE,
    PICKUP_COMPLETED,
    IN_ORIGIN_WAREHOUSE,
    IN_TRANSIT,
    IN_DEST_WAREHOUSE,
    OUT_FOR_DELIVERY,
    DELIVERY_FAILED,
    DELIVERED_SUCCESS,
    RETURN_CREATED,
    RETURN_IN_TRANSIT,
    RETURNED_TO_ORIGIN,
    RETURN_COMPLETED,
    DISPOSED,
    CLOSED,
    ISSUE,
]


# ==================================================
# PRESENTATION (label, style token)
# ==================================================

UNCLASSIFIED_LABEL = "UNCLASSIFIED"
UNCLASSIFIED_STYLE = "slate"

STATUS_PRESENTATION: Dict[str, Tuple[str, str]] = {
    BOOKED: ("BOOKED", "amber"),
    PRICE_ESTIMATED: ("PRICE ESTIMATED", "yellow"),
    BRANCH_ASSIGNED: ("BRANCH ASSIGNED", "blue"),
    PICKUP_SCHEDULED: ("PICKUP SCHEDULED", "cyan"),
    PICKUP_RESCHEDULED: ("PICKUP RESCHEDULED", "amber"),
    ON_THE_WAY_PICKUP: ("ON THE WAY PICKUP", "orange"),
    VERIFIED_ITEM: ("VERIFIED ITEM", "teal"),
    ADJUST_ITEM: ("ADJUST ITEM", "amber"),
    CONFIRMED_PRICE: ("CONFIRMED PRICE", "yellow"),
    ADJUSTED_PRICE: ("ADJUSTED PRICE", "orange"),
    PENDING_PAYMENT: ("PENDING PAYMENT", "rose"),
    CONFIRM_PAYMENT: ("CONFIRM PAYMENT", "green"),
    PAYMENT_CONFIRMED: ("PAYMENT CONFIRMED", "green"),
    PICKUP_COMPLETE: ("PICKUP COMPLETED", "emerald"),
    PICKUP_COMPLETED: ("PICKUP COMPLETED", "emerald"),
    IN_ORIGIN_WAREHOUSE: ("IN ORIGIN WAREHOUSE", "purple"),
    IN_TRANSIT: ("IN TRANSIT", "orange"),
    IN_DEST_WAREHOUSE: ("IN DEST WAREHOUSE", "violet"),
    OUT_FOR_DELIVERY: ("OUT FOR DELIVERY", "orange"),
    DELIVERY_FAILED: ("DELIVERY FAILED", "rose"),
    DELIVERED_SUCCESS: ("DELIVERED", "emerald"),
    RETURN_CREATED: ("RETURN CREATED", "pink"),
    RETURN_IN_TRANSIT: ("RETURN IN TRANSIT", "pink"),
    RETURNED_TO_ORIGIN: ("RETURNED TO ORIGIN", "pink"),
    RETURN_COMPLETED: ("RETURN COMPLETED", "emerald"),
    DISPOSED: ("DISPOSED", "gray"),
    CLOSED: ("CLOSED", "slate"),
    ISSUE: ("ISSUE", "rose"),
}


def is_known_state(state: Optional[str]) -> bool:
    """True if the value belongs to the closed lifecycle set."""
    return state in STATUS_PRESENTATION


def get_status_config(state: Optional[str]) -> Tuple[str, str]:
    """
    Return (label, style) for a lifecycle state.

    Unknown values never raise: they get the generic unclassified label
    and style. The raw value itself is left untouched on the record.
    """
    if state in STATUS_PRESENTATION:
        return STATUS_PRESENTATION[state]

    return (UNCLASSIFIED_LABEL, UNCLASSIFIED_STYLE)


def get_status_label(state: Optional[str]) -> str:
    return get_status_config(state)[0]
