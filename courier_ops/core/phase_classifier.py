# courier_ops/core/phase_classifier.py

"""
PHASE CLASSIFIER

Maps every lifecycle state to exactly one coarse phase and partitions a
shared shipment feed into phase-scoped views.

Rules:
- Single source of truth for state -> phase
- The five phase sets are a disjoint cover of ALL_LIFECYCLE_STATES
- Unknown states classify as UNCLASSIFIED: counted in totals,
  excluded from every phase view
- Never raises on record data
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional

from courier_ops.core import lifecycle as ls


class InvalidPhaseError(ValueError):
    """Raised when a caller asks for a phase that does not exist."""
    pass


# ==================================================
# PHASES
# ==================================================

PICKUP = "PICKUP"
IN_TRANSIT = "IN_TRANSIT"
DELIVERED = "DELIVERED"
RETURN = "RETURN"
ISSUE = "ISSUE"

UNCLASSIFIED = "UNCLASSIFIED"

ALL_PHASES: List[str] = [PICKUP, IN_TRANSIT, DELIVERED, RETURN, ISSUE]


# ==================================================
# PHASE -> STATES
# ==================================================

PHASE_TO_STATES: Dict[str, frozenset] = {
    PICKUP: frozenset({
        ls.BOOKED,
        ls.PRICE_ESTIMATED,
        ls.BRANCH_ASSIGNED,
        ls.PICKUP_SCHEDULED,
        ls.PICKUP_RESCHEDULED,
        ls.ON_THE_WAY_PICKUP,
        ls.VERIFIED_ITEM,
        ls.ADJUST_ITEM,
        ls.CONFIRMED_PRICE,
        ls.ADJUSTED_PRICE,
        ls.PENDING_PAYMENT,
        ls.CONFIRM_PAYMENT,
        ls.PAYMENT_CONFIRMED,
        ls.PICKUP_COMPLETE,
        ls.PICKUP_COMPLETED,
    }),
    IN_TRANSIT: frozenset({
        ls.IN_ORIGIN_WAREHOUSE,
        ls.IN_TRANSIT,
        ls.IN_DEST_WAREHOUSE,
        ls.OUT_FOR_DELIVERY,
    }),
    DELIVERED: frozenset({
        ls.DELIVERED_SUCCESS,
        ls.CLOSED,
    }),
    RETURN: frozenset({
        ls.RETURN_CREATED,
        ls.RETURN_IN_TRANSIT,
        ls.RETURNED_TO_ORIGIN,
        ls.RETURN_COMPLETED,
        ls.DISPOSED,
    }),
    ISSUE: frozenset({
        ls.DELIVERY_FAILED,
        ls.ISSUE,
    }),
}

# Inverted once at import; a state listed under two phases would be a bug
STATE_TO_PHASE: Dict[str, str] = {
    state: phase
    for phase, states in PHASE_TO_STATES.items()
    for state in states
}


def classify(state: Optional[str]) -> str:
    """Return the phase of a lifecycle state, or UNCLASSIFIED."""
    return STATE_TO_PHASE.get(state, UNCLASSIFIED)


def phase_states(phase: str) -> frozenset:
    if phase not in PHASE_TO_STATES:
        raise InvalidPhaseError(f"Unknown phase: {phase}")
    return PHASE_TO_STATES[phase]


def partition_by_phase(records: Iterable, phase: str) -> List:
    """
    Keep only records whose classified phase equals `phase`.

    Works on ShipmentRecord objects or raw dicts carrying a "status" key.
    Input order is preserved; UNCLASSIFIED records never match.
    """
    allowed = phase_states(phase)
    return [r for r in records if _state_of(r) in allowed]


def count_by_phase(records: Iterable) -> Dict[str, int]:
    """
    Count records per phase.

    Every phase key is present (zero when empty), plus an UNCLASSIFIED
    bucket so the grand total still matches the feed size.
    """
    counts = Counter(classify(_state_of(r)) for r in records)
    result = {phase: counts.get(phase, 0) for phase in ALL_PHASES}
    result[UNCLASSIFIED] = counts.get(UNCLASSIFIED, 0)
    return result


def _state_of(record) -> Optional[str]:
    if isinstance(record, dict):
        return record.get("status")
    return getattr(record, "status", None)
