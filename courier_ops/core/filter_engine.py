# courier_ops/core/filter_engine.py

"""
ROLE-SCOPED FILTER ENGINE

Applies multi-field predicates to an in-memory record collection.

Rules:
- Criteria are AND-ed; an absent or blank criterion always passes
- Text criteria: case-insensitive substring
- Categorical criteria (branch, service type): case-insensitive exact
- Role gating happens HERE, at predicate level, through ViewerScope:
  a field the viewer may not filter on always passes, whatever value
  was supplied
- Records outside the viewer's visibility are dropped first
- Pure: same input, same output; applying twice == applying once
"""

from dataclasses import dataclass, fields
from typing import Any, Iterable, List, Mapping, Optional

from courier_ops.core.models import BillRecord, ShipmentRecord
from courier_ops.security.roles import (
    FIELD_BRANCH,
    FIELD_PHONE,
    FIELD_SERVICE_TYPE,
    FIELD_TRACKING,
)
from courier_ops.security.viewer_scope import ViewerScope


@dataclass(frozen=True)
class FilterCriteria:
    tracking_text: str = ""
    phone: str = ""
    branch: str = ""
    service_type: str = ""

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "FilterCriteria":
        """Build from a loose mapping; unknown keys are ignored, None -> ""."""
        values = values or {}
        known = {f.name for f in fields(cls)}
        return cls(**{
            key: _clean(value)
            for key, value in values.items()
            if key in known
        })

    def is_empty(self) -> bool:
        return not any((self.tracking_text, self.phone, self.branch, self.service_type))


@dataclass(frozen=True)
class BillFilterCriteria:
    tracking_id: str = ""
    bill_id: str = ""
    date: str = ""  # ISO date prefix, e.g. "2026-01" or "2026-01-24"

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "BillFilterCriteria":
        values = values or {}
        known = {f.name for f in fields(cls)}
        return cls(**{
            key: _clean(value)
            for key, value in values.items()
            if key in known
        })


# ==================================================
# PREDICATES
# ==================================================

def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _contains(haystack: Any, needle: str) -> bool:
    if not needle:
        return True
    return needle.lower() in _clean(haystack).lower()


def _equals(value: Any, expected: str) -> bool:
    if not expected:
        return True
    return _clean(value).lower() == expected.lower()


def matches_shipment(
    record: ShipmentRecord,
    criteria: FilterCriteria,
    viewer: ViewerScope,
) -> bool:
    """Evaluate every criterion the viewer is allowed to apply."""
    if viewer.can_filter(FIELD_TRACKING) and criteria.tracking_text:
        if not (
            _contains(record.id, criteria.tracking_text)
            or _contains(record.tracking_id, criteria.tracking_text)
        ):
            return False

    if viewer.can_filter(FIELD_PHONE) and criteria.phone:
        if not (
            _contains(record.sender.phone, criteria.phone)
            or _contains(record.receiver.phone, criteria.phone)
        ):
            return False

    if viewer.can_filter(FIELD_BRANCH) and criteria.branch:
        if not (
            _equals(record.branch_name, criteria.branch)
            or _equals(record.branch_id, criteria.branch)
        ):
            return False

    if viewer.can_filter(FIELD_SERVICE_TYPE) and criteria.service_type:
        if not _equals(record.service_type, criteria.service_type):
            return False

    return True


def apply_filters(
    records: Iterable[ShipmentRecord],
    criteria: Optional[FilterCriteria],
    viewer: ViewerScope,
) -> List[ShipmentRecord]:
    """
    Visibility first, then AND of all applicable criteria.

    Args:
        records: Shipment feed (any order; order is preserved)
        criteria: FilterCriteria or None for "no constraint"
        viewer: Scope of the signed-in viewer

    Returns:
        New list of matching records
    """
    criteria = criteria or FilterCriteria()
    return [
        r for r in records
        if viewer.can_view(r) and matches_shipment(r, criteria, viewer)
    ]


def apply_bill_filters(
    bills: Iterable[BillRecord],
    criteria: Optional[BillFilterCriteria],
    viewer: ViewerScope,
) -> List[BillRecord]:
    criteria = criteria or BillFilterCriteria()
    result = []
    for bill in bills:
        if not viewer.can_view(bill):
            continue
        if not _contains(bill.tracking_id, criteria.tracking_id):
            continue
        if not (_contains(bill.bill_id, criteria.bill_id) or _contains(bill.id, criteria.bill_id)):
            continue
        if criteria.date and not _clean(bill.date).startswith(criteria.date):
            continue
        result.append(bill)
    return result
