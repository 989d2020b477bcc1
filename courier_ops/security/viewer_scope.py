"""
VIEWER SCOPE (SINGLE ENTRYPOINT FOR ROLE CAPABILITIES)

Built once per signed-in viewer and handed to every list/filter/dashboard
consumer, so no downstream code branches on the role string itself.

Carries:
- which filter fields the viewer may apply
- which records the viewer may see

Rules:
- ADMIN sees everything and may filter on every field
- AGENT sees its own branch; branch filter is never applied
- CUSTOMER sees its own records; phone and branch filters are never applied
- Unknown roles see nothing
- No mutation of records, no side effects
"""

from dataclasses import dataclass
from typing import Any, Optional

from courier_ops.security.roles import (
    ADMIN,
    AGENT,
    CUSTOMER,
    BRANCH,
    GLOBAL,
    NOTHING,
    OWN_RECORDS,
    ROLE_FILTER_FIELDS,
    ROLE_SCOPE_MAP,
)


@dataclass(frozen=True)
class ViewerScope:
    role: str
    visibility: str
    filter_fields: frozenset
    user_id: Optional[str] = None
    branch_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    @property
    def identity(self) -> tuple:
        """Hashable identity; a change means dependent data must be refetched."""
        return (self.role, self.user_id, self.branch_id)

    def can_filter(self, field_name: str) -> bool:
        return field_name in self.filter_fields

    def can_view(self, record: Any) -> bool:
        """
        Decide whether a record belongs to this viewer.

        Args:
            record: ShipmentRecord / BillRecord (anything with
                customer_id and branch_id attributes)

        Returns:
            True if the record is visible, False otherwise
        """
        if self.visibility == GLOBAL:
            return True

        if self.visibility == BRANCH:
            # Agents not yet attached to a branch are not narrowed
            if self.branch_id is None:
                return True
            return _as_str(getattr(record, "branch_id", None)) == self.branch_id

        if self.visibility == OWN_RECORDS:
            if self.user_id is None:
                return False
            return _as_str(getattr(record, "customer_id", None)) == self.user_id

        return False


def build_viewer_scope(
    role: str,
    user_id: Optional[Any] = None,
    branch_id: Optional[Any] = None,
) -> ViewerScope:
    """
    Factory keyed on role.

    Args:
        role: ADMIN / AGENT / CUSTOMER
        user_id: Signed-in user id (required for CUSTOMER visibility)
        branch_id: Branch the viewer belongs to (kept for AGENT only)

    Returns:
        ViewerScope; unknown or empty roles get a scope that sees nothing
    """
    normalized = role.strip().upper() if isinstance(role, str) else ""

    if normalized not in ROLE_SCOPE_MAP:
        return ViewerScope(
            role=normalized or "UNKNOWN",
            visibility=NOTHING,
            filter_fields=frozenset(),
        )

    return ViewerScope(
        role=normalized,
        visibility=ROLE_SCOPE_MAP[normalized],
        filter_fields=ROLE_FILTER_FIELDS[normalized],
        user_id=_as_str(user_id),
        branch_id=_as_str(branch_id) if normalized == AGENT else None,
    )


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = ["ViewerScope", "build_viewer_scope", "ADMIN", "AGENT", "CUSTOMER"]
