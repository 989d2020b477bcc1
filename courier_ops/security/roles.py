"""
ROLE DEFINITIONS

Dashboard roles and the record-visibility scope each one gets.

Rules:
- No logic, only declarations
- Roles must be explicit strings
- Used by viewer_scope.py
"""

from typing import Literal

# Role definitions
ADMIN: Literal["ADMIN"] = "ADMIN"
AGENT: Literal["AGENT"] = "AGENT"
CUSTOMER: Literal["CUSTOMER"] = "CUSTOMER"

# Visibility scope definitions
GLOBAL: Literal["GLOBAL"] = "GLOBAL"
BRANCH: Literal["BRANCH"] = "BRANCH"
OWN_RECORDS: Literal["OWN_RECORDS"] = "OWN_RECORDS"
NOTHING: Literal["NOTHING"] = "NOTHING"

# Role to scope mapping
ROLE_SCOPE_MAP: dict[str, str] = {
    ADMIN: GLOBAL,
    AGENT: BRANCH,
    CUSTOMER: OWN_RECORDS,
}

# Filter fields
FIELD_TRACKING = "tracking_text"
FIELD_PHONE = "phone"
FIELD_BRANCH = "branch"
FIELD_SERVICE_TYPE = "service_type"

ALL_FILTER_FIELDS: list[str] = [
    FIELD_TRACKING,
    FIELD_PHONE,
    FIELD_BRANCH,
    FIELD_SERVICE_TYPE,
]

# Filter fields each role may actually apply
ROLE_FILTER_FIELDS: dict[str, frozenset] = {
    ADMIN: frozenset(ALL_FILTER_FIELDS),
    AGENT: frozenset({FIELD_TRACKING, FIELD_PHONE, FIELD_SERVICE_TYPE}),
    CUSTOMER: frozenset({FIELD_TRACKING, FIELD_SERVICE_TYPE}),
}

# All roles
ALL_ROLES: list[str] = [
    ADMIN,
    AGENT,
    CUSTOMER,
]
