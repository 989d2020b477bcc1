"""
Viewer scope: role -> filter capabilities + record visibility.
"""

from courier_ops.security.roles import (
    ALL_FILTER_FIELDS,
    FIELD_BRANCH,
    FIELD_PHONE,
    FIELD_SERVICE_TYPE,
    FIELD_TRACKING,
)
from courier_ops.security.viewer_scope import build_viewer_scope

from conftest import make_shipment


def test_admin_sees_everything_and_filters_everything():
    admin = build_viewer_scope("ADMIN", user_id="u1")

    assert admin.is_admin
    assert admin.visibility == "GLOBAL"
    assert all(admin.can_filter(f) for f in ALL_FILTER_FIELDS)
    assert admin.can_view(make_shipment("1", "BOOKED", branch_id="B9", customer_id="C9"))


def test_agent_cannot_filter_by_branch_and_sees_own_branch():
    agent = build_viewer_scope("agent", user_id="a1", branch_id=7)

    assert agent.role == "AGENT"
    assert agent.branch_id == "7"
    assert agent.can_filter(FIELD_PHONE)
    assert agent.can_filter(FIELD_TRACKING)
    assert not agent.can_filter(FIELD_BRANCH)
    assert agent.can_view(make_shipment("1", "BOOKED", branch_id="7"))
    assert not agent.can_view(make_shipment("2", "BOOKED", branch_id="8"))


def test_agent_without_branch_is_not_narrowed():
    agent = build_viewer_scope("AGENT", user_id="a1")
    assert agent.can_view(make_shipment("1", "BOOKED", branch_id="B2"))


def test_customer_cannot_filter_by_phone_or_branch():
    customer = build_viewer_scope("CUSTOMER", user_id="C1", branch_id="B1")

    assert customer.can_filter(FIELD_TRACKING)
    assert customer.can_filter(FIELD_SERVICE_TYPE)
    assert not customer.can_filter(FIELD_PHONE)
    assert not customer.can_filter(FIELD_BRANCH)
    assert customer.branch_id is None


def test_customer_sees_only_own_records():
    customer = build_viewer_scope("CUSTOMER", user_id="C1")

    assert customer.can_view(make_shipment("1", "BOOKED", customer_id="C1"))
    assert not customer.can_view(make_shipment("2", "BOOKED", customer_id="C2"))


def test_customer_without_user_id_sees_nothing():
    customer = build_viewer_scope("CUSTOMER")
    assert not customer.can_view(make_shipment("1", "BOOKED", customer_id="C1"))


def test_unknown_role_sees_nothing():
    scope = build_viewer_scope("COURIER_BOT", user_id="x")

    assert scope.visibility == "NOTHING"
    assert not any(scope.can_filter(f) for f in ALL_FILTER_FIELDS)
    assert not scope.can_view(make_shipment("1", "BOOKED"))

    assert build_viewer_scope("").role == "UNKNOWN"
    assert build_viewer_scope(None).visibility == "NOTHING"


def test_identity_changes_with_viewer():
    a = build_viewer_scope("ADMIN", user_id="u1")
    b = build_viewer_scope("ADMIN", user_id="u2")

    assert a.identity != b.identity
    assert a.identity == build_viewer_scope("admin", user_id="u1").identity
