"""
Response adapters: alternate field names fold into one record shape.
"""

import pytest

from courier_ops.integrations.adapters import (
    MalformedRecordError,
    normalize_bill,
    normalize_branches,
    normalize_dashboard,
    normalize_shipment,
    normalize_shipments,
)


def test_camel_case_shipment():
    record = normalize_shipment({
        "id": 42,
        "trackingId": "CX-ABC",
        "status": "IN_TRANSIT",
        "serviceType": "Express",
        "branch": {"id": 3, "name": "Uttara"},
        "details": {"type": "Documents", "weight": "1.2 kg", "dimensions": "10x10x2"},
        "pricing": {"total": 500000},
        "customerId": 9,
        "sender": {"name": "Ana", "phone": "555-1", "address": "Gulshan"},
    })

    assert record.id == "42"
    assert record.tracking_id == "CX-ABC"
    assert record.service_type == "Express"
    assert record.branch_id == "3"
    assert record.branch_name == "Uttara"
    assert record.category == "Documents"
    assert record.weight == "1.2 kg"
    assert record.fee_minor_units == 500000
    assert record.customer_id == "9"
    assert record.sender.phone == "555-1"
    assert record.receiver.phone == "N/A"


def test_snake_case_shipment_and_defaults():
    record = normalize_shipment({
        "shipment_id": "7",
        "shipment_status": "BOOKED",
        "branch_name": "Mirpur",
        "branch_id": "5",
        "fee": "1,250",
        "user_id": "u-1",
    })

    assert record.id == "7"
    assert record.tracking_id == "CX-0000000007"
    assert record.status == "BOOKED"
    assert record.branch_name == "Mirpur"
    assert record.fee_minor_units == 1250
    assert record.customer_id == "u-1"
    assert record.service_type == "Standard"
    assert record.category == "Parcel"
    assert record.dimensions == "N/A"


def test_unknown_status_is_kept_verbatim():
    assert normalize_shipment({"id": 1, "status": "TELEPORTED"}).status == "TELEPORTED"
    assert normalize_shipment({"id": 1}).status is None


def test_non_mapping_items_are_skipped():
    records = normalize_shipments([{"id": 1}, "garbage", None, {"id": 2}])
    assert [r.id for r in records] == ["1", "2"]

    with pytest.raises(MalformedRecordError):
        normalize_shipment(["not", "a", "dict"])


def test_bill_fallbacks():
    bill = normalize_bill({"billId": "B-9", "trackingId": "CX-1", "total_amount": 75000, "created_at": "2026-03-01"})

    assert bill.bill_id == "B-9"
    assert bill.tracking_id == "CX-1"
    assert bill.amount_minor_units == 75000
    assert bill.date == "2026-03-01"
    assert bill.customer_name == "N/A"


def test_branches_without_id_are_dropped():
    branches = normalize_branches([{"id": 1, "name": "Uttara"}, {"name": "Ghost"}, "x"])
    assert [(b.id, b.name) for b in branches] == [("1", "Uttara")]


def test_dashboard_defaults_and_alias():
    snapshot = normalize_dashboard(
        {
            "stats": {"totalCouriers": "12", "deliveredCouriers": 4, "totalRevenue": 250000},
            "charts": {"regionalProductMix": [{"name": "Uttara", "parcel": 3}], "weeklyRevenue": None},
        },
        period="month",
        branch_id="3",
    )

    assert snapshot.stats.total == 12
    assert snapshot.stats.delivered == 4
    assert snapshot.stats.pending == 0
    assert snapshot.stats.total_revenue_minor_units == 250000
    assert snapshot.series("branchProductMix") == [{"name": "Uttara", "parcel": 3}]
    assert snapshot.series("weeklyRevenue") == []
    assert snapshot.period == "month"
    assert snapshot.branch_id == "3"
    assert snapshot.fetched_at is not None


def test_dashboard_from_garbage_is_all_zero():
    snapshot = normalize_dashboard(None)
    assert snapshot.stats.total == 0
    assert snapshot.series("topBranches") == []


def test_unparseable_chart_measures_read_as_zero():
    snapshot = normalize_dashboard({
        "charts": {
            "weeklyRevenue": [{"name": "W1", "revenue": "N/A"}, {"name": 2, "revenue": "1,500"}],
            "topBranches": [{"name": "Uttara", "city": "Dhaka", "deliveries": "nan", "revenue": float("inf")}],
        },
    })

    assert snapshot.series("weeklyRevenue") == [
        {"name": "W1", "revenue": 0},
        {"name": "2", "revenue": 1500},
    ]
    assert snapshot.series("topBranches") == [
        {"name": "Uttara", "city": "Dhaka", "deliveries": 0, "revenue": 0},
    ]


def test_fractional_minor_units_are_rounded():
    record = normalize_shipment({"id": 1, "fee": "12.6"})
    bill = normalize_bill({"billId": "B-1", "amount": "99.4"})

    assert record.fee_minor_units == 13
    assert isinstance(record.fee_minor_units, int)
    assert bill.amount_minor_units == 99
    assert isinstance(bill.amount_minor_units, int)
