"""
Shared fixtures: a manual-clock scheduler and a small shipment feed.
"""

import pytest

from courier_ops.core.models import BillRecord, Participant, ShipmentRecord


class FakeHandle:

    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """
    Deterministic stand-in for AsyncioScheduler / ThreadingScheduler.

    Timers fire only inside advance(); submitted awaitables wait in
    `submitted` until the test resolves them.
    """

    def __init__(self):
        self.now = 0.0
        self.timers = []
        self.submitted = []

    def call_later(self, delay, callback):
        handle = FakeHandle(self.now + delay, callback)
        self.timers.append(handle)
        return handle

    def submit(self, awaitable, done):
        self.submitted.append((awaitable, done))

    def pending(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self.pending() if t.when <= target]
            if not due:
                break
            handle = min(due, key=lambda t: t.when)
            self.now = handle.when
            handle.fired = True
            handle.callback()
        self.now = target

    def resolve(self, index, value=None, error=None):
        awaitable, done = self.submitted[index]
        awaitable.close()
        done(value, error)


@pytest.fixture
def scheduler():
    return FakeScheduler()


def make_shipment(record_id, status, **overrides):
    values = {
        "id": record_id,
        "tracking_id": f"CX-{record_id.zfill(10)}",
        "status": status,
        "sender": Participant(name="Sender", phone="555-0100", address="Dhaka"),
        "receiver": Participant(name="Receiver", phone="555-0199", address="Chittagong"),
        "service_type": "Standard",
        "branch_id": "B1",
        "branch_name": "Downtown",
        "customer_id": "C1",
        "fee_minor_units": 250000,
    }
    values.update(overrides)
    return ShipmentRecord(**values)


@pytest.fixture
def feed():
    return [
        make_shipment("1", "BOOKED", service_type="Express"),
        make_shipment(
            "2",
            "IN_TRANSIT",
            branch_id="B2",
            branch_name="Airport",
            customer_id="C2",
            sender=Participant(name="Rahim", phone="555-0200", address="Sylhet"),
        ),
        make_shipment("3", "DELIVERED_SUCCESS"),
        make_shipment("4", "RETURN_CREATED", branch_id="B2", branch_name="Airport", customer_id="C3"),
        make_shipment("5", "DELIVERY_FAILED", customer_id="C2"),
        make_shipment("6", "MYSTERY_STATE"),
        make_shipment("7", None, branch_id="B2", branch_name="Airport"),
    ]


@pytest.fixture
def bills():
    return [
        BillRecord(id="1", bill_id="BILL-001", tracking_id="CX-0000000001",
                   amount_minor_units=250000, date="2026-01-24", customer_id="C1", branch_id="B1"),
        BillRecord(id="2", bill_id="BILL-002", tracking_id="CX-0000000002",
                   amount_minor_units=500000, date="2026-02-03", customer_id="C2", branch_id="B2"),
        BillRecord(id="3", bill_id="BILL-003", tracking_id="CX-0000000003",
                   amount_minor_units=125000, date="2026-02-15", customer_id="C1", branch_id="B1"),
    ]
