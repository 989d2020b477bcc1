"""
Sync coordinator: immediate, debounced and polled refreshes of ONE view.

Runs entirely on the FakeScheduler clock (tests/conftest.py).
"""

import threading

import pytest

from courier_ops.core.models import DashboardSnapshot
from courier_ops.integrations.api_client import ApiError
from courier_ops.sync.coordinator import (
    EXTERNAL_EVENT,
    FETCHING,
    IDLE,
    MANUAL_REFRESH,
    MOUNT,
    PARAMS_CHANGED,
    POLL_TICK,
    SyncCoordinator,
)
from courier_ops.sync.notifications import SHIPMENT_UPDATED, NotificationChannel, notify_shipment_updated


class RecordingFetch:
    """Synchronous fetch that records every call."""

    def __init__(self):
        self.calls = []
        self.fail_next = False

    def __call__(self, **params):
        self.calls.append(params)
        if self.fail_next:
            self.fail_next = False
            raise ApiError("backend down")
        return DashboardSnapshot(period=params.get("period", "week"), branch_id=params.get("branch_id"))


@pytest.fixture
def channel():
    return NotificationChannel()


@pytest.fixture
def fetch():
    return RecordingFetch()


@pytest.fixture
def sync(fetch, scheduler, channel):
    coordinator = SyncCoordinator(
        fetch,
        scheduler=scheduler,
        channel=channel,
        debounce_ms=500,
        poll_seconds=30,
        params={"period": "week", "branch_id": None},
    )
    coordinator.start()
    yield coordinator
    coordinator.stop()


def test_mount_fetches_once_immediately(sync, fetch):
    assert sync.triggers == [MOUNT]
    assert fetch.calls == [{"period": "week", "branch_id": None}]
    assert sync.snapshot.period == "week"
    assert sync.state == IDLE


def test_start_is_idempotent(sync, fetch, channel):
    sync.start()
    assert len(fetch.calls) == 1
    assert channel.listener_count(SHIPMENT_UPDATED) == 1


def test_notification_burst_collapses_into_one_fetch(sync, scheduler, channel):
    """Notifications at 0, 100 and 200 ms -> one fetch at about 700 ms"""
    notify_shipment_updated("1", channel=channel)
    scheduler.advance(0.1)
    notify_shipment_updated("2", channel=channel)
    scheduler.advance(0.1)
    notify_shipment_updated("3", channel=channel)

    scheduler.advance(0.49)
    assert sync.triggers == [MOUNT]
    assert sync.has_pending_refresh

    scheduler.advance(0.02)
    assert sync.triggers == [MOUNT, EXTERNAL_EVENT]
    assert not sync.has_pending_refresh


def test_spaced_notifications_fetch_twice(sync, scheduler, channel):
    """Notifications at 0 and 600 ms -> two fetches"""
    notify_shipment_updated(channel=channel)
    scheduler.advance(0.6)
    notify_shipment_updated(channel=channel)
    scheduler.advance(0.6)

    assert sync.triggers == [MOUNT, EXTERNAL_EVENT, EXTERNAL_EVENT]


def test_polling_runs_without_notifications(sync, scheduler):
    scheduler.advance(30)
    assert sync.triggers == [MOUNT, POLL_TICK]

    scheduler.advance(30)
    assert sync.triggers == [MOUNT, POLL_TICK, POLL_TICK]


def test_params_change_fetches_immediately_and_drops_pending_debounce(sync, scheduler, channel, fetch):
    notify_shipment_updated(channel=channel)

    assert sync.set_params(period="month") is True
    assert fetch.calls[-1] == {"period": "month", "branch_id": None}
    assert sync.snapshot.period == "month"
    assert not sync.has_pending_refresh

    scheduler.advance(1)
    assert sync.triggers == [MOUNT, PARAMS_CHANGED]


def test_unchanged_params_do_not_refetch(sync, fetch):
    assert sync.set_params(period="week") is False
    assert len(fetch.calls) == 1


def test_params_change_restarts_poll_period(sync, scheduler):
    scheduler.advance(20)
    sync.set_params(branch_id="B1")
    scheduler.advance(20)
    assert POLL_TICK not in sync.triggers

    scheduler.advance(10)
    assert sync.triggers[-1] == POLL_TICK


def test_stop_cancels_everything(sync, scheduler, channel, fetch):
    notify_shipment_updated(channel=channel)
    sync.stop()

    assert not sync.active
    assert channel.listener_count(SHIPMENT_UPDATED) == 0
    assert scheduler.pending() == []

    notify_shipment_updated(channel=channel)
    scheduler.advance(120)
    sync.refresh()
    assert len(fetch.calls) == 1

    sync.stop()


def test_failed_fetch_keeps_previous_snapshot(sync, fetch, scheduler):
    errors = []
    sync._on_error = errors.append
    previous = sync.snapshot

    fetch.fail_next = True
    scheduler.advance(30)

    assert sync.snapshot is previous
    assert isinstance(sync.last_error, ApiError)
    assert len(errors) == 1

    sync.refresh()
    assert sync.last_error is None
    assert sync.triggers[-1] == MANUAL_REFRESH
    assert sync.snapshot is not previous


def test_on_update_receives_whole_snapshot(fetch, scheduler):
    applied = []
    coordinator = SyncCoordinator(fetch, scheduler=scheduler, on_update=applied.append, params={"period": "year"})
    coordinator.start()

    assert len(applied) == 1
    assert applied[0].period == "year"
    coordinator.stop()


# ==================================================
# ASYNC FETCHES
# ==================================================

def async_fetch_factory():

    async def fetch(**params):
        return params

    return fetch


def test_stale_response_is_discarded(scheduler):
    coordinator = SyncCoordinator(async_fetch_factory(), scheduler=scheduler, params={"period": "week"})
    coordinator.start()
    coordinator.set_params(period="month")
    assert coordinator.state == FETCHING

    scheduler.resolve(1, value="month-data")
    scheduler.resolve(0, value="week-data")

    assert coordinator.snapshot == "month-data"
    assert coordinator.state == IDLE
    coordinator.stop()


def test_stale_error_does_not_overwrite_fresh_state(scheduler):
    coordinator = SyncCoordinator(async_fetch_factory(), scheduler=scheduler)
    coordinator.start()
    coordinator.refresh()

    scheduler.resolve(1, value="fresh")
    scheduler.resolve(0, error=ApiError("late failure"))

    assert coordinator.snapshot == "fresh"
    assert coordinator.last_error is None
    coordinator.stop()


def test_last_write_wins_when_stale_guard_disabled(scheduler):
    coordinator = SyncCoordinator(
        async_fetch_factory(), scheduler=scheduler, params={"period": "week"}, discard_stale=False
    )
    coordinator.start()
    coordinator.set_params(period="month")

    scheduler.resolve(1, value="month-data")
    scheduler.resolve(0, value="week-data")

    assert coordinator.snapshot == "week-data"
    coordinator.stop()


def test_response_after_teardown_is_dropped(scheduler):
    applied = []
    coordinator = SyncCoordinator(async_fetch_factory(), scheduler=scheduler, on_update=applied.append)
    coordinator.start()
    coordinator.stop()

    scheduler.resolve(0, value="late")

    assert coordinator.snapshot is None
    assert applied == []


# ==================================================
# SETUP FAILURES AND ABANDONED SESSIONS
# ==================================================

class BrokenScheduler:

    def call_later(self, delay, callback):
        raise RuntimeError("no running event loop")

    def submit(self, awaitable, done):
        raise RuntimeError("no running event loop")


def test_failed_start_rolls_back(fetch, channel, scheduler):
    coordinator = SyncCoordinator(fetch, scheduler=BrokenScheduler(), channel=channel)

    with pytest.raises(RuntimeError):
        coordinator.start()

    assert not coordinator.active
    assert channel.listener_count(SHIPMENT_UPDATED) == 0
    assert coordinator.fetch_count == 0

    notify_shipment_updated(channel=channel)
    assert fetch.calls == []

    coordinator._scheduler = scheduler
    coordinator.start()
    assert coordinator.active
    assert coordinator.triggers == [MOUNT]
    coordinator.stop()


def test_poll_stops_once_session_is_gone(fetch, scheduler, channel):
    alive = [True]
    coordinator = SyncCoordinator(fetch, scheduler=scheduler, channel=channel, is_alive=lambda: alive[0])
    coordinator.start()

    alive[0] = False
    scheduler.advance(30)

    assert not coordinator.active
    assert coordinator.fetch_count == 1
    assert channel.listener_count(SHIPMENT_UPDATED) == 0
    assert scheduler.pending() == []

    scheduler.advance(300)
    assert len(fetch.calls) == 1


def test_debounce_stops_once_session_is_gone(fetch, scheduler, channel):
    alive = [True]
    coordinator = SyncCoordinator(fetch, scheduler=scheduler, channel=channel, is_alive=lambda: alive[0])
    coordinator.start()

    notify_shipment_updated(channel=channel)
    alive[0] = False
    scheduler.advance(1)

    assert not coordinator.active
    assert coordinator.triggers == [MOUNT]
    assert channel.listener_count(SHIPMENT_UPDATED) == 0
    assert scheduler.pending() == []


def test_stop_from_another_thread_during_fetch(scheduler):
    """A slow fetch must not block teardown; its result is then dropped"""
    stopper = {}

    def fetch(**params):
        thread = threading.Thread(target=coordinator.stop)
        thread.start()
        thread.join(timeout=1)
        stopper["thread"] = thread
        return "late"

    coordinator = SyncCoordinator(fetch, scheduler=scheduler)
    coordinator.start()

    assert not stopper["thread"].is_alive()
    assert not coordinator.active
    assert coordinator.snapshot is None
    assert coordinator.state == IDLE
