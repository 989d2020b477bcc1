"""
DASHBOARD SYNC COORDINATOR

Purpose:
- Keep one dashboard view's aggregates fresh without manual refresh
- Three independent triggers against ONE fetch operation:

    MOUNT / PARAMS_CHANGED  -> fetch immediately
    EXTERNAL_EVENT          -> debounce: every notification cancels the
                               pending fetch and re-arms it; fires only
                               after a quiet period
    POLL_TICK               -> fixed-period backstop, independent of the
                               notification channel

Rules:
- Owns its timer handles and its subscription; nothing global
- stop() cancels the debounce timer, the poll timer and the listener
  exactly once; afterwards nothing fires and no response is applied
- Overlapping fetches are not coalesced; each response carries a
  sequence number and a response older than the last applied one is
  discarded (discard_stale=False restores last-write-wins)
- fetch runs outside the lock, so stop() never waits behind a slow request
- A host that vanishes without calling stop() (closed browser tab) is
  detected by is_alive at the next timer callback
- A failed fetch keeps the previous snapshot and records last_error
- Stats and charts are swapped in together (one snapshot object)
"""

import inspect
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from courier_ops import config
from courier_ops.sync.notifications import SHIPMENT_UPDATED, NotificationChannel, Subscription
from courier_ops.sync.scheduler import AsyncioScheduler

logger = logging.getLogger(__name__)


# ==================================================
# STATES & TRIGGERS
# ==================================================

IDLE = "IDLE"
FETCHING = "FETCHING"

MOUNT = "MOUNT"
PARAMS_CHANGED = "PARAMS_CHANGED"
EXTERNAL_EVENT = "EXTERNAL_EVENT"
POLL_TICK = "POLL_TICK"
MANUAL_REFRESH = "MANUAL_REFRESH"


class SyncCoordinator:
    """
    One instance per active dashboard view.

    Args:
        fetch: Callable taking the current params as keyword arguments and
            returning a snapshot, or an awaitable resolving to one
        scheduler: Provider of call_later()/submit()
        channel: Notification channel to subscribe to (None = no push)
        event_name: Notification name that triggers a debounced refresh
        debounce_ms: Quiet period after the last notification
        poll_seconds: Backstop polling period
        on_update: Called with every applied snapshot
        on_error: Called with every fetch error
        params: Initial fetch parameters (period, branch_id, viewer, ...)
        discard_stale: Drop responses older than the last applied one
        is_alive: Predicate for the hosting session; when it turns False
            the next timer callback stops the coordinator instead of
            fetching (None = always alive)
    """

    def __init__(
        self,
        fetch: Callable[..., Any],
        *,
        scheduler: Optional[Any] = None,
        channel: Optional[NotificationChannel] = None,
        event_name: str = SHIPMENT_UPDATED,
        debounce_ms: int = config.DEBOUNCE_MS,
        poll_seconds: float = config.POLL_SECONDS,
        on_update: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
        params: Optional[Dict[str, Any]] = None,
        discard_stale: bool = True,
        is_alive: Optional[Callable[[], bool]] = None,
    ):
        self._fetch = fetch
        self._scheduler = scheduler or AsyncioScheduler()
        self._channel = channel
        self._event_name = event_name
        self._debounce_seconds = debounce_ms / 1000.0
        self._poll_seconds = poll_seconds
        self._on_update = on_update
        self._on_error = on_error
        self._discard_stale = discard_stale
        self._is_alive = is_alive
        self._lock = threading.RLock()

        self.params: Dict[str, Any] = dict(params or {})
        self.snapshot: Any = None
        self.last_error: Optional[BaseException] = None
        self.fetch_count = 0
        self.triggers: List[str] = []

        self._active = False
        self._subscription: Optional[Subscription] = None
        self._debounce_handle = None
        self._poll_handle = None
        self._in_flight = 0
        self._issued_seq = 0
        self._applied_seq = 0

    # ==================================================
    # LIFECYCLE
    # ==================================================

    @property
    def active(self) -> bool:
        return self._active

    @property
    def state(self) -> str:
        return FETCHING if self._in_flight else IDLE

    @property
    def has_pending_refresh(self) -> bool:
        return self._debounce_handle is not None

    def start(self) -> None:
        """
        Attach the listener, arm polling, fetch once. Idempotent.

        If the listener or the poll timer cannot be set up, both are
        rolled back and the coordinator stays stopped.
        """
        with self._lock:
            if self._active:
                return
            self._active = True

            try:
                if self._channel is not None:
                    self._subscription = self._channel.subscribe(self._event_name, self.notify)
                self._arm_poll()
            except Exception:
                self._active = False
                self._detach()
                raise

            logger.info(f"Sync started (poll={self._poll_seconds}s, debounce={self._debounce_seconds}s)")
            ticket = self._begin_fetch(MOUNT)

        self._run_fetch(*ticket)

    def stop(self) -> None:
        """Cancel every timer and detach the listener. Idempotent."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            self._detach()
            logger.info("Sync stopped")

    # ==================================================
    # TRIGGERS
    # ==================================================

    def set_params(self, **changes: Any) -> bool:
        """
        Update fetch dependencies (period, branch, viewer identity).

        A real change drops any pending debounced fetch, re-arms polling
        and fetches immediately. Returns True when something changed.
        """
        with self._lock:
            updated = {**self.params, **changes}
            if updated == self.params:
                return False
            self.params = updated

            if not self._active:
                return True

            self._cancel_debounce()
            self._arm_poll()
            ticket = self._begin_fetch(PARAMS_CHANGED)

        self._run_fetch(*ticket)
        return True

    def notify(self, payload: Any = None) -> None:
        """Notification listener: (re)arm the debounce timer."""
        with self._lock:
            if not self._active:
                return
            self._cancel_debounce()
            self._debounce_handle = self._scheduler.call_later(
                self._debounce_seconds, self._debounce_fired
            )

    def refresh(self) -> None:
        """Explicit retry (e.g. after a failed fetch)."""
        with self._lock:
            if not self._active:
                return
            ticket = self._begin_fetch(MANUAL_REFRESH)

        self._run_fetch(*ticket)

    # ==================================================
    # INTERNALS
    # ==================================================

    def _detach(self) -> None:
        self._cancel_debounce()
        if self._poll_handle is not None:
            self._poll_handle.cancel()
            self._poll_handle = None
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _host_gone(self) -> bool:
        """True when the hosting session ended without tearing us down."""
        if self._is_alive is None or self._is_alive():
            return False
        logger.info("Hosting session ended, stopping sync")
        self.stop()
        return True

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _debounce_fired(self) -> None:
        if self._host_gone():
            return
        with self._lock:
            self._debounce_handle = None
            if not self._active:
                return
            ticket = self._begin_fetch(EXTERNAL_EVENT)

        self._run_fetch(*ticket)

    def _arm_poll(self) -> None:
        if self._poll_handle is not None:
            self._poll_handle.cancel()
        self._poll_handle = self._scheduler.call_later(self._poll_seconds, self._poll_fired)

    def _poll_fired(self) -> None:
        if self._host_gone():
            return
        with self._lock:
            self._poll_handle = None
            if not self._active:
                return
            self._arm_poll()
            ticket = self._begin_fetch(POLL_TICK)

        self._run_fetch(*ticket)

    def _begin_fetch(self, trigger: str) -> Tuple[int, str, Dict[str, Any]]:
        """Book-keeping for a new fetch; caller holds the lock."""
        self._issued_seq += 1
        self._in_flight += 1
        self.fetch_count += 1
        self.triggers.append(trigger)
        logger.debug(f"Fetch #{self._issued_seq} ({trigger})")
        return self._issued_seq, trigger, dict(self.params)

    def _run_fetch(self, seq: int, trigger: str, params: Dict[str, Any]) -> None:
        """Call fetch WITHOUT holding the lock; _complete re-acquires it."""
        try:
            result = self._fetch(**params)
        except Exception as e:
            self._complete(seq, trigger, None, e)
            return

        if inspect.isawaitable(result):
            self._scheduler.submit(
                result,
                lambda value, error: self._complete(seq, trigger, value, error),
            )
        else:
            self._complete(seq, trigger, result, None)


    def _complete(
        self,
        seq: int,
        trigger: str,
        result: Any,
        error: Optional[BaseException],
    ) -> None:
        with self._lock:
            self._in_flight = max(0, self._in_flight - 1)

            if not self._active:
                logger.debug(f"Dropping fetch #{seq} ({trigger}): view torn down")
                return

            if self._discard_stale and seq < self._applied_seq:
                logger.info(f"Discarding stale fetch #{seq}; #{self._applied_seq} already applied")
                return

            if error is not None:
                self.last_error = error
                logger.error(f"Dashboard fetch #{seq} ({trigger}) failed: {str(error)}")
                if self._on_error is not None:
                    self._on_error(error)
                return

            self._applied_seq = seq
            self.snapshot = result
            self.last_error = None
            if self._on_update is not None:
                self._on_update(result)
