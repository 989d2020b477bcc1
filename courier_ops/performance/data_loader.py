"""
Shared Shipment Feed Loader

CRITICAL PRINCIPLE:
The shipment feed is fetched ONCE and every phase view (Pickup, In
Transit, Delivered, Return, Issue) is materialized from that same feed.
Switching phase never re-fetches.

DESIGN:
1. Feed cached in a session-scoped mapping (st.session_state by default)
2. Cache key includes the viewer identity, so a role switch reloads
3. "shipment:updated" invalidates the cache; next access reloads
4. A failed reload keeps the previous feed and records last_error
5. A loader whose session is gone unsubscribes on the next notification
"""

import logging
import time
from typing import Any, Callable, Dict, List, MutableMapping, Optional

import streamlit as st

from courier_ops.core.models import ShipmentRecord
from courier_ops.core.phase_classifier import count_by_phase, partition_by_phase
from courier_ops.integrations.api_client import ApiError, CourierApiClient
from courier_ops.security.viewer_scope import ViewerScope
from courier_ops.sync.notifications import SHIPMENT_UPDATED, NotificationChannel, Subscription

logger = logging.getLogger(__name__)


class FeedLoader:
    """
    Session-scoped loader for the shipment feed.

    Usage:
        loader = FeedLoader(client, viewer)
        pickup = loader.get_phase_view("PICKUP")
        issues = loader.get_phase_view("ISSUE")    # same feed, no refetch
    """

    _FEED_KEY = "_shipment_feed"

    def __init__(
        self,
        client: CourierApiClient,
        viewer: ViewerScope,
        state: Optional[MutableMapping[str, Any]] = None,
        is_alive: Optional[Callable[[], bool]] = None,
    ):
        self.client = client
        self.viewer = viewer
        self._state = state if state is not None else st.session_state
        self._subscription: Optional[Subscription] = None
        self._is_alive = is_alive
        self.last_error: Optional[ApiError] = None
        self._stale = False

    # ==================================================
    # FEED ACCESS
    # ==================================================

    def get_feed(self) -> List[ShipmentRecord]:
        cache = self._cache()
        if cache.get("identity") == self.viewer.identity and not self._stale:
            return cache["records"]

        self._stale = False
        try:
            records = self.client.fetch_shipments(self.viewer)
        except ApiError as e:
            self.last_error = e
            logger.error(f"Shipment feed reload failed, keeping previous feed: {str(e)}")
            if cache.get("identity") == self.viewer.identity:
                return cache["records"]
            return []

        self.last_error = None
        self._state[self._FEED_KEY] = {
            "identity": self.viewer.identity,
            "records": records,
            "loaded_at": time.time(),
        }
        return records

    def get_phase_view(self, phase: str) -> List[ShipmentRecord]:
        return partition_by_phase(self.get_feed(), phase)

    def get_phase_counts(self) -> Dict[str, int]:
        return count_by_phase(self.get_feed())

    @property
    def loaded_at(self) -> Optional[float]:
        return self._cache().get("loaded_at")

    # ==================================================
    # INVALIDATION
    # ==================================================

    def invalidate(self, payload: Any = None) -> None:
        """
        Mark the feed stale; the next access reloads it.

        Only flips a flag: listeners run on notifier threads, which must
        not touch st.session_state. A loader whose session has ended
        detaches itself instead.
        """
        if self._is_alive is not None and not self._is_alive():
            logger.info("Hosting session ended, detaching shipment feed listener")
            self.unwatch()
            return
        self._stale = True

    def watch(self, channel: NotificationChannel) -> None:
        """Invalidate on every "shipment:updated". Subscribes only once."""
        if self._subscription is None:
            self._subscription = channel.subscribe(SHIPMENT_UPDATED, self.invalidate)

    def unwatch(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _cache(self) -> Dict[str, Any]:
        return self._state.get(self._FEED_KEY) or {}
