"""
IN-PROCESS NOTIFICATION CHANNEL

Purpose:
- Named publish/subscribe channel for change notifications
  ("shipment:updated")
- Any producer may publish; dashboards only subscribe
- No delivery guarantees: a missed notification is covered by polling

Requirements:
• Subscribers get a handle and detach through it (idempotent)
• A failing subscriber never breaks the producer or other subscribers
• Never block the producer
"""

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

SHIPMENT_UPDATED = "shipment:updated"

Listener = Callable[[Any], None]


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() to detach."""

    def __init__(self, channel: "NotificationChannel", name: str, listener: Listener):
        self._channel = channel
        self.name = name
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> bool:
        """Detach the listener. Returns False when already detached."""
        if not self.active:
            return False
        self.active = False
        self._channel._remove(self)
        return True


class NotificationChannel:

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, List[Subscription]] = defaultdict(list)

    def subscribe(self, name: str, listener: Listener) -> Subscription:
        subscription = Subscription(self, name, listener)
        with self._lock:
            self._subscriptions[name].append(subscription)
        return subscription

    def publish(self, name: str, payload: Any = None) -> int:
        """
        Deliver `payload` to every current listener of `name`.

        Returns:
            Number of listeners that were called
        """
        with self._lock:
            targets = list(self._subscriptions.get(name, ()))

        delivered = 0
        for subscription in targets:
            if not subscription.active:
                continue
            try:
                subscription.listener(payload)
                delivered += 1
            except Exception as e:
                logger.error(f"Listener for '{name}' failed: {str(e)}")
        return delivered

    def listener_count(self, name: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(name, ()))

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            listeners = self._subscriptions.get(subscription.name, [])
            if subscription in listeners:
                listeners.remove(subscription)
            if not listeners:
                self._subscriptions.pop(subscription.name, None)


# Process-wide default channel
shipment_channel = NotificationChannel()


def notify_shipment_updated(
    shipment_id: Optional[str] = None,
    channel: Optional[NotificationChannel] = None,
) -> int:
    """Raise "shipment:updated" after any in-process shipment mutation."""
    target = channel or shipment_channel
    return target.publish(SHIPMENT_UPDATED, {"shipment_id": shipment_id})
