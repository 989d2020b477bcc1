# Dashboard freshness: notifications, schedulers, sync coordinator

from .coordinator import SyncCoordinator
from .notifications import SHIPMENT_UPDATED, NotificationChannel, notify_shipment_updated, shipment_channel
from .scheduler import AsyncioScheduler, ThreadingScheduler

__all__ = [
    'SyncCoordinator',
    'SHIPMENT_UPDATED',
    'NotificationChannel',
    'notify_shipment_updated',
    'shipment_channel',
    'AsyncioScheduler',
    'ThreadingScheduler',
]
