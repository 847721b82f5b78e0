"""Event system for class-injection notifications."""

from reloadrouter.events.adapter import ReloadEventAdapter, normalize
from reloadrouter.events.bus import EventBus
from reloadrouter.events.types import INJECTION_NOTIFICATION, Notification, ReloadEvent

__all__ = [
    "INJECTION_NOTIFICATION",
    "EventBus",
    "Notification",
    "ReloadEvent",
    "ReloadEventAdapter",
    "normalize",
]
