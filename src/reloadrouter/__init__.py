"""Reloadrouter - hot-reload notification routing for live objects."""

__version__ = "0.1.0"

from reloadrouter.auto import ReloadAware
from reloadrouter.config import InjectionConfig
from reloadrouter.events import EventBus, Notification, ReloadEvent
from reloadrouter.injection import Injection

__all__ = [
    "EventBus",
    "Injection",
    "InjectionConfig",
    "Notification",
    "ReloadAware",
    "ReloadEvent",
    "__version__",
]
