"""Configuration for the injection router."""

from dataclasses import dataclass

from reloadrouter.events.types import INJECTION_NOTIFICATION


@dataclass
class InjectionConfig:
    """Configuration for an Injection router."""

    # Notification name the injection agent posts on
    notification_name: str = INJECTION_NOTIFICATION

    # Let ReloadAware hosts register themselves from did_load()
    auto_register: bool = False

    # Notify a parent when one of its direct children's class is reloaded
    escalate_to_parents: bool = True

    # Number of dispatch results kept for inspection
    history_limit: int = 50
