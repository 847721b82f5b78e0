"""Normalization of raw injection notifications into ReloadEvents."""

import logging
from collections.abc import Callable
from typing import Any

from reloadrouter.domain.models import class_identity
from reloadrouter.events.bus import EventBus, make_ref
from reloadrouter.events.types import INJECTION_NOTIFICATION, Notification, ReloadEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[ReloadEvent], Any]


def _first_element(payload: Any) -> Any:
    """Resolve a sequence payload to its first element (or None when empty)."""
    if isinstance(payload, (list, tuple)):
        return payload[0] if payload else None
    return payload


def normalize(notification: Notification) -> ReloadEvent:
    """Extract the reloaded subject from a raw notification.

    Payload handling:
    - a list or tuple resolves to its first element only
    - a class resolves to a class-identity-only event
    - a non-empty string is taken as a class identity
    - any other object becomes the instance subject

    When nothing usable is found, ``user_info["class_identity"]`` is tried.
    Never raises; an unusable payload yields an empty event that matches nothing.
    """
    payload = notification.object
    element = _first_element(payload)

    subject: Any = None
    identity: str | None = None

    if element is None or isinstance(element, (list, tuple, dict, bytes)):
        pass
    elif isinstance(element, type):
        identity = class_identity(element)
    elif isinstance(element, str):
        identity = element or None
    else:
        subject = element
        identity = class_identity(element)

    if identity is None:
        fallback = notification.user_info.get("class_identity")
        if isinstance(fallback, str) and fallback:
            identity = fallback

    event = ReloadEvent(
        name=notification.name,
        subject=subject,
        subject_class_identity=identity,
        raw_payload=payload,
    )
    if event.is_empty:
        logger.debug(f"Notification {notification.name} carried no usable subject")
    return event


class ReloadEventAdapter:
    """Subscribes to injection notifications and hands out ReloadEvents.

    Wraps each handler so it receives a normalized event instead of the
    raw notification. Bound-method handlers are held weakly. Subscribing
    the same handler twice is a no-op.
    """

    def __init__(self, bus: EventBus, event_name: str = INJECTION_NOTIFICATION):
        self.bus = bus
        self.event_name = event_name
        self._wrappers: list[tuple[Callable[[], EventHandler | None], Callable[[Notification], None]]] = []

    def subscribe(self, handler: EventHandler) -> None:
        """Subscribe a handler that receives normalized ReloadEvents.

        Once a weakly held handler is collected, its bus subscription
        removes itself on the next notification.
        """
        if any(ref() == handler for ref, _ in self._wrappers):
            return

        ref = make_ref(handler)

        def on_notification(notification: Notification) -> None:
            target = ref()
            if target is None:
                self._discard(on_notification)
                return
            target(normalize(notification))

        self._wrappers.append((ref, on_notification))
        self.bus.subscribe(self.event_name, on_notification)

    def _discard(self, wrapper: Callable[[Notification], None]) -> None:
        self.bus.unsubscribe(self.event_name, wrapper)
        self._wrappers = [(ref, w) for ref, w in self._wrappers if w is not wrapper]
        logger.debug(f"Dropped collected handler from {self.event_name}")

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove a handler. Unknown handlers are ignored."""
        kept = []
        for ref, wrapper in self._wrappers:
            if ref() == handler:
                self.bus.unsubscribe(self.event_name, wrapper)
            else:
                kept.append((ref, wrapper))
        self._wrappers = kept

    def close(self) -> None:
        """Remove every subscription made through this adapter."""
        for _ref, wrapper in self._wrappers:
            self.bus.unsubscribe(self.event_name, wrapper)
        self._wrappers = []

    @property
    def handler_count(self) -> int:
        return len(self._wrappers)
