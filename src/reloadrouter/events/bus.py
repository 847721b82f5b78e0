"""Event bus for delivering injection notifications to subscribers."""

import logging
import threading
import types
import weakref
from collections.abc import Callable
from typing import Any

from reloadrouter.events.types import Notification

logger = logging.getLogger(__name__)

Handler = Callable[[Notification], Any]


def make_ref(handler: Handler) -> Callable[[], Handler | None]:
    """Hold bound methods weakly so subscribing never keeps an observer alive."""
    if isinstance(handler, types.MethodType):
        try:
            return weakref.WeakMethod(handler)
        except TypeError:
            # Owner without __weakref__ slot
            pass

    def strong() -> Handler:
        return handler

    return strong


class EventBus:
    """Injectable publish/subscribe bus keyed by notification name.

    Delivery is synchronous on the publishing thread. Subscribing the same
    (name, handler) pair twice is a no-op.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[[], Handler | None]]] = {}
        self._lock = threading.RLock()

    def subscribe(self, event_name: str, handler: Handler) -> None:
        """Subscribe a handler to notifications with the given name.

        Args:
            event_name: Notification name to listen for.
            handler: Callable receiving each matching Notification.
        """
        with self._lock:
            entries = self._handlers.setdefault(event_name, [])
            if any(ref() == handler for ref in entries):
                logger.debug(f"Handler already subscribed to {event_name}")
                return
            entries.append(make_ref(handler))
            logger.debug(f"Subscribed handler to {event_name}")

    def unsubscribe(self, event_name: str, handler: Handler) -> None:
        """Unsubscribe a handler. Unknown pairs are ignored."""
        with self._lock:
            entries = self._handlers.get(event_name)
            if not entries:
                return
            entries[:] = [ref for ref in entries if ref() != handler]
            if not entries:
                del self._handlers[event_name]

    def _live_handlers(self, event_name: str) -> list[Handler]:
        with self._lock:
            entries = self._handlers.get(event_name, [])
            live: list[Handler] = []
            dead = 0
            for ref in entries:
                handler = ref()
                if handler is None:
                    dead += 1
                else:
                    live.append(handler)
            if dead:
                entries[:] = [ref for ref in entries if ref() is not None]
                logger.debug(f"Pruned {dead} collected handlers from {event_name}")
            return live

    def publish(self, notification: Notification) -> int:
        """Publish a notification to all handlers subscribed to its name.

        Returns:
            Number of handlers the notification was delivered to.
        """
        logger.debug(f"Publishing notification: {notification.name}")

        delivered = 0
        for handler in self._live_handlers(notification.name):
            try:
                handler(notification)
                delivered += 1
            except Exception:
                logger.exception(f"Handler error for {notification.name}")
        return delivered

    def post(
        self,
        name: str,
        obj: Any = None,
        user_info: dict[str, Any] | None = None,
    ) -> Notification:
        """Convenience method to create and publish a notification.

        Args:
            name: Notification name
            obj: Notification payload (instance, class, or sequence of them)
            user_info: Optional extra data

        Returns:
            The published notification
        """
        notification = Notification(name=name, object=obj, user_info=user_info or {})
        self.publish(notification)
        return notification

    def subscriber_count(self, event_name: str | None = None) -> int:
        """Get the number of subscriptions, optionally for a single name."""
        with self._lock:
            if event_name is not None:
                return len(self._handlers.get(event_name, []))
            return sum(len(entries) for entries in self._handlers.values())
