"""Injection router facade.

Wires the event bus, candidate registry and dispatcher together so a host
application only has to register objects and let the injection agent post
its notifications.

Host object example::

    injection = Injection(bus=bus)
    token = injection.register_for_reload(view)           # calls view.injected()
    injection.set_children(token, [header, footer])

Plain observer example::

    injection.add_observer(on_reload)                     # receives ReloadEvents
"""

import logging
from collections.abc import Hashable, Iterable
from typing import Any

from reloadrouter.config import InjectionConfig
from reloadrouter.domain.models import Candidate, ReloadCallback, generate_token
from reloadrouter.events.adapter import EventHandler, ReloadEventAdapter
from reloadrouter.events.bus import EventBus
from reloadrouter.events.types import Notification, ReloadEvent
from reloadrouter.reload.dispatcher import DispatchResult, ReloadDispatcher
from reloadrouter.reload.registry import CandidateRegistry
from reloadrouter.reload.resolver import object_was_injected

logger = logging.getLogger(__name__)


class Injection:
    """Routes class-injection notifications to registered live objects."""

    def __init__(self, config: InjectionConfig | None = None, bus: EventBus | None = None):
        self.config = config or InjectionConfig()
        self.bus = bus or EventBus()
        self.registry = CandidateRegistry()
        self.dispatcher = ReloadDispatcher(
            self.registry,
            escalate_to_parents=self.config.escalate_to_parents,
            history_limit=self.config.history_limit,
        )
        self._routing = ReloadEventAdapter(self.bus, self.config.notification_name)
        self._observers = ReloadEventAdapter(self.bus, self.config.notification_name)
        self._routing.subscribe(self._on_reload)

    def _on_reload(self, event: ReloadEvent) -> None:
        self.dispatcher.dispatch(event)

    def register_for_reload(
        self,
        host: Any,
        callback: ReloadCallback | None = None,
        children: Iterable[Any] = (),
    ) -> str:
        """Register a host object to be notified when its class is reloaded.

        Args:
            host: The live object. Not kept alive by the registry.
            callback: Zero-argument reload callback. Defaults to ``host.injected``.
            children: Direct children; a reload of any child's class also
                notifies this host.

        Returns:
            Token to pass to ``deregister`` or ``set_children``.
        """
        token = generate_token()
        self.registry.register(token, Candidate.for_host(host, callback, children))
        return token

    def set_children(self, token: Hashable, children: Iterable[Any]) -> bool:
        """Replace the direct children of a registered host."""
        return self.registry.set_children(token, children)

    def deregister(self, token: Hashable) -> bool:
        """Stop notifying a host. Unknown or repeated tokens are a no-op."""
        return self.registry.deregister(token)

    def add_observer(self, handler: EventHandler) -> None:
        """Subscribe a callable that receives every normalized ReloadEvent."""
        self._observers.subscribe(handler)

    def remove_observer(self, handler: EventHandler) -> None:
        self._observers.unsubscribe(handler)

    @staticmethod
    def object_was_injected(obj: Any, event: ReloadEvent) -> bool:
        """Check if the event reloaded the class of ``obj``."""
        return object_was_injected(obj, event)

    def post(self, payload: Any = None, user_info: dict[str, Any] | None = None) -> Notification:
        """Publish a reload notification as the injection agent would."""
        return self.bus.post(self.config.notification_name, payload, user_info)

    @property
    def last_result(self) -> DispatchResult | None:
        """Result of the most recent dispatch pass, if any."""
        history = self.dispatcher.get_dispatch_history(limit=1)
        return history[-1] if history else None

    @property
    def candidate_count(self) -> int:
        return len(self.registry)

    def close(self) -> None:
        """Unsubscribe from the bus and forget all registrations."""
        self._routing.close()
        self._observers.close()
        self.registry.clear()
        logger.debug("Injection router closed")
