"""Opt-in auto-registration for reload-aware host objects.

Subclasses call ``did_load`` once they are ready to react to reloads
(e.g. at the end of their own setup). Registration only happens when the
router's ``auto_register`` setting is enabled.
"""

import logging
from collections.abc import Iterable
from typing import Any

from reloadrouter.injection import Injection

logger = logging.getLogger(__name__)


class ReloadAware:
    """Base class for hosts that register themselves for reload callbacks."""

    reload_token: str | None = None

    def reload_children(self) -> Iterable[Any]:
        """Direct children whose reloads should also notify this object."""
        return ()

    def injected(self) -> None:
        """Called after this object's class (or a direct child's) was reloaded."""

    def did_load(self, injection: Injection) -> str | None:
        """Register with the router if auto-registration is enabled.

        Returns:
            The registration token, or None when auto-registration is off.
        """
        if not injection.config.auto_register:
            return None
        if self.reload_token is not None and self.reload_token in injection.registry:
            return self.reload_token

        self.reload_token = injection.register_for_reload(self, children=self.reload_children())
        logger.debug(f"Auto-registered {type(self).__name__} as {self.reload_token}")
        return self.reload_token

    def refresh_children(self, injection: Injection) -> bool:
        """Push the current result of reload_children() to the router."""
        if self.reload_token is None:
            return False
        return injection.set_children(self.reload_token, self.reload_children())

    def will_unload(self, injection: Injection) -> None:
        """Deregister from the router. Safe to call more than once."""
        if self.reload_token is not None:
            injection.deregister(self.reload_token)
            self.reload_token = None
