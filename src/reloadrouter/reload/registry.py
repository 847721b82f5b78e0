"""Registry of live candidates eligible for reload callbacks."""

import logging
import threading
import weakref
from collections.abc import Hashable, Iterable
from typing import Any

from reloadrouter.domain.models import Candidate

logger = logging.getLogger(__name__)


class CandidateRegistry:
    """Tracks registered candidates by opaque token.

    The registry never owns host objects. When a host is garbage collected
    its entry is dropped automatically; explicit deregistration is idempotent.
    Readers get immutable snapshots, so iterating a snapshot never races
    with concurrent register/deregister calls.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, Candidate] = {}
        self._finalizers: dict[Hashable, weakref.finalize] = {}
        # Re-entrant: a finalizer can fire while this thread holds the lock
        self._lock = threading.RLock()

    def register(self, token: Hashable, candidate: Candidate) -> None:
        """Register a candidate under a token. Re-registering overwrites."""
        with self._lock:
            if token in self._entries:
                logger.debug(f"Token {token} re-registered, replacing previous candidate")
            self._entries[token] = candidate
            self._track_host(token, candidate)
            logger.debug(f"Registered {candidate.class_identity} as {token}")

    def _track_host(self, token: Hashable, candidate: Candidate) -> None:
        old = self._finalizers.pop(token, None)
        if old is not None:
            old.detach()

        host = candidate.host
        if host is None:
            return
        try:
            self._finalizers[token] = weakref.finalize(host, self._on_collected, token, candidate)
        except TypeError:
            # Host does not support weak references, only explicit deregistration applies
            pass

    def _on_collected(self, token: Hashable, candidate: Candidate) -> None:
        with self._lock:
            if self._entries.get(token) is candidate:
                del self._entries[token]
                self._finalizers.pop(token, None)
                logger.debug(f"Host for {token} was collected, entry removed")

    def deregister(self, token: Hashable) -> bool:
        """Remove a candidate. Unknown tokens are a no-op.

        Returns:
            True if an entry was removed.
        """
        with self._lock:
            candidate = self._entries.pop(token, None)
            finalizer = self._finalizers.pop(token, None)
            if finalizer is not None:
                finalizer.detach()
            if candidate is None:
                return False
            logger.debug(f"Deregistered {token}")
            return True

    def set_children(self, token: Hashable, children: Iterable[Any]) -> bool:
        """Replace the direct children of a registered candidate.

        Returns:
            False if the token is not registered.
        """
        with self._lock:
            candidate = self._entries.get(token)
            if candidate is None:
                logger.debug(f"set_children on unknown token {token} ignored")
                return False
            self._entries[token] = updated = candidate.with_children(children)
            self._track_host(token, updated)
            return True

    def get(self, token: Hashable) -> Candidate | None:
        with self._lock:
            return self._entries.get(token)

    def entries(self) -> tuple[tuple[Hashable, Candidate], ...]:
        """Snapshot of (token, candidate) pairs."""
        with self._lock:
            return tuple(self._entries.items())

    def all_candidates(self) -> tuple[Candidate, ...]:
        """Snapshot of registered candidates."""
        with self._lock:
            return tuple(self._entries.values())

    def clear(self) -> None:
        with self._lock:
            for finalizer in self._finalizers.values():
                finalizer.detach()
            self._finalizers.clear()
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._entries
