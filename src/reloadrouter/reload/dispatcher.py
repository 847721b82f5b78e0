"""Dispatch of reload events to matching candidates.

Flow:
1. Snapshot the registry
2. Ask the resolver about each candidate
3. Invoke matching callbacks once each, in snapshot order
4. Record failures without interrupting the pass
"""

import logging
from collections import deque
from collections.abc import Hashable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from reloadrouter.events.types import ReloadEvent
from reloadrouter.reload.registry import CandidateRegistry
from reloadrouter.reload.resolver import is_target

logger = logging.getLogger(__name__)


class ReloadCallbackError(Exception):
    """Raised (and recorded, never propagated) when a reload callback fails."""

    def __init__(self, token: Hashable, error: BaseException):
        self.token = token
        self.error = error
        super().__init__(f"Reload callback for {token} failed: {error}")


@dataclass
class CallbackFailure:
    """A reload callback that raised during dispatch."""

    token: Hashable
    class_identity: str
    error: ReloadCallbackError


@dataclass
class DispatchResult:
    """Outcome of a single dispatch pass."""

    event_id: str
    subject_class_identity: str | None
    evaluated: int = 0
    invoked: list[Hashable] = field(default_factory=list)
    failures: list[CallbackFailure] = field(default_factory=list)
    stale: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def success(self) -> bool:
        return not self.failures


class ReloadDispatcher:
    """Routes reload events to the reload callbacks of matching candidates."""

    def __init__(
        self,
        registry: CandidateRegistry,
        escalate_to_parents: bool = True,
        history_limit: int = 50,
    ):
        self.registry = registry
        self.escalate_to_parents = escalate_to_parents
        self._history: deque[DispatchResult] = deque(maxlen=history_limit)

    def dispatch(self, event: ReloadEvent) -> DispatchResult:
        """Invoke the reload callback of every candidate the event targets.

        Args:
            event: Normalized reload event.

        Returns:
            DispatchResult describing what was invoked and what failed.
        """
        snapshot = self.registry.entries()
        result = DispatchResult(
            event_id=event.id,
            subject_class_identity=event.subject_class_identity,
            evaluated=len(snapshot),
        )

        if event.is_empty:
            logger.debug(f"Event {event.id} has no subject, nothing to dispatch")
            self._history.append(result)
            return result

        seen: set[int] = set()
        for token, candidate in snapshot:
            if id(candidate) in seen:
                continue
            seen.add(id(candidate))

            if not candidate.is_alive:
                result.stale += 1
                continue
            if not is_target(event, candidate, escalate=self.escalate_to_parents):
                continue

            callback = candidate.callback
            if callback is None:
                result.stale += 1
                continue

            try:
                callback()
                result.invoked.append(token)
            except Exception as e:
                error = ReloadCallbackError(token, e)
                logger.exception(f"Reload callback failed for {candidate.class_identity} ({token})")
                result.failures.append(
                    CallbackFailure(token=token, class_identity=candidate.class_identity, error=error)
                )

        logger.info(
            f"Dispatched {event.subject_class_identity}: "
            f"{len(result.invoked)} reloaded, {len(result.failures)} failed"
        )
        self._history.append(result)
        return result

    def get_dispatch_history(self, limit: int = 10) -> list[DispatchResult]:
        """Get recent dispatch results, oldest first."""
        if limit <= 0:
            return []
        return list(self._history)[-limit:]
