"""Reload routing: target resolution, candidate registry and dispatch."""

from reloadrouter.reload.dispatcher import (
    CallbackFailure,
    DispatchResult,
    ReloadCallbackError,
    ReloadDispatcher,
)
from reloadrouter.reload.registry import CandidateRegistry
from reloadrouter.reload.resolver import is_target, object_was_injected, resolve_subject_identity

__all__ = [
    "CallbackFailure",
    "CandidateRegistry",
    "DispatchResult",
    "ReloadCallbackError",
    "ReloadDispatcher",
    "is_target",
    "object_was_injected",
    "resolve_subject_identity",
]
