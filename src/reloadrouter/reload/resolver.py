"""Target resolution: decides which candidates react to a reload event.

Order of checks, first match wins:
1. The event's subject is the candidate's host (identity, not equality)
2. The subject's class identity equals the candidate's class identity
3. A direct child of the candidate has the subject instance's class identity

Escalation needs an instance subject and looks at direct children only.
Class-only events never escalate, and a class reloaded at grandchild
depth does not reach the grandparent.
"""

from typing import Any

from reloadrouter.domain.models import Candidate, class_identity
from reloadrouter.events.types import ReloadEvent


def resolve_subject_identity(event: ReloadEvent) -> str | None:
    """Get the class identity the event refers to, if any."""
    if event.subject is not None:
        return class_identity(event.subject)
    return event.subject_class_identity or None


def matches_directly(event: ReloadEvent, candidate: Candidate) -> bool:
    """Check identity of the event subject against the candidate host."""
    if event.subject is None:
        return False
    host = candidate.host
    return host is not None and event.subject is host


def matches_class(event: ReloadEvent, candidate: Candidate) -> bool:
    identity = resolve_subject_identity(event)
    return identity is not None and identity == candidate.class_identity


def matches_child(event: ReloadEvent, candidate: Candidate) -> bool:
    """Check whether any direct child shares the class of the reloaded instance."""
    if not candidate.children or event.subject is None:
        return False
    identity = class_identity(event.subject)
    return any(child.class_identity == identity for child in candidate.children)


def is_target(event: ReloadEvent, candidate: Candidate, escalate: bool = True) -> bool:
    """Decide whether a candidate should be notified of a reload event.

    Args:
        event: The normalized reload event.
        candidate: A registered candidate.
        escalate: Whether a direct child's class match makes the parent a target.

    Returns:
        True if the candidate's reload callback should run.
    """
    if matches_directly(event, candidate):
        return True
    if matches_class(event, candidate):
        return True
    if escalate and matches_child(event, candidate):
        return True
    return False


def object_was_injected(obj: Any, event: ReloadEvent) -> bool:
    """Check if an arbitrary object's class is the one the event reloaded.

    For observers that are not registered candidates; class level only.
    """
    identity = resolve_subject_identity(event)
    return identity is not None and identity == class_identity(obj)
