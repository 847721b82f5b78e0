"""Domain models for reload routing."""

from reloadrouter.domain.models import Candidate, ChildRef, class_identity, generate_token

__all__ = ["Candidate", "ChildRef", "class_identity", "generate_token"]
