"""Event type definitions for injection notifications."""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

# Name the injection agent posts after a class has been replaced
INJECTION_NOTIFICATION = "INJECTION_BUNDLE_NOTIFICATION"


class Notification(BaseModel):
    """A raw notification as delivered by the event bus."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    object: Any = None
    user_info: dict[str, Any] = Field(default_factory=dict)


class ReloadEvent(BaseModel):
    """A normalized "class reloaded" event.

    ``subject`` is the specific instance the payload pointed at, if any.
    ``subject_class_identity`` is always populated when anything usable was
    found, either from the subject's class or from a class-only payload.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str = Field(default_factory=lambda: uuid4().hex[:12])
    name: str = INJECTION_NOTIFICATION
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    subject: Any = None
    subject_class_identity: str | None = None
    raw_payload: Any = None

    @property
    def has_subject(self) -> bool:
        """Check if the payload resolved to a live instance."""
        return self.subject is not None

    @property
    def is_empty(self) -> bool:
        """Check if the event carries nothing that can match a candidate."""
        return self.subject is None and not self.subject_class_identity

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "name": self.name,
            "timestamp": self.timestamp.isoformat(),
            "subject_class_identity": self.subject_class_identity,
            "has_subject": self.has_subject,
        }
