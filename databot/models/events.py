"""
Inbound Event Models

Pydantic models for the Google Chat webhook envelope.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Event types the bot reacts to."""

    ADDED_TO_SPACE = "ADDED_TO_SPACE"
    REMOVED_FROM_SPACE = "REMOVED_FROM_SPACE"
    MESSAGE = "MESSAGE"
    UNKNOWN = "UNKNOWN"


class InboundEvent(BaseModel):
    """
    A classified webhook event.

    Only MESSAGE events carry ``text`` and ``space``. UNKNOWN events keep the
    raw type string so it can be echoed back to the sender.
    """

    type: EventType = Field(..., description="Classified event type")
    raw_type: str | None = Field(None, description="Type as received from the webhook")
    text: str = Field(default="", description="Trimmed message text (MESSAGE only)")
    space: str | None = Field(None, description="Space resource name, e.g. 'spaces/AAA'")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> "InboundEvent":
        """Classify a raw webhook body into an event."""
        payload = payload or {}
        raw_type = payload.get("type")
        space = (payload.get("space") or {}).get("name")

        try:
            event_type = EventType(raw_type)
        except ValueError:
            event_type = EventType.UNKNOWN
        if event_type is EventType.UNKNOWN:
            return cls(type=EventType.UNKNOWN, raw_type=raw_type, space=space)

        text = ""
        if event_type is EventType.MESSAGE:
            text = ((payload.get("message") or {}).get("text") or "").strip()

        return cls(type=event_type, raw_type=raw_type, text=text, space=space)

    @classmethod
    def message(cls, text: str, space: str) -> "InboundEvent":
        """Build a MESSAGE event directly (CLI, tests)."""
        return cls(type=EventType.MESSAGE, raw_type="MESSAGE", text=text.strip(), space=space)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="Check timestamp (ISO 8601)")
