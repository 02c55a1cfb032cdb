"""
DataBot Models Module

Pydantic models and exceptions shared across the application.

Available Models:
    Errors:
        - DataBotError: Base exception for collaborator errors
        - AuthError: Credential signing/exchange errors
        - LLMError: LLM API errors
        - QueryError: Query service errors
        - MessengerError: Chat message create/edit errors

    Event Models:
        - EventType: Webhook event types
        - InboundEvent: Classified webhook event
        - HealthResponse: Health check response

    Turn Models:
        - TurnState: Mutable state of one pipeline run
        - TurnOutcome: Terminal result of a run
"""

from databot.models.errors import (
    AuthError,
    DataBotError,
    LLMError,
    MessengerError,
    QueryError,
)
from databot.models.events import EventType, HealthResponse, InboundEvent
from databot.models.turn import TurnOutcome, TurnState

__all__ = [
    "DataBotError",
    "AuthError",
    "LLMError",
    "QueryError",
    "MessengerError",
    "EventType",
    "InboundEvent",
    "HealthResponse",
    "TurnState",
    "TurnOutcome",
]
