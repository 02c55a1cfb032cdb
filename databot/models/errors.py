"""
Error Taxonomy

Exceptions raised by the collaborators of the turn pipeline. The pipeline
catches them per stage and renders them into the chat message; they never
propagate past the orchestrator.
"""

from typing import Any


class DataBotError(Exception):
    """
    Base exception for pipeline collaborator errors.

    Attributes:
        component: Name of the component that raised the error
        message: Error description
        recoverable: Whether a later turn could succeed without intervention
        context: Additional context for debugging
    """

    def __init__(
        self,
        component: str,
        message: str,
        recoverable: bool = True,
        context: dict[str, Any] | None = None,
    ):
        self.component = component
        self.message = message
        self.recoverable = recoverable
        self.context = context or {}
        super().__init__(f"[{component}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/API responses."""
        return {
            "component": self.component,
            "message": self.message,
            "recoverable": self.recoverable,
            "context": self.context,
            "type": self.__class__.__name__,
        }


class AuthError(DataBotError):
    """Error signing the assertion or exchanging it for an access token."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__("CredentialCache", message, recoverable=False, context=context)


class LLMError(DataBotError):
    """Error during an LLM API call or a malformed completion."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__("LanguageModelClient", message, recoverable=True, context=context)


class QueryError(DataBotError):
    """The query service rejected the SQL or the call failed."""

    def __init__(
        self,
        message: str,
        payload: Any = None,
        context: dict[str, Any] | None = None,
    ):
        self.payload = payload
        super().__init__("QueryExecutor", message, recoverable=False, context=context)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["payload"] = self.payload
        return data


class MessengerError(DataBotError):
    """Creating or editing a chat message failed."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__("ChatMessenger", message, recoverable=True, context=context)
