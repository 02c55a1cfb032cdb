"""
Base LLM Provider

Abstract base class defining the interface for all LLM providers.
Ensures consistent API across OpenAI and local OpenAI-compatible servers.
"""

import logging
from abc import ABC, abstractmethod

from databot.llm.models import LLMMessage, LLMRequest, LLMResponse

logger = logging.getLogger(__name__)


class BaseLLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Providers are stateless apart from their HTTP client: each call is a
    single request with no retries. Failures surface as ``LLMError``.

    Attributes:
        provider_name: Unique identifier for this provider
        model: Default model when a request names none
        temperature: Default sampling temperature
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        provider_name: str,
        model: str,
        temperature: float = 0.0,
        timeout: int = 60,
    ):
        self.provider_name = provider_name
        self.model = model
        self.temperature = temperature
        self.timeout = timeout

        logger.info(
            f"Initialized {provider_name} provider",
            extra={
                "provider": provider_name,
                "model": model,
                "temperature": temperature,
            },
        )

    @abstractmethod
    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate a completion from the LLM.

        Args:
            request: LLM request with messages and parameters

        Returns:
            LLMResponse with generated content and metadata

        Raises:
            LLMError: On non-success status or a response without
                ``choices[0].message.content``
        """
        pass  # pragma: no cover - abstract method

    async def complete(
        self,
        model: str | None,
        system_prompt: str | None,
        user_prompt: str,
    ) -> str:
        """
        Run a system+user chat completion and return the generated text.

        Args:
            model: Model to use (None = provider default)
            system_prompt: Optional system message
            user_prompt: User message

        Returns:
            Generated text

        Raises:
            LLMError: If the call fails or the response is malformed
        """
        messages = []
        if system_prompt:
            messages.append(LLMMessage(role="system", content=system_prompt))
        messages.append(LLMMessage(role="user", content=user_prompt))

        response = await self.generate(LLMRequest(messages=messages, model=model))
        return response.content

    async def close(self) -> None:
        """Release the provider's HTTP client. No-op by default."""

    def _apply_defaults(self, request: LLMRequest) -> LLMRequest:
        """Apply default values to request if not specified."""
        if request.temperature is None:
            request.temperature = self.temperature
        if request.model is None:
            request.model = self.model
        return request

    def _log_request(self, request: LLMRequest) -> None:
        """Log request details for debugging."""
        logger.debug(
            f"{self.provider_name} request",
            extra={
                "provider": self.provider_name,
                "model": request.model,
                "message_count": len(request.messages),
                "temperature": request.temperature,
            },
        )

    def _log_response(self, response: LLMResponse) -> None:
        """Log response details for debugging."""
        logger.debug(
            f"{self.provider_name} response",
            extra={
                "provider": self.provider_name,
                "model": response.model,
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            },
        )
