"""
OpenAI LLM Provider

Implementation of BaseLLMProvider on the official openai SDK.
Works with api.openai.com and any OpenAI-compatible gateway via base_url.
"""

import logging

import openai
from openai import AsyncOpenAI

from databot.llm.base import BaseLLMProvider
from databot.llm.models import LLMRequest, LLMResponse, LLMUsage
from databot.models.errors import LLMError

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseLLMProvider):
    """
    OpenAI LLM provider implementation.

    The SDK's built-in retries are disabled: a failed completion ends the turn.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4.1-mini",
        base_url: str | None = None,
        temperature: float = 0.0,
        timeout: int = 60,
    ):
        super().__init__(
            provider_name="openai",
            model=model,
            temperature=temperature,
            timeout=timeout,
        )

        self.base_url = base_url
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=float(timeout),
            max_retries=0,
        )

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Generate completion using the chat completions API.

        Raises:
            LLMError: On API errors, timeouts or an empty first choice
        """
        request = self._apply_defaults(request)
        self._log_request(request)

        messages = [{"role": msg.role, "content": msg.content} for msg in request.messages]

        try:
            response = await self.client.chat.completions.create(
                model=request.model,
                messages=messages,
                temperature=request.temperature,
            )
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI API timeout: {e}")
            raise LLMError(f"Completion timed out: {e}", context={"model": request.model}) from e
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMError(f"Completion failed: {e}", context={"model": request.model}) from e

        if not response.choices or not response.choices[0].message.content:
            raise LLMError(
                "Completion response has no or empty choices[0].message.content",
                context={"model": request.model},
            )

        usage = response.usage
        llm_response = LLMResponse(
            content=response.choices[0].message.content,
            model=response.model or request.model,
            usage=LLMUsage(
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                total_tokens=usage.total_tokens,
            )
            if usage
            else LLMUsage(),
            provider="openai",
            metadata={"id": response.id},
        )

        self._log_response(llm_response)
        return llm_response

    async def close(self) -> None:
        await self.client.close()
