"""
Local LLM Provider

Implementation of BaseLLMProvider for OpenAI-compatible servers
(vLLM, llama.cpp server, Ollama's /v1 endpoint, LLM gateways) over httpx.
"""

import logging
from typing import Any

import httpx

from databot.llm.base import BaseLLMProvider
from databot.llm.models import LLMRequest, LLMResponse, LLMUsage
from databot.models.errors import LLMError

logger = logging.getLogger(__name__)


class LocalProvider(BaseLLMProvider):
    """Provider that POSTs to ``{base_url}/v1/chat/completions``."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        api_key: str | None = None,
        temperature: float = 0.0,
        timeout: int = 60,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(
            provider_name="local",
            model=model,
            temperature=temperature,
            timeout=timeout,
        )

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.client = client or httpx.AsyncClient(timeout=float(timeout))

        logger.info(
            f"Local provider initialized: {base_url} with model: {model}",
            extra={"base_url": base_url, "model": model},
        )

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Generate completion using the OpenAI-compatible endpoint."""
        request = self._apply_defaults(request)
        self._log_request(request)

        payload = {
            "model": request.model,
            "messages": [{"role": msg.role, "content": msg.content} for msg in request.messages],
            "temperature": request.temperature,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

        try:
            response = await self.client.post(
                f"{self.base_url}/v1/chat/completions",
                json=payload,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"Local LLM request failed: {e}")
            raise LLMError(
                f"Completion request failed: {e}", context={"model": request.model}
            ) from e

        if response.status_code >= 400:
            raise LLMError(
                f"Completion endpoint returned {response.status_code}",
                context={"model": request.model, "body": response.text[:500]},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise LLMError(
                "Completion response is not JSON", context={"model": request.model}
            ) from e

        content = _first_choice_content(data)
        if not content:
            raise LLMError(
                "Completion response has no or empty choices[0].message.content",
                context={"model": request.model},
            )

        usage = data.get("usage") or {}
        llm_response = LLMResponse(
            content=content,
            model=data.get("model") or request.model,
            usage=LLMUsage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
            ),
            provider="local",
            metadata={"base_url": self.base_url},
        )

        self._log_response(llm_response)
        return llm_response

    async def close(self) -> None:
        await self.client.aclose()


def _first_choice_content(data: Any) -> str | None:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None
