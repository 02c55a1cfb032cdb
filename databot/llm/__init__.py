"""
LLM Provider Module

LLM abstraction layer over the OpenAI SDK and local OpenAI-compatible servers.

Usage:
    from databot.llm import LLMProviderFactory
    from databot.config import get_settings

    config = get_settings()
    provider = LLMProviderFactory.create_provider(config.llm)

    text = await provider.complete("gpt-4.1-mini", "You are helpful.", "Hello!")
"""

from databot.llm.base import BaseLLMProvider
from databot.llm.factory import LLMProviderFactory
from databot.llm.local import LocalProvider
from databot.llm.models import LLMMessage, LLMRequest, LLMResponse, LLMUsage
from databot.llm.openai import OpenAIProvider

__all__ = [
    "BaseLLMProvider",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "LLMUsage",
    "LLMProviderFactory",
    "OpenAIProvider",
    "LocalProvider",
]
