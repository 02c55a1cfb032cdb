"""
LLM Provider Factory

Creates the configured LLM provider instance.
"""

import logging

from databot.config import LLMSettings
from databot.llm.base import BaseLLMProvider
from databot.llm.local import LocalProvider
from databot.llm.openai import OpenAIProvider

logger = logging.getLogger(__name__)


class LLMProviderFactory:
    """Factory for creating LLM provider instances from settings."""

    PROVIDERS = {
        "openai": OpenAIProvider,
        "local": LocalProvider,
    }

    @staticmethod
    def create_provider(config: LLMSettings) -> BaseLLMProvider:
        """
        Create an LLM provider instance.

        Args:
            config: LLM configuration settings

        Returns:
            Configured provider instance

        Raises:
            ValueError: If provider type is unknown or required config is missing
        """
        provider_type = config.provider
        if provider_type not in LLMProviderFactory.PROVIDERS:
            raise ValueError(
                f"Unknown provider type: {provider_type}. "
                f"Available providers: {list(LLMProviderFactory.PROVIDERS.keys())}"
            )

        logger.info(f"Creating {provider_type} provider", extra={"provider": provider_type})

        if provider_type == "openai":
            if not config.openai_api_key:
                raise ValueError("OpenAI API key is required but not configured")
            return OpenAIProvider(
                api_key=config.openai_api_key,
                model=config.intent_model,
                base_url=config.openai_base_url,
                temperature=config.temperature,
                timeout=config.timeout,
            )

        return LocalProvider(
            base_url=config.local_base_url,
            model=config.intent_model,
            api_key=config.openai_api_key,
            temperature=config.temperature,
            timeout=config.timeout,
        )
