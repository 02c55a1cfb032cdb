"""
Application Configuration

Pydantic-based settings management using environment variables.
Supports nested configuration, validation, and caching.

Usage:
    from databot.config import get_settings

    settings = get_settings()
    print(settings.llm.intent_model)
    print(settings.google.dataset_id)
"""

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CHAT_SCOPE = "https://www.googleapis.com/auth/chat.bot"
BIGQUERY_READONLY_SCOPE = "https://www.googleapis.com/auth/bigquery.readonly"


class GoogleSettings(BaseSettings):
    """Service account, Chat API and BigQuery configuration."""

    service_account: str | None = Field(
        None,
        description="Service account key as a JSON string",
    )
    service_account_file: Path | None = Field(
        None,
        description="Path to a service account key file (used when service_account is unset)",
    )
    token_url: str = Field(
        default=GOOGLE_TOKEN_URL,
        description="OAuth token endpoint used for the JWT bearer exchange",
    )
    scopes: list[str] = Field(
        default_factory=lambda: [GOOGLE_CHAT_SCOPE, BIGQUERY_READONLY_SCOPE],
        description="Scopes requested for the bot's access token",
    )
    chat_api_base_url: str = Field(
        default="https://chat.googleapis.com/v1",
        description="Google Chat REST API base URL",
    )
    bigquery_api_base_url: str = Field(
        default="https://bigquery.googleapis.com/bigquery/v2",
        description="BigQuery REST API base URL",
    )
    billing_project: str = Field(
        default="straive-datachat",
        description="Project that runs (and pays for) the queries",
    )
    dataset_project: str = Field(
        default="bigquery-public-data",
        description="Project of the default dataset",
    )
    dataset_id: str = Field(
        default="thelook_ecommerce",
        description="Default dataset for unqualified table names",
    )
    http_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for Google API calls",
    )

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("service_account", mode="before")
    @classmethod
    def normalize_service_account(cls, v: str | None) -> str | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v

    def load_service_account(self) -> dict[str, Any]:
        """
        Return the parsed service account key.

        Raises:
            ValueError: If no key is configured or the key is not valid JSON
        """
        if self.service_account:
            raw = self.service_account
        elif self.service_account_file:
            raw = self.service_account_file.read_text(encoding="utf-8")
        else:
            raise ValueError(
                "Service account not configured. "
                "Set GOOGLE_SERVICE_ACCOUNT or GOOGLE_SERVICE_ACCOUNT_FILE"
            )
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Service account key is not valid JSON: {e}") from e


class LLMSettings(BaseSettings):
    """LLM provider configuration."""

    provider: Literal["openai", "local"] = Field(
        default="openai",
        description="LLM provider used for both pipeline stages",
    )
    openai_api_key: str | None = Field(
        None,
        description="API key for the OpenAI-compatible endpoint",
    )
    openai_base_url: str | None = Field(
        None,
        description="Override for OpenAI-compatible gateways (None = api.openai.com)",
    )
    intent_model: str = Field(
        default="gpt-4.1-mini",
        description="Model that classifies intent and writes SQL",
    )
    answer_model: str = Field(
        default="gpt-4.1-nano",
        description="Model that interprets query results",
    )
    local_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL for a local OpenAI-compatible server",
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Temperature for LLM responses (0.0 = deterministic)",
    )
    timeout: int = Field(
        default=60,
        gt=0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_provider_keys(self) -> "LLMSettings":
        """Ensure an API key is set when the hosted provider is selected."""
        if self.provider == "openai" and not self.openai_api_key:
            raise ValueError("API key required for openai provider. Set LLM_OPENAI_API_KEY")
        return self


class PipelineSettings(BaseSettings):
    """Turn pipeline behavior."""

    max_rows: int = Field(
        default=1000,
        gt=0,
        description="Rows passed to the interpretation stage (hard cap)",
    )
    prompt_row_limit: int = Field(
        default=1000,
        gt=0,
        description="Row limit the SQL generator is asked to respect",
    )
    token_refresh_margin: int = Field(
        default=60,
        ge=0,
        description="Seconds before expiry at which a cached token is refreshed",
    )
    prompts_dir: str = Field(
        default="templates",
        description="Directory holding prompt templates",
    )

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file path (None = stdout only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Configure Python logging with these settings."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,  # Override any existing configuration
        )


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Settings are nested by domain (google, llm, pipeline, logging).

    Environment Variables:
        ENVIRONMENT: Deployment environment (development, staging, production)
        APP_NAME: Application name for logging
        API_HOST: API server host
        API_PORT: API server port
        GOOGLE_*: Service account, Chat and BigQuery configuration (see GoogleSettings)
        LLM_*: LLM provider configuration (see LLMSettings)
        PIPELINE_*: Turn pipeline configuration (see PipelineSettings)
        LOG_*: Logging configuration (see LoggingSettings)
    """

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    app_name: str = Field(
        default="DataBot",
        description="Application name",
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        gt=0,
        le=65535,
        description="API server port",
    )

    google: GoogleSettings = Field(default_factory=GoogleSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @model_validator(mode="after")
    def configure_logging(self) -> "Settings":
        """Configure logging when settings are loaded."""
        self.logging.configure()
        return self

    def model_post_init(self, __context) -> None:
        """Log configuration on initialization."""
        logger = logging.getLogger(__name__)
        logger.info(
            f"Settings loaded for {self.app_name} ({self.environment})",
            extra={
                "environment": self.environment,
                "llm_provider": self.llm.provider,
                "intent_model": self.llm.intent_model,
                "answer_model": self.llm.answer_model,
                "dataset": f"{self.google.dataset_project}.{self.google.dataset_id}",
            },
        )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("DATABOT_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
