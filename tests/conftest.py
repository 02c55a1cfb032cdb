"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import json
import logging
from unittest.mock import AsyncMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires service account and API keys)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (may require external services)"
    )
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled (use --run-integration to enable)."
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """Capture all log levels for every test."""
    caplog.set_level(logging.DEBUG)
    yield


# ============================================================================
# Environment and Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def mock_openai_api_key(monkeypatch):
    """
    Mock OpenAI API key for tests that require it.

    This prevents tests from attempting real API calls.
    Runs automatically for all tests.
    """
    from databot.config import get_settings

    get_settings.cache_clear()
    monkeypatch.setenv("DATABOT_ENV_SOURCE", "environment")

    test_key = "sk-test-key-1234567890-abcdefghijklmnop"
    monkeypatch.setenv("LLM_OPENAI_API_KEY", test_key)
    yield test_key

    get_settings.cache_clear()


# ============================================================================
# Service Account
# ============================================================================


@pytest.fixture(scope="session")
def rsa_private_key():
    """RSA key pair generated once per session."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def service_account_info(rsa_private_key) -> dict:
    """Service account key JSON with a real PKCS#8 private key."""
    pem = rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    return {
        "type": "service_account",
        "client_email": "databot@test-project.iam.gserviceaccount.com",
        "private_key": pem,
        "private_key_id": "key-123",
        "token_uri": "https://oauth2.googleapis.com/token",
    }


@pytest.fixture
def service_account_env(monkeypatch, service_account_info) -> dict:
    """Expose the service account through GOOGLE_SERVICE_ACCOUNT."""
    monkeypatch.setenv("GOOGLE_SERVICE_ACCOUNT", json.dumps(service_account_info))
    return service_account_info


# ============================================================================
# Common Test Data
# ============================================================================


@pytest.fixture
def sample_query() -> str:
    """Sample user question for testing."""
    return "How many orders were returned last month?"


# ============================================================================
# Mock Collaborators
# ============================================================================


@pytest.fixture
def mock_credentials():
    """Credential cache that always hands out the same token."""
    credentials = AsyncMock()
    credentials.get_token = AsyncMock(return_value="ya29.test-token")
    return credentials


@pytest.fixture
def mock_llm_provider():
    """
    Mock LLM provider for pipeline tests.

    Usage:
        mock_llm_provider.complete.side_effect = ["```sql\\nSELECT 1\\n```", "One."]
    """
    provider = AsyncMock()
    provider.complete = AsyncMock(return_value="mock response")
    provider.model = "mock-model"
    return provider


@pytest.fixture
def mock_connector():
    """Mock query connector."""
    connector = AsyncMock()
    connector.execute = AsyncMock()
    connector.close = AsyncMock()
    return connector


@pytest.fixture
def mock_messenger():
    """Mock chat messenger that records rendered updates."""
    from databot.chat.rendering import render_turn

    messenger = AsyncMock()
    messenger.render = render_turn
    messenger.updates = []

    async def create(token, space_name, state):
        messenger.updates.append(render_turn(state))
        return f"{space_name}/messages/m1"

    async def edit(token, message_name, state):
        messenger.updates.append(render_turn(state))

    messenger.create = AsyncMock(side_effect=create)
    messenger.edit = AsyncMock(side_effect=edit)
    return messenger
