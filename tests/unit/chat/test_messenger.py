"""
Unit tests for ChatMessenger.

Tests create/edit request shapes and MessengerError on failures.
"""

import json

import httpx
import pytest

from databot.chat.messenger import ChatMessenger
from databot.models.errors import MessengerError
from databot.models.turn import TurnState


class ChatEndpoint:
    """MockTransport handler for the Chat API."""

    def __init__(self, status_code: int = 200, body: dict | None = None):
        self.status_code = status_code
        self.body = body if body is not None else {"name": "spaces/AAA/messages/123"}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


def make_messenger(endpoint, render=None) -> ChatMessenger:
    kwargs = {"render": render} if render else {}
    return ChatMessenger(
        base_url="https://chat.googleapis.com/v1",
        client=httpx.AsyncClient(transport=httpx.MockTransport(endpoint)),
        **kwargs,
    )


@pytest.fixture
def state():
    return TurnState(question="How many users?", status="Thinking...")


class TestCreate:
    """Test message creation."""

    @pytest.mark.asyncio
    async def test_posts_rendered_text(self, state):
        endpoint = ChatEndpoint()
        messenger = make_messenger(endpoint)

        name = await messenger.create("ya29.token", "spaces/AAA", state)

        assert name == "spaces/AAA/messages/123"
        request = endpoint.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://chat.googleapis.com/v1/spaces/AAA/messages"
        assert request.headers["authorization"] == "Bearer ya29.token"
        assert json.loads(request.content) == {"text": "*How many users?*\n\nThinking..."}

    @pytest.mark.asyncio
    async def test_uses_injected_renderer(self, state):
        endpoint = ChatEndpoint()
        messenger = make_messenger(endpoint, render=lambda s: f"[{s.status}]")

        await messenger.create("t", "spaces/AAA", state)

        assert json.loads(endpoint.requests[0].content) == {"text": "[Thinking...]"}

    @pytest.mark.asyncio
    async def test_missing_name_raises(self, state):
        messenger = make_messenger(ChatEndpoint(body={}))

        with pytest.raises(MessengerError, match="no message name"):
            await messenger.create("t", "spaces/AAA", state)

    @pytest.mark.asyncio
    async def test_error_status_raises(self, state):
        messenger = make_messenger(ChatEndpoint(status_code=403, body={"error": "denied"}))

        with pytest.raises(MessengerError, match="403"):
            await messenger.create("t", "spaces/AAA", state)


class TestEdit:
    """Test in-place edits."""

    @pytest.mark.asyncio
    async def test_patches_message_with_update_mask(self, state):
        endpoint = ChatEndpoint()
        messenger = make_messenger(endpoint)
        state.status = "Running query..."

        await messenger.edit("t", "spaces/AAA/messages/123", state)

        request = endpoint.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/v1/spaces/AAA/messages/123"
        assert request.url.params["updateMask"] == "*"
        assert json.loads(request.content)["text"].endswith("Running query...")

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, state):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        messenger = make_messenger(handler)

        with pytest.raises(MessengerError):
            await messenger.edit("t", "spaces/AAA/messages/123", state)
