"""
Chat Messenger

Creates a Google Chat message in a space and edits it in place as the turn
progresses. Rendering of the state is injected; the messenger only ships text.
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from databot.chat.rendering import render_turn
from databot.models.errors import MessengerError
from databot.models.turn import TurnState

logger = logging.getLogger(__name__)

Renderer = Callable[[TurnState], str]


class ChatMessenger:
    """
    Google Chat REST messenger.

    Usage:
        messenger = ChatMessenger()
        name = await messenger.create(token, "spaces/AAA", state)
        await messenger.edit(token, name, state)
    """

    def __init__(
        self,
        base_url: str = "https://chat.googleapis.com/v1",
        render: Renderer = render_turn,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.render = render
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def create(self, token: str, space_name: str, state: TurnState) -> str:
        """
        Post a new message rendered from ``state``.

        Returns:
            Message resource name used for later edits

        Raises:
            MessengerError: If the request fails or the response has no name
        """
        body = await self._send(
            "POST",
            f"{self.base_url}/{space_name}/messages",
            token,
            {"text": self.render(state)},
        )
        name = body.get("name") if isinstance(body, dict) else None
        if not name:
            raise MessengerError("Create response has no message name", context={"response": body})
        return name

    async def edit(self, token: str, message_name: str, state: TurnState) -> None:
        """
        Replace the body of ``message_name`` with the rendered ``state``.

        Raises:
            MessengerError: If the request fails
        """
        await self._send(
            "PATCH",
            f"{self.base_url}/{message_name}",
            token,
            {"text": self.render(state)},
            params={"updateMask": "*"},
        )

    async def _send(
        self,
        method: str,
        url: str,
        token: str,
        payload: dict[str, Any],
        params: dict[str, str] | None = None,
    ) -> Any:
        try:
            response = await self.client.request(
                method,
                url,
                json=payload,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise MessengerError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 400:
            raise MessengerError(
                f"{method} {url} returned {response.status_code}",
                context={"body": response.text[:500]},
            )

        try:
            return response.json()
        except ValueError:
            return {}

    async def close(self) -> None:
        await self.client.aclose()
