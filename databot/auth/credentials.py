"""
Service Account Credentials

Obtains bearer tokens for the Google Chat and BigQuery APIs with the
OAuth 2.0 JWT bearer grant and caches them until shortly before expiry.

Usage:
    cache = CredentialCache(ServiceAccount.from_info(info), scopes=[...])
    token = await cache.get_token()
"""

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
import jwt
from pydantic import BaseModel, Field

from databot.config import GOOGLE_TOKEN_URL
from databot.models.errors import AuthError

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_SECONDS = 3600


class ServiceAccount(BaseModel):
    """Fields of a service account key used for signing."""

    client_email: str = Field(..., description="Service identity (issuer and subject)")
    private_key: str = Field(..., description="PEM-encoded PKCS#8 private key")
    private_key_id: str | None = Field(None, description="Key id placed in the JWT header")
    token_uri: str = Field(default=GOOGLE_TOKEN_URL, description="OAuth token endpoint")

    @classmethod
    def from_info(cls, info: dict[str, Any]) -> "ServiceAccount":
        """Build from a parsed service account JSON key."""
        return cls.model_validate(info)


class Credential(BaseModel):
    """A cached access token and its absolute expiry (epoch seconds)."""

    token: str
    expires_at: float


class CredentialCache:
    """
    Process-wide access token cache.

    Returns the cached token while ``now < expires_at - refresh_margin``;
    otherwise signs a fresh assertion and exchanges it. Concurrent callers
    that all see an expired token each refresh independently; the last
    write wins.
    """

    def __init__(
        self,
        service_account: ServiceAccount,
        scopes: list[str],
        token_url: str | None = None,
        refresh_margin: float = 60.0,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        clock: Callable[[], float] = time.time,
    ):
        self.service_account = service_account
        self.scopes = scopes
        self.token_url = token_url or service_account.token_uri
        self.refresh_margin = refresh_margin
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.clock = clock
        self.credential: Credential | None = None

    def is_valid(self) -> bool:
        """Whether the cached credential can still be handed out."""
        if self.credential is None:
            return False
        return self.clock() < self.credential.expires_at - self.refresh_margin

    async def get_token(self) -> str:
        """
        Return a valid access token, refreshing it when needed.

        Raises:
            AuthError: If signing or the token exchange fails
        """
        if self.is_valid():
            return self.credential.token

        self.credential = await self._refresh()
        return self.credential.token

    def build_assertion(self, issued_at: int) -> str:
        """Sign the RS256 JWT presented to the token endpoint."""
        claims = {
            "iss": self.service_account.client_email,
            "sub": self.service_account.client_email,
            "aud": self.token_url,
            "scope": " ".join(self.scopes),
            "iat": issued_at,
            "exp": issued_at + ASSERTION_LIFETIME_SECONDS,
        }
        headers = {"typ": "JWT"}
        if self.service_account.private_key_id:
            headers["kid"] = self.service_account.private_key_id

        try:
            return jwt.encode(
                claims,
                self.service_account.private_key,
                algorithm="RS256",
                headers=headers,
            )
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise AuthError(f"Could not sign assertion: {e}") from e

    async def _refresh(self) -> Credential:
        now = self.clock()
        assertion = self.build_assertion(int(now))

        logger.info(
            "Refreshing access token",
            extra={"client_email": self.service_account.client_email, "scopes": self.scopes},
        )

        try:
            response = await self.client.post(
                self.token_url,
                data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Token request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {"raw": response.text}

        if response.status_code >= 400:
            raise AuthError(
                f"Token endpoint returned {response.status_code}",
                context={"response": body},
            )

        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise AuthError("Token response has no access_token", context={"response": body})

        # pydantic's ValidationError is a ValueError
        try:
            expires_in = float(body.get("expires_in", ASSERTION_LIFETIME_SECONDS))
            credential = Credential(token=token, expires_at=now + expires_in)
        except (TypeError, ValueError) as e:
            raise AuthError(
                f"Malformed token response: {e}", context={"response": body}
            ) from e

        logger.debug("Access token refreshed", extra={"expires_in": expires_in})
        return credential

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
