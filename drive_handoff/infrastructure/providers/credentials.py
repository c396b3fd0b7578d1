"""
Access-token sources for the Google Drive REST API.

Two credential models are supported: an OAuth client with a long-lived
refresh token, and a service-account key exchanged through a signed JWT
bearer assertion. Tokens are cached until shortly before they expire.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import aiohttp
import jwt

from ...core.errors import NetworkFailureError, ProviderRejectedError
from ..config.models import AUTH_MODE_SERVICE_ACCOUNT, DriveConfig

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
EXPIRY_MARGIN = 60.0


class TokenSource(ABC):
    """Produces bearer tokens for provider requests."""

    def __init__(self, token_url: str) -> None:
        self._token_url = token_url
        self._access_token: Optional[str] = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    @property
    def identity(self) -> Optional[str]:
        """Account identity shown in debug output."""
        return None

    async def get_token(self, session: aiohttp.ClientSession) -> str:
        """Return a valid access token, refreshing it when needed."""
        async with self._lock:
            if self._access_token and time.time() < self._expires_at:
                return self._access_token

            payload = await self._exchange(session, self._grant_form())
            token = payload.get("access_token")
            if not token:
                raise ProviderRejectedError(
                    200, payload, "Token endpoint returned no access_token")

            expires_in = float(payload.get("expires_in", 3600))
            self._access_token = token
            self._expires_at = time.time() + max(expires_in - EXPIRY_MARGIN, 0.0)
            logger.debug(f"Obtained access token valid for {expires_in:.0f}s")
            return self._access_token

    def invalidate(self) -> None:
        """Drop the cached token so the next call fetches a fresh one."""
        self._access_token = None
        self._expires_at = 0.0

    @abstractmethod
    def _grant_form(self) -> Dict[str, str]:
        """Form fields posted to the token endpoint."""
        pass

    async def _exchange(self, session: aiohttp.ClientSession, form: Dict[str, str]) -> Dict[str, Any]:
        try:
            async with session.post(self._token_url, data=form) as response:
                if response.status != 200:
                    body = await read_body(response)
                    raise ProviderRejectedError(
                        response.status, body,
                        f"Token request failed with status {response.status}"
                    )
                return await response.json(content_type=None)  # type: ignore[no-any-return]
        except aiohttp.ClientError as e:
            raise NetworkFailureError(f"Token request failed: {e}") from e


class RefreshTokenCredentials(TokenSource):
    """OAuth client credentials with a stored refresh token."""

    def __init__(self, client_id: str, client_secret: str, refresh_token: str, token_url: str):
        super().__init__(token_url)
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token

    def _grant_form(self) -> Dict[str, str]:
        return {
            "grant_type": "refresh_token",
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "refresh_token": self._refresh_token,
        }


class ServiceAccountCredentials(TokenSource):
    """Service-account key exchanged for tokens via an RS256 JWT assertion."""

    def __init__(self, info: Dict[str, Any], scopes: List[str], token_url: str):
        super().__init__(token_url)
        self._info = info
        self._scopes = scopes

    @property
    def identity(self) -> Optional[str]:
        return self._info.get("client_email")

    def build_assertion(self, now: Optional[int] = None) -> str:
        """Sign the JWT bearer assertion for the token request."""
        issued_at = int(now if now is not None else time.time())
        claims = {
            "iss": self._info.get("client_email"),
            "scope": " ".join(self._scopes),
            "aud": self._token_url,
            "iat": issued_at,
            "exp": issued_at + 3600,
        }
        headers = {}
        if self._info.get("private_key_id"):
            headers["kid"] = self._info["private_key_id"]

        return jwt.encode(claims, self._info["private_key"], algorithm="RS256", headers=headers)

    def _grant_form(self) -> Dict[str, str]:
        return {
            "grant_type": JWT_BEARER_GRANT,
            "assertion": self.build_assertion(),
        }


def create_token_source(config: DriveConfig) -> TokenSource:
    """Build the token source matching the configured credential model."""
    if config.effective_auth_mode == AUTH_MODE_SERVICE_ACCOUNT:
        return ServiceAccountCredentials(
            config.service_account_info(), config.scopes, config.token_url
        )

    return RefreshTokenCredentials(
        config.client_id or "",
        config.client_secret or "",
        config.refresh_token or "",
        config.token_url
    )


async def read_body(response: aiohttp.ClientResponse) -> Any:
    """Provider response body, decoded as JSON when possible."""
    text = await response.text()
    try:
        return json.loads(text)
    except ValueError:
        return text
