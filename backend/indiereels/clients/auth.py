"""Hosted auth client — IAuthProvider implementation.

Validates bearer tokens against the hosted backend's GoTrue-style
``/auth/v1/user`` endpoint.
"""

import httpx
import logging
from typing import Optional

from indiereels.clients.base import IAuthProvider, AuthUser
from indiereels.errors import StoreError

logger = logging.getLogger(__name__)


class HostedAuthClient(IAuthProvider):
    """Hosted backend implementation of IAuthProvider."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def get_user(self, access_token: str) -> Optional[AuthUser]:
        """Resolve a token. 401/403 means the token itself was rejected."""
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token}",
        }
        try:
            async with self._client() as client:
                resp = await client.get(f"{self.url}/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.exception("Auth lookup failed")
            raise StoreError("Could not reach the authentication service") from e

        if resp.status_code in (401, 403):
            logger.warning("Rejected access token (%s)", resp.status_code)
            return None
        if resp.status_code >= 400:
            raise StoreError("The authentication service rejected the request")

        data = resp.json()
        if not data.get("id"):
            return None
        return AuthUser(id=data["id"], email=data.get("email") or "")
