"""
Task Board — Session state.

``project_session`` is the confidentiality boundary: only the access token
and the error flag leave the server, never the refresh token.

``SessionManager`` holds the token record for the running service and runs
it through the refresh manager on each access.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from taskboard.integrations.google_auth import ensure_fresh_token, token_from_grant

if TYPE_CHECKING:
    import httpx

    from taskboard.data.models import AuthToken, Grant

logger = logging.getLogger(__name__)


def project_session(token: AuthToken | None) -> dict[str, Any]:
    """Client-visible view of a token record."""
    if token is None:
        return {"accessToken": None, "error": None}
    return {"accessToken": token.access_token, "error": token.error}


class SessionManager:
    """Single-user token holder for the board service."""

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self._http_client = http_client
        self._token: AuthToken | None = None
        self._refresh_lock = asyncio.Lock()

    @property
    def token(self) -> AuthToken | None:
        return self._token

    def sign_in(self, grant: Grant) -> AuthToken:
        self._token = token_from_grant(grant)
        logger.info("Signed in with Google")
        return self._token

    def sign_out(self) -> None:
        self._token = None
        logger.info("Signed out")

    async def current_token(self) -> AuthToken | None:
        """The token record, refreshed first if it has expired."""
        if self._token is None:
            return None
        async with self._refresh_lock:
            if self._token is None:
                return None
            self._token = await ensure_fresh_token(
                self._token, http_client=self._http_client
            )
            if self._token.error:
                logger.warning("Session token is flagged: %s", self._token.error)
            return self._token

    async def session(self) -> dict[str, Any] | None:
        token = await self.current_token()
        if token is None:
            return None
        return project_session(token)
