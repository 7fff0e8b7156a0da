"""
Task Board — Google OAuth token lifecycle.

Keeps a short-lived access token usable across requests by exchanging the
long-lived refresh token at Google's token endpoint whenever the access
token has expired.

A failed refresh never raises: the previous token comes back flagged with
REFRESH_TOKEN_ERROR so a long-lived session survives a transient provider
outage, and the UI decides when to ask the user to sign in again.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any

import httpx

from taskboard.data.models import REFRESH_TOKEN_ERROR, AuthToken, Grant

logger = logging.getLogger(__name__)

GOOGLE_OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"


class TokenRefreshError(Exception):
    """Internal: the refresh-token exchange did not produce a usable token."""


def _now_ms() -> int:
    return int(time.time() * 1000)


def token_from_grant(grant: Grant) -> AuthToken:
    """Build the token record for a fresh sign-in.

    The provider reports expiry in epoch seconds; a missing expiry is
    stored as 0 so the first use triggers a refresh.
    """
    expires_at_ms = grant.expires_at * 1000 if grant.expires_at else 0
    return AuthToken(
        access_token=grant.access_token,
        refresh_token=grant.refresh_token,
        access_token_expires_at_ms=expires_at_ms,
    )


def _coerce_expires_in_seconds(value: Any) -> int:
    if isinstance(value, bool):
        return 3600
    if isinstance(value, (int, float)):
        return int(value) if value > 0 else 3600
    return 3600


async def _request_new_token(
    refresh_token: str, http_client: httpx.AsyncClient
) -> dict:
    from taskboard.config import settings

    try:
        response = await http_client.post(
            GOOGLE_OAUTH_TOKEN_URL,
            data={
                "client_id": settings.GOOGLE_CLIENT_ID,
                "client_secret": settings.GOOGLE_CLIENT_SECRET,
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
            headers={"Accept": "application/json"},
        )
    except httpx.HTTPError as exc:
        raise TokenRefreshError(f"token request failed: {exc}") from exc

    if response.status_code < 200 or response.status_code >= 300:
        raise TokenRefreshError(f"token endpoint returned {response.status_code}")

    try:
        payload = response.json()
    except ValueError as exc:
        raise TokenRefreshError("token endpoint returned invalid JSON") from exc

    access_token = payload.get("access_token") if isinstance(payload, dict) else None
    if not isinstance(access_token, str) or not access_token.strip():
        raise TokenRefreshError("token response is missing access_token")
    return payload


async def refresh_access_token(
    token: AuthToken,
    *,
    http_client: httpx.AsyncClient | None = None,
    now_ms: int | None = None,
) -> AuthToken:
    """Exchange the refresh token for a new access token.

    Makes exactly one outbound request. On failure, returns a copy of
    ``token`` with ``error`` set instead of raising.
    """
    from taskboard.config import settings

    if now_ms is None:
        now_ms = _now_ms()

    if not token.refresh_token:
        logger.warning("Cannot refresh access token: no refresh token on record")
        return replace(token, error=REFRESH_TOKEN_ERROR)

    try:
        if http_client is not None:
            payload = await _request_new_token(token.refresh_token, http_client)
        else:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
                payload = await _request_new_token(token.refresh_token, client)
    except TokenRefreshError as exc:
        logger.warning("Access token refresh failed: %s", exc)
        return replace(token, error=REFRESH_TOKEN_ERROR)

    expires_in = _coerce_expires_in_seconds(payload.get("expires_in"))
    logger.info("Access token refreshed, valid for %d s", expires_in)
    return AuthToken(
        access_token=payload["access_token"].strip(),
        refresh_token=payload.get("refresh_token") or token.refresh_token,
        access_token_expires_at_ms=now_ms + expires_in * 1000,
        error=None,
    )


async def ensure_fresh_token(
    token: AuthToken,
    *,
    http_client: httpx.AsyncClient | None = None,
    now_ms: int | None = None,
) -> AuthToken:
    """Return a token that is valid now.

    Fast path: an unexpired token is returned as-is with no network call.
    """
    if now_ms is None:
        now_ms = _now_ms()

    if now_ms < token.access_token_expires_at_ms:
        return token

    logger.debug("Access token expired, refreshing")
    return await refresh_access_token(token, http_client=http_client, now_ms=now_ms)
