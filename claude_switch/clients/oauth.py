"""Claude OAuth token refresh client.

Exchanges a stored refresh token for a new access token at Anthropic's token
endpoint. One request, bounded by a timeout, no retries: a failed refresh
surfaces immediately so the caller can decide between re-authentication
(revoked grant) and giving up.

Refresh tokens are not always rotated; when the response omits one, the old
refresh token stays valid and is kept.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from typing import Any

import httpx

from claude_switch.errors import RefreshError, RefreshErrorKind
from claude_switch.schemas.profiles import OAuthCredentials

__all__ = [
    'CLIENT_ID',
    'EXPIRY_BUFFER_MS',
    'SCOPES',
    'TOKEN_URL',
    'TokenRefresher',
    'is_expired',
    'now_ms',
]

logger = logging.getLogger(__name__)

CLIENT_ID = '9d1c250a-e61b-44d9-88ed-5944d1962f5e'
TOKEN_URL = 'https://platform.claude.com/v1/oauth/token'
SCOPES = 'user:profile user:inference user:sessions:claude_code user:mcp_servers'
OAUTH_BETA = 'oauth-2025-04-20'

DEFAULT_EXPIRES_IN = 3600  # Seconds, when the response has no expires_in

# Refresh five minutes early so Claude Code never sees an expired token
EXPIRY_BUFFER_MS = 5 * 60 * 1000


def now_ms(clock: Callable[[], float] = time.time) -> int:
    return int(clock() * 1000)


def is_expired(credentials: OAuthCredentials, now: int | None = None) -> bool:
    """True once ``now + 5 minutes`` reaches the stored expiry (both in ms)."""
    current = now_ms() if now is None else now
    return current + EXPIRY_BUFFER_MS >= credentials.expires_at


class TokenRefresher:
    """Performs the refresh_token grant.

    Args:
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
        clock: Returns seconds since epoch; used to compute the new expiry.
    """

    def __init__(
        self,
        timeout: float,
        *,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.time,
        token_url: str = TOKEN_URL,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._clock = clock
        self._token_url = token_url

    def refresh(self, credentials: OAuthCredentials) -> OAuthCredentials:
        """Exchange the refresh token for new credentials.

        Raises:
            RefreshError: kind INVALID_GRANT if the refresh token was revoked,
                MALFORMED_RESPONSE if a 2xx response lacks an access token,
                OTHER for any other HTTP or network failure.
        """
        payload = {
            'grant_type': 'refresh_token',
            'refresh_token': credentials.refresh_token,
            'client_id': CLIENT_ID,
            'scope': SCOPES,
        }
        headers = {
            'Content-Type': 'application/json',
            'anthropic-beta': OAUTH_BETA,
        }

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self._token_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise RefreshError(RefreshErrorKind.OTHER, f'token refresh request failed: {e}') from e

        if not response.is_success:
            body = response.text
            if 'invalid_grant' in body:
                logger.info(f'Refresh token rejected ({response.status_code}): invalid_grant')
                raise RefreshError(
                    RefreshErrorKind.INVALID_GRANT,
                    'refresh token is invalid or revoked',
                    status_code=response.status_code,
                    body=body,
                )
            raise RefreshError(
                RefreshErrorKind.OTHER,
                f'token refresh failed ({response.status_code}): {body}',
                status_code=response.status_code,
                body=body,
            )

        return self._parse_success(response, credentials)

    def _parse_success(self, response: httpx.Response, previous: OAuthCredentials) -> OAuthCredentials:
        try:
            data: Any = response.json()
        except ValueError as e:
            raise RefreshError(
                RefreshErrorKind.MALFORMED_RESPONSE,
                f'failed to parse token response as JSON: {e}',
                status_code=response.status_code,
                body=response.text,
            ) from e

        access_token = data.get('access_token') if isinstance(data, dict) else None
        if not isinstance(access_token, str) or not access_token:
            raise RefreshError(
                RefreshErrorKind.MALFORMED_RESPONSE,
                'missing access_token in refresh response',
                status_code=response.status_code,
                body=response.text,
            )

        refresh_token = data.get('refresh_token')
        if not isinstance(refresh_token, str) or not refresh_token:
            refresh_token = previous.refresh_token

        expires_in = _expires_in_seconds(data.get('expires_in'))

        logger.debug(f'Token refreshed, expires in {expires_in}s, rotated={refresh_token != previous.refresh_token}')
        return previous.model_copy(
            update={
                'access_token': access_token,
                'refresh_token': refresh_token,
                'expires_at': now_ms(self._clock) + expires_in * 1000,
            }
        )


def _expires_in_seconds(value: object) -> int:
    """Lifetime from the response, truncated to whole seconds; DEFAULT_EXPIRES_IN if unusable."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return DEFAULT_EXPIRES_IN
    if not math.isfinite(value) or value < 0:
        return DEFAULT_EXPIRES_IN
    return int(value)
