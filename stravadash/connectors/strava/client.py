"""
Strava API client.
Token exchanges against the OAuth endpoint and the single-page activities
fetch used by the dashboard.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import requests

from .config import (
    ACTIVITIES_PAGE_SIZE,
    DEFAULT_TOKEN_LIFETIME_SECONDS,
    ENV_CLIENT_ID,
    ENV_CLIENT_SECRET,
    ENV_REFRESH_TOKEN,
    REQUEST_TIMEOUT_SECONDS,
    SCOPES,
    STRAVA_ACTIVITIES_URL,
    STRAVA_AUTHORIZE_URL,
    STRAVA_TOKEN_URL,
)
from .errors import AuthExchangeError, ConfigurationError, FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StravaCredentials:
    """Application credentials plus the optional long-lived refresh token."""

    client_id: str
    client_secret: str = field(repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class TokenSet:
    """Result of a successful token exchange."""

    access_token: str = field(repr=False)
    refresh_token: Optional[str] = field(repr=False)
    expires_at: float

    @classmethod
    def from_response(cls, payload: Dict[str, Any], now: Optional[float] = None) -> "TokenSet":
        """
        Build a TokenSet from a token endpoint response.

        ``expires_at`` (epoch seconds) wins over ``expires_in``; when both are
        missing a default lifetime is assumed.

        Raises:
            AuthExchangeError: if the payload has no access token.
        """
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise AuthExchangeError("No access_token in token response")
        now = time.time() if now is None else now
        if payload.get("expires_at") is not None:
            expires_at = float(payload["expires_at"])
        else:
            expires_at = now + float(
                payload.get("expires_in", DEFAULT_TOKEN_LIFETIME_SECONDS)
            )
        return cls(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_at=expires_at,
        )


@dataclass
class ActivityBatch:
    """One page of raw activities as returned by /athlete/activities."""

    activities: List[Dict[str, Any]]
    fetched_at: datetime
    page_size: int = ACTIVITIES_PAGE_SIZE

    @property
    def item_count(self) -> int:
        """Return number of activities fetched."""
        return len(self.activities)

    @property
    def possibly_truncated(self) -> bool:
        """True when the page came back full, so older activities were left out."""
        return self.item_count >= self.page_size


def get_strava_credentials(require_refresh_token: bool = False) -> StravaCredentials:
    """Load Strava API credentials from the environment."""
    client_id = os.getenv(ENV_CLIENT_ID)
    client_secret = os.getenv(ENV_CLIENT_SECRET)
    refresh_token = os.getenv(ENV_REFRESH_TOKEN) or None
    required = {ENV_CLIENT_ID: client_id, ENV_CLIENT_SECRET: client_secret}
    if require_refresh_token:
        required[ENV_REFRESH_TOKEN] = refresh_token
    missing = [k for k, v in required.items() if not v]
    if missing:
        raise ConfigurationError(
            f"Missing Strava credentials in environment or .env file: {', '.join(missing)}"
        )
    return StravaCredentials(client_id, client_secret, refresh_token)


def build_authorization_url(
    client_id: str, redirect_uri: str, scopes: Optional[List[str]] = None
) -> str:
    """Construct the OAuth authorization URL the user has to visit."""
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "approval_prompt": "auto",
        "scope": ",".join(scopes or SCOPES),
    }
    return f"{STRAVA_AUTHORIZE_URL}?{urlencode(params)}"


def _exchange_token(
    credentials: StravaCredentials,
    grant: Dict[str, str],
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> TokenSet:
    data = {
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
        **grant,
    }
    grant_type = grant["grant_type"]
    try:
        resp = requests.post(STRAVA_TOKEN_URL, data=data, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise AuthExchangeError(f"Token exchange ({grant_type}) failed: {e}", original_error=e) from e

    if not 200 <= resp.status_code < 300:
        logger.error(f"Token exchange ({grant_type}) rejected with status {resp.status_code}")
        logger.debug(f"Response body: {resp.text}")
        raise AuthExchangeError(
            f"Token exchange ({grant_type}) failed with status {resp.status_code}",
            status_code=resp.status_code,
        )
    try:
        payload = resp.json()
    except ValueError as e:
        raise AuthExchangeError("Malformed token response", original_error=e) from e

    tokens = TokenSet.from_response(payload)
    logger.info(f"✅ Strava token exchange ({grant_type}) succeeded")
    return tokens


def refresh_access_token(
    credentials: StravaCredentials,
    refresh_token: Optional[str] = None,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> TokenSet:
    """
    Exchange a refresh token for a fresh access token.

    Args:
        credentials: Client id/secret; its refresh token is used unless
            ``refresh_token`` is given.
        refresh_token: Refresh token overriding the one in ``credentials``.
        timeout: Request timeout in seconds.

    Raises:
        ConfigurationError: if no refresh token is available.
        AuthExchangeError: on any exchange failure.
    """
    token = refresh_token or credentials.refresh_token
    if not token:
        raise ConfigurationError("No refresh token available")
    tokens = _exchange_token(
        credentials,
        {"grant_type": "refresh_token", "refresh_token": token},
        timeout=timeout,
    )
    if not tokens.refresh_token:
        # Strava may omit the refresh token when it did not rotate it.
        tokens = TokenSet(tokens.access_token, token, tokens.expires_at)
    return tokens


def exchange_code_for_token(
    credentials: StravaCredentials,
    code: str,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> TokenSet:
    """Exchange an OAuth authorization code for access and refresh tokens."""
    return _exchange_token(
        credentials,
        {"grant_type": "authorization_code", "code": code},
        timeout=timeout,
    )


def fetch_activities(
    token: str,
    per_page: int = ACTIVITIES_PAGE_SIZE,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> ActivityBatch:
    """
    Fetch the first page of the athlete's activities, newest first.

    No further page is requested; ``ActivityBatch.possibly_truncated`` tells
    the caller when more activities may exist.

    Raises:
        FetchError: on timeout, connection failure, non-2xx status or a body
            that is not a JSON array.
    """
    headers = {"Authorization": f"Bearer {token}"}
    params = {"per_page": per_page}
    try:
        resp = requests.get(
            STRAVA_ACTIVITIES_URL, headers=headers, params=params, timeout=timeout
        )
    except requests.exceptions.Timeout as e:
        raise FetchError(f"Activities request timed out after {timeout}s", original_error=e) from e
    except requests.exceptions.RequestException as e:
        raise FetchError(f"Activities request failed: {e}", original_error=e) from e

    if not 200 <= resp.status_code < 300:
        raise FetchError(
            f"Activities request failed with status {resp.status_code}",
            status_code=resp.status_code,
        )
    try:
        activities = resp.json()
    except ValueError as e:
        raise FetchError("Activities response is not valid JSON", original_error=e) from e
    if not isinstance(activities, list):
        raise FetchError("Activities response is not a list")

    batch = ActivityBatch(
        activities=activities,
        fetched_at=datetime.now(timezone.utc),
        page_size=per_page,
    )
    logger.info(f"✅ {batch.item_count} activities loaded")
    if batch.possibly_truncated:
        logger.warning(
            f"⚠️ Page of {per_page} activities is full, older activities were not fetched"
        )
    return batch
