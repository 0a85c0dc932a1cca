"""
Strava Token Cache
------------------
Holds the current bearer token and its expiry, refreshing it on demand.

One instance is built per process and handed to whoever needs a token.
Refreshes are single-flight: callers arriving while a refresh is running
wait for it and reuse its result instead of starting their own.
"""

import logging
import threading
import time
from typing import Callable, Optional, Tuple

from .client import (
    StravaCredentials,
    TokenSet,
    exchange_code_for_token,
    refresh_access_token,
)
from .config import (
    KEY_ACCESS_TOKEN,
    KEY_EXPIRES_AT,
    KEY_REFRESH_TOKEN,
    REQUEST_TIMEOUT_SECONDS,
    TOKEN_EXPIRY_MARGIN_SECONDS,
)
from .token_store import InMemoryStore, KeyValueStore

logger = logging.getLogger(__name__)

RefreshFn = Callable[..., TokenSet]
CodeExchangeFn = Callable[..., TokenSet]


class TokenCache:
    """Injectable cache for the Strava bearer token."""

    def __init__(
        self,
        credentials: StravaCredentials,
        store: Optional[KeyValueStore] = None,
        refresh_fn: RefreshFn = refresh_access_token,
        code_exchange_fn: CodeExchangeFn = exchange_code_for_token,
        clock: Callable[[], float] = time.time,
        margin_seconds: float = TOKEN_EXPIRY_MARGIN_SECONDS,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        """
        Initialize the cache.

        Args:
            credentials: Client credentials; the refresh token they carry is
                the fallback when the store holds none.
            store: Where tokens are persisted after each successful exchange.
            refresh_fn: Refresh-token exchange (network call).
            code_exchange_fn: Authorization-code exchange (network call).
            clock: Returns the current epoch time in seconds.
            margin_seconds: Tokens are considered expired this long before
                their announced expiry.
            timeout: Timeout passed to the exchange calls.
        """
        self.credentials = credentials
        self.store = store if store is not None else InMemoryStore()
        self._refresh_fn = refresh_fn
        self._code_exchange_fn = code_exchange_fn
        self._clock = clock
        self.margin_seconds = margin_seconds
        self.timeout = timeout

        self._lock = threading.Lock()
        # (access token, expires_at epoch seconds), swapped as a whole
        self._state: Tuple[Optional[str], float] = (None, 0.0)
        self._refresh_token: Optional[str] = credentials.refresh_token

    # =========================================================================
    # State
    # =========================================================================

    @property
    def expires_at(self) -> float:
        return self._state[1]

    @property
    def has_refresh_token(self) -> bool:
        return bool(self._refresh_token)

    def _fresh_token(self) -> Optional[str]:
        token, expires_at = self._state
        if token and self._clock() < expires_at - self.margin_seconds:
            return token
        return None

    def is_valid(self) -> bool:
        """True when a non-expired token is cached."""
        return self._fresh_token() is not None

    def _apply(self, tokens: TokenSet) -> None:
        """Swap in new tokens and persist them."""
        self._state = (tokens.access_token, tokens.expires_at)
        if tokens.refresh_token:
            self._refresh_token = tokens.refresh_token

        self.store.set(KEY_ACCESS_TOKEN, tokens.access_token)
        self.store.set(KEY_EXPIRES_AT, str(tokens.expires_at))
        if self._refresh_token:
            self.store.set(KEY_REFRESH_TOKEN, self._refresh_token)

    def load(self) -> bool:
        """
        Restore tokens persisted by a previous run.

        Returns:
            True if a stored access token was found.
        """
        access_token = self.store.get(KEY_ACCESS_TOKEN)
        refresh_token = self.store.get(KEY_REFRESH_TOKEN)
        expires_at = self.store.get(KEY_EXPIRES_AT)

        expiry = 0.0
        if access_token and expires_at:
            try:
                expiry = float(expires_at)
            except ValueError:
                logger.warning(f"⚠️ Ignoring invalid stored expiry: {expires_at!r}")

        with self._lock:
            if refresh_token:
                self._refresh_token = refresh_token
            if not access_token:
                return False
            self._state = (access_token, expiry)
        logger.info("✅ Loaded Strava tokens from store")
        return True

    def clear(self) -> None:
        """Forget every token, in memory and in the store."""
        with self._lock:
            self._state = (None, 0.0)
            self._refresh_token = None
            for key in (KEY_ACCESS_TOKEN, KEY_REFRESH_TOKEN, KEY_EXPIRES_AT):
                self.store.remove(key)
        logger.info("Strava tokens cleared")

    # =========================================================================
    # Token retrieval
    # =========================================================================

    def get_valid_token(self) -> str:
        """
        Return a usable bearer token, refreshing it first if it has expired.

        Raises:
            ConfigurationError: if no refresh token is known.
            AuthExchangeError: if the refresh exchange fails.
        """
        token = self._fresh_token()
        if token:
            return token

        with self._lock:
            # Another caller may have refreshed while we were waiting.
            token = self._fresh_token()
            if token:
                return token

            logger.debug("🔄 Token expired, refreshing...")
            tokens = self._refresh_fn(
                self.credentials, self._refresh_token, timeout=self.timeout
            )
            self._apply(tokens)
            return tokens.access_token

    # =========================================================================
    # Authorization entry points
    # =========================================================================

    def bootstrap_from_code(self, code: str) -> TokenSet:
        """Authorization-code flow: exchange the code returned by the redirect."""
        with self._lock:
            tokens = self._code_exchange_fn(self.credentials, code, timeout=self.timeout)
            self._apply(tokens)
        logger.info("✅ Authorized with Strava")
        return tokens

    def bootstrap_from_refresh_token(self, refresh_token: str) -> str:
        """Pre-existing token flow: adopt a refresh token and exchange it right away."""
        with self._lock:
            self._refresh_token = refresh_token
            self._state = (None, 0.0)
        return self.get_valid_token()
