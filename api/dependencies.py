import logging
import os
from pathlib import Path
from typing import Optional

from fastapi import HTTPException

from stravadash.connectors.strava import (
    ConfigurationError,
    JsonFileStore,
    TokenCache,
    get_strava_credentials,
)
from stravadash.connectors.strava.config import DEFAULT_TOKEN_FILE, ENV_TOKEN_FILE

logger = logging.getLogger(__name__)

_token_cache: Optional[TokenCache] = None


def get_token_cache() -> TokenCache:
    """Process-wide token cache, built and loaded from the token file on first use."""
    global _token_cache
    if _token_cache is None:
        token_file = Path(os.getenv(ENV_TOKEN_FILE) or DEFAULT_TOKEN_FILE)
        cache = TokenCache(get_strava_credentials(), store=JsonFileStore(token_file))
        cache.load()
        _token_cache = cache
    return _token_cache


def reset_token_cache() -> None:
    global _token_cache
    _token_cache = None


def optional_token_cache() -> Optional[TokenCache]:
    """Token cache, or None when the Strava credentials are not configured."""
    try:
        return get_token_cache()
    except ConfigurationError as e:
        logger.error(f"Strava credentials not configured: {e}")
        return None


def require_token_cache() -> TokenCache:
    """Token cache for routes that cannot work without credentials."""
    try:
        return get_token_cache()
    except ConfigurationError as e:
        raise HTTPException(
            status_code=500, detail="Missing Strava client credentials."
        ) from e
