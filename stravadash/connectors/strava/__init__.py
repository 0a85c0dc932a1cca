"""
Strava Connector
----------------
OAuth token handling and activity fetch for the Strava API.
"""

from .client import (
    ActivityBatch,
    StravaCredentials,
    TokenSet,
    build_authorization_url,
    exchange_code_for_token,
    fetch_activities,
    get_strava_credentials,
    refresh_access_token,
)
from .errors import AuthExchangeError, ConfigurationError, FetchError, StravaError
from .token_cache import TokenCache
from .token_store import InMemoryStore, JsonFileStore, KeyValueStore

__all__ = [
    "ActivityBatch",
    "AuthExchangeError",
    "ConfigurationError",
    "FetchError",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "StravaCredentials",
    "StravaError",
    "TokenCache",
    "TokenSet",
    "build_authorization_url",
    "exchange_code_for_token",
    "fetch_activities",
    "get_strava_credentials",
    "refresh_access_token",
]
