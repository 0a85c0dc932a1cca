"""
Strava Connector Configuration
------------------------------
Endpoints, defaults and environment variable names for the Strava connector.
"""

import os
from pathlib import Path
from typing import Final, List

# =============================================================================
# Strava API
# =============================================================================

STRAVA_AUTHORIZE_URL: Final[str] = "https://www.strava.com/oauth/authorize"
STRAVA_TOKEN_URL: Final[str] = "https://www.strava.com/oauth/token"
STRAVA_API_URL: Final[str] = "https://www.strava.com/api/v3"
STRAVA_ACTIVITIES_URL: Final[str] = f"{STRAVA_API_URL}/athlete/activities"

# Only the first page is ever requested.
ACTIVITIES_PAGE_SIZE: Final[int] = 200

SCOPES: Final[List[str]] = ["read", "activity:read_all"]
DEFAULT_REDIRECT_PATH: Final[str] = "/api/auth/callback"

# =============================================================================
# Timeouts & token expiry
# =============================================================================

REQUEST_TIMEOUT_SECONDS: Final[float] = float(
    os.getenv("STRAVA_REQUEST_TIMEOUT", "30")
)

# Tokens are refreshed this many seconds before their announced expiry.
TOKEN_EXPIRY_MARGIN_SECONDS: Final[float] = 60.0

# Used when a token response carries neither expires_at nor expires_in.
DEFAULT_TOKEN_LIFETIME_SECONDS: Final[int] = 6 * 3600

# =============================================================================
# Environment
# =============================================================================

ENV_CLIENT_ID: Final[str] = "STRAVA_CLIENT_ID"
ENV_CLIENT_SECRET: Final[str] = "STRAVA_CLIENT_SECRET"
ENV_REFRESH_TOKEN: Final[str] = "STRAVA_REFRESH_TOKEN"
ENV_TOKEN_FILE: Final[str] = "STRAVA_TOKEN_FILE"

DEFAULT_TOKEN_FILE: Final[Path] = Path.home() / ".stravadash_tokens.json"

# Persisted token keys
KEY_ACCESS_TOKEN: Final[str] = "strava_access_token"
KEY_REFRESH_TOKEN: Final[str] = "strava_refresh_token"
KEY_EXPIRES_AT: Final[str] = "strava_expires_at"
