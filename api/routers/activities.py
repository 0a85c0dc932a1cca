# api/routers/activities.py
"""Serverless-style proxy: fetch the activities with server-held credentials."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.config import PROXY_CORS_HEADERS, PROXY_ERROR_MESSAGE
from api.dependencies import optional_token_cache
from api.models.activities import ProxyError
from stravadash.connectors.strava import (
    ConfigurationError,
    TokenCache,
    fetch_activities,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/strava-activities", responses={500: {"model": ProxyError}})
def get_strava_activities(cache: Optional[TokenCache] = Depends(optional_token_cache)):
    """Renvoie la page brute des 200 dernières activités Strava"""
    try:
        if cache is None:
            raise ConfigurationError("Strava credentials are not configured")
        batch = fetch_activities(cache.get_valid_token())
    except Exception:
        # Upstream detail stays in the server logs.
        logger.exception("Error fetching Strava data")
        return JSONResponse(
            status_code=500,
            content={"error": PROXY_ERROR_MESSAGE},
            headers=PROXY_CORS_HEADERS,
        )

    headers = dict(PROXY_CORS_HEADERS)
    if batch.possibly_truncated:
        headers["X-Possibly-Truncated"] = "true"
    return JSONResponse(content=batch.activities, headers=headers)
