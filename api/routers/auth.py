# api/routers/auth.py
"""OAuth authorization-code flow and token status."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.config import APP_URL, PROXY_ERROR_MESSAGE
from api.dependencies import require_token_cache
from api.models.auth import AuthResult, AuthStatus, AuthUrl
from stravadash.connectors.strava import (
    AuthExchangeError,
    TokenCache,
    build_authorization_url,
)
from stravadash.connectors.strava.config import DEFAULT_REDIRECT_PATH

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_datetime(epoch: float) -> Optional[datetime]:
    return datetime.fromtimestamp(epoch, tz=timezone.utc) if epoch else None


def redirect_uri_for(request: Request, app_url: str = "") -> str:
    """APP_URL when configured, otherwise the host the request came in on."""
    base = app_url or str(request.base_url)
    return base.rstrip("/") + DEFAULT_REDIRECT_PATH


@router.get("/url", response_model=AuthUrl)
def get_authorization_url(
    request: Request, cache: TokenCache = Depends(require_token_cache)
):
    redirect_uri = redirect_uri_for(request, APP_URL)
    url = build_authorization_url(cache.credentials.client_id, redirect_uri)
    return AuthUrl(url=url, redirect_uri=redirect_uri)


@router.get("/callback", response_model=AuthResult)
def authorization_callback(
    code: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    cache: TokenCache = Depends(require_token_cache),
):
    """Échange le code renvoyé par Strava contre les tokens"""
    if error or not code:
        raise HTTPException(
            status_code=400, detail=f"Authorization was not granted: {error or 'missing code'}"
        )
    try:
        tokens = cache.bootstrap_from_code(code)
    except AuthExchangeError as e:
        logger.error(f"Authorization code exchange failed: {e}")
        raise HTTPException(status_code=500, detail=PROXY_ERROR_MESSAGE) from e
    return AuthResult(status="authorized", expires_at=_to_datetime(tokens.expires_at))


@router.get("/status", response_model=AuthStatus)
def get_auth_status(cache: TokenCache = Depends(require_token_cache)):
    return AuthStatus(
        authenticated=cache.is_valid(),
        has_refresh_token=cache.has_refresh_token,
        expires_at=_to_datetime(cache.expires_at),
    )


@router.post("/logout", response_model=AuthResult)
def logout(cache: TokenCache = Depends(require_token_cache)):
    cache.clear()
    return AuthResult(status="logged_out")
