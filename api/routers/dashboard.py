# api/routers/dashboard.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from api.config import PROXY_ERROR_MESSAGE
from api.dependencies import optional_token_cache
from stravadash.connectors.strava import (
    ActivityBatch,
    StravaError,
    TokenCache,
    fetch_activities,
)
from stravadash.services.dashboard import (
    DashboardView,
    SportSummary,
    aggregate,
    build_dashboard,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_batch(cache: Optional[TokenCache]) -> ActivityBatch:
    if cache is None:
        raise HTTPException(status_code=500, detail=PROXY_ERROR_MESSAGE)
    try:
        return fetch_activities(cache.get_valid_token())
    except StravaError as e:
        logger.error(f"Error fetching Strava data: {e}")
        raise HTTPException(status_code=500, detail=PROXY_ERROR_MESSAGE) from e


@router.get("", response_model=DashboardView)
def get_dashboard(cache: Optional[TokenCache] = Depends(optional_token_cache)):
    """Cartes par sport, graphique de comparaison et avertissement de troncature"""
    batch = _load_batch(cache)
    try:
        return build_dashboard(
            batch.activities,
            possibly_truncated=batch.possibly_truncated,
            page_size=batch.page_size,
        )
    except ValidationError as e:
        logger.exception("Strava returned an activity that cannot be aggregated")
        raise HTTPException(status_code=500, detail=PROXY_ERROR_MESSAGE) from e


@router.get("/summaries", response_model=List[SportSummary])
def get_sport_summaries(cache: Optional[TokenCache] = Depends(optional_token_cache)):
    """Statistiques agrégées par sport"""
    batch = _load_batch(cache)
    try:
        return aggregate(batch.activities)
    except ValidationError as e:
        logger.exception("Strava returned an activity that cannot be aggregated")
        raise HTTPException(status_code=500, detail=PROXY_ERROR_MESSAGE) from e
