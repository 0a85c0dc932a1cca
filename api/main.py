# api/main.py
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.config import APP_TITLE, APP_VERSION, LOG_LEVEL
from api.routers import activities, auth, dashboard
from stravadash.connectors.utils import setup_logging

setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=APP_TITLE,
    description="Per-sport dashboard over the latest Strava activities",
    version=APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(activities.router, prefix="/.netlify/functions", tags=["proxy"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])


@app.get("/")
def root():
    return {
        "message": APP_TITLE,
        "version": APP_VERSION,
        "endpoints": {
            "activities_proxy": "/.netlify/functions/strava-activities",
            "dashboard": "/api/dashboard",
            "sport_summaries": "/api/dashboard/summaries",
            "auth_url": "/api/auth/url",
            "auth_callback": "/api/auth/callback",
            "auth_status": "/api/auth/status",
        },
    }


@app.get("/health")
def health():
    return {"status": "healthy"}


def main() -> None:
    """Run the API with uvicorn."""
    logger.info(f"Starting {APP_TITLE}...")
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
