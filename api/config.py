import os

from dotenv import load_dotenv

load_dotenv()

APP_TITLE = "Strava Dashboard API"
APP_VERSION = "1.0.0"

# Overrides the host used to build the OAuth redirect URI
APP_URL = os.getenv("APP_URL", "").rstrip("/")
DEBUG = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = "DEBUG" if DEBUG else os.getenv("LOG_LEVEL", "INFO")

PROXY_ERROR_MESSAGE = "Failed to fetch Strava data"
PROXY_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
}
