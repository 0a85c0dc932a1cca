"""
Tests for the API served through FastAPI: routing, dependencies and serialization.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from api.dependencies import (
    get_token_cache,
    optional_token_cache,
    require_token_cache,
    reset_token_cache,
)
from api.main import app
from api.routers import activities as activities_router
from api.routers import dashboard as dashboard_router
from stravadash.connectors.strava import (
    ActivityBatch,
    InMemoryStore,
    JsonFileStore,
    StravaCredentials,
    TokenCache,
    TokenSet,
)
from stravadash.connectors.strava.config import KEY_ACCESS_TOKEN, KEY_EXPIRES_AT

PROXY_URL = "/.netlify/functions/strava-activities"

RAW = [
    {"id": 3, "type": "Workout", "distance": 0, "total_elevation_gain": 0, "moving_time": 0, "start_date": "2024-01-03T07:00:00Z"},
    {"id": 2, "type": "Run", "distance": 10000, "total_elevation_gain": 100, "moving_time": 3600, "start_date": "2024-01-02T07:00:00Z"},
    {"id": 1, "type": "Run", "distance": 5000, "total_elevation_gain": 50, "moving_time": 1800, "start_date": "2024-01-01T07:00:00Z"},
]


def make_batch(activities=None):
    return ActivityBatch(
        activities=RAW if activities is None else activities,
        fetched_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def client():
    reset_token_cache()
    yield TestClient(app)
    app.dependency_overrides.clear()
    reset_token_cache()


@pytest.fixture
def fake_cache():
    cache = MagicMock(spec=TokenCache)
    cache.get_valid_token.return_value = "tok"
    app.dependency_overrides[optional_token_cache] = lambda: cache
    return cache


@pytest.fixture
def no_credentials(monkeypatch, tmp_path):
    monkeypatch.delenv("STRAVA_CLIENT_ID", raising=False)
    monkeypatch.delenv("STRAVA_CLIENT_SECRET", raising=False)
    monkeypatch.delenv("STRAVA_REFRESH_TOKEN", raising=False)
    monkeypatch.setenv("STRAVA_TOKEN_FILE", str(tmp_path / "tokens.json"))


@pytest.fixture
def stored_token(monkeypatch, tmp_path):
    token_file = tmp_path / "tokens.json"
    store = JsonFileStore(token_file)
    store.set(KEY_ACCESS_TOKEN, "stored-token")
    store.set(KEY_EXPIRES_AT, "4102444800")
    monkeypatch.setenv("STRAVA_CLIENT_ID", "42")
    monkeypatch.setenv("STRAVA_CLIENT_SECRET", "secret")
    monkeypatch.delenv("STRAVA_REFRESH_TOKEN", raising=False)
    monkeypatch.setenv("STRAVA_TOKEN_FILE", str(token_file))


class TestMissingCredentials:
    def test_every_route_answers_500(self, client, no_credentials):
        resp = client.get(PROXY_URL)
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch Strava data"}
        assert resp.headers["access-control-allow-origin"] == "*"

        resp = client.get("/api/dashboard")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Failed to fetch Strava data"}

        resp = client.get("/api/auth/status")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Missing Strava client credentials."}

    def test_health_does_not_need_credentials(self, client, no_credentials):
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/").json()["endpoints"]["activities_proxy"] == PROXY_URL


class TestTokenCacheWiring:
    def test_cache_is_built_once_from_token_file(self, client, stored_token):
        with patch.object(activities_router, "fetch_activities", return_value=make_batch()) as fetch:
            first = client.get(PROXY_URL)
            second = client.get(PROXY_URL)

        assert first.status_code == second.status_code == 200
        assert first.json() == RAW
        assert [c.args[0] for c in fetch.call_args_list] == ["stored-token", "stored-token"]
        assert get_token_cache() is get_token_cache()

    def test_reset_rebuilds_cache(self, client, stored_token):
        cache = get_token_cache()
        reset_token_cache()
        assert get_token_cache() is not cache

    def test_status_reports_stored_token(self, client, stored_token):
        body = client.get("/api/auth/status").json()
        assert body["authenticated"] is True
        assert body["has_refresh_token"] is False
        assert body["expires_at"].startswith("2100-01-01T00:00:00")


class TestDashboardEndpoints:
    def test_dashboard_serialization(self, client, fake_cache):
        with patch.object(dashboard_router, "fetch_activities", return_value=make_batch()):
            resp = client.get("/api/dashboard")

        assert resp.status_code == 200
        body = resp.json()
        assert body["activity_count"] == 3
        assert body["possibly_truncated"] is False
        assert [card["title"] for card in body["cards"]] == ["Run", "Workout"]
        run = body["cards"][0]
        assert run["total_distance"] == "15.00 km"
        assert run["average_speed"] == "10.00 km/h"
        assert [row["date"] for row in run["chart"]] == ["1/1/2024", "1/2/2024"]
        assert body["cards"][1]["average_speed"] == "N/A"

    def test_summaries_serialize_missing_speed_as_null(self, client, fake_cache):
        with patch.object(dashboard_router, "fetch_activities", return_value=make_batch()):
            body = client.get("/api/dashboard/summaries").json()

        assert [s["sport"] for s in body] == ["Run", "Workout"]
        assert body[0]["total_distance_km"] == 15.0
        assert body[1]["average_speed_km_h"] is None

    @pytest.mark.parametrize("path", ["/api/dashboard", "/api/dashboard/summaries"])
    def test_unusable_activity_is_generic_500(self, client, fake_cache, path):
        bad = make_batch(activities=[{"type": "Run", "distance": 1}])
        with patch.object(dashboard_router, "fetch_activities", return_value=bad):
            resp = client.get(path)

        assert resp.status_code == 500
        assert resp.json() == {"detail": "Failed to fetch Strava data"}

    def test_proxy_with_injected_cache(self, client, fake_cache):
        with patch.object(activities_router, "fetch_activities", return_value=make_batch()):
            resp = client.get(PROXY_URL)
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-headers"] == "Content-Type"


class TestAuthEndpoints:
    @pytest.fixture
    def auth_cache(self):
        cache = TokenCache(
            StravaCredentials("42", "secret"),
            store=InMemoryStore(),
            refresh_fn=MagicMock(),
            code_exchange_fn=MagicMock(return_value=TokenSet("tok", "ref", 4_102_444_800.0)),
            clock=lambda: 1_700_000_000.0,
        )
        app.dependency_overrides[require_token_cache] = lambda: cache
        return cache

    def test_url_callback_status_logout(self, client, auth_cache):
        with patch("api.routers.auth.APP_URL", ""):
            url = client.get("/api/auth/url").json()
        assert url["redirect_uri"] == "http://testserver/api/auth/callback"

        resp = client.get("/api/auth/callback", params={"code": "abc"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "authorized"
        assert client.get("/api/auth/status").json()["authenticated"] is True

        assert client.post("/api/auth/logout").json()["status"] == "logged_out"
        assert client.get("/api/auth/status").json()["authenticated"] is False

    def test_denied_callback(self, client, auth_cache):
        resp = client.get("/api/auth/callback", params={"error": "access_denied"})
        assert resp.status_code == 400
