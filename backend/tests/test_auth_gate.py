"""
Tests for the authentication gate (classification + middleware).
"""
import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from recipe_storage.api.middleware import (
    Authenticated,
    NeedsToken,
    Preflight,
    PublicRoute,
    Reject,
    authenticate,
    classify,
    cors_headers,
)
from recipe_storage.core.config import DEFAULT_CORS_ORIGINS
from recipe_storage.main import create_app
from recipe_storage.services.firebase import Principal

from conftest import U1, carbonara, make_settings


def _classify(method="GET", path="/api/recipes", headers=None, auth_enabled=True):
    return classify(method, path, Headers(headers or {}), auth_enabled)


class TestClassify:
    """Test suite for request classification."""

    def test_options_is_preflight(self):
        result = _classify("OPTIONS", headers={"Origin": "http://localhost:5173"})
        assert result == Preflight(origin="http://localhost:5173")

    @pytest.mark.parametrize("path", [
        "/actuator/health",
        "/v3/api-docs",
        "/swagger-ui/index.html",
        "/api/recipes/public",
    ])
    def test_open_paths_skip_auth(self, path):
        assert isinstance(_classify(path=path), PublicRoute)

    def test_auth_disabled_uses_test_user(self):
        result = _classify(auth_enabled=False)
        assert result == Authenticated(Principal(uid="test-user"))

    def test_missing_header(self):
        assert _classify() == Reject(401, "Missing or invalid Authorization header")

    def test_non_bearer_header(self):
        result = _classify(headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert result == Reject(401, "Missing or invalid Authorization header")

    def test_bearer_token_extracted(self):
        assert _classify(headers={"Authorization": "Bearer abc.def"}) == NeedsToken("abc.def")

    def test_preflight_wins_over_missing_auth(self):
        assert isinstance(_classify("OPTIONS", path="/api/recipes/123"), Preflight)


class TestAuthenticate:
    async def test_valid_token(self, verifier):
        result = await authenticate(NeedsToken("token-u1"), verifier)
        assert result == Authenticated(Principal(uid="u1", email="u1@example.com"))

    async def test_invalid_token(self, verifier):
        result = await authenticate(NeedsToken("forged"), verifier)
        assert result == Reject(401, "Invalid Firebase ID token")

    async def test_other_results_pass_through(self, verifier):
        assert isinstance(await authenticate(PublicRoute(), verifier), PublicRoute)
        assert verifier.calls == []


class TestCorsHeaders:
    def test_allowed_origin(self):
        headers = dict(cors_headers("https://recipe-mgmt-dev.web.app", DEFAULT_CORS_ORIGINS))
        assert headers == {
            "Access-Control-Allow-Origin": "https://recipe-mgmt-dev.web.app",
            "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
            "Access-Control-Allow-Headers": "*",
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Max-Age": "3600",
        }

    def test_unknown_origin(self):
        assert cors_headers("https://evil.example", DEFAULT_CORS_ORIGINS) == []
        assert cors_headers(None, DEFAULT_CORS_ORIGINS) == []


class TestGateMiddleware:
    """End-to-end behaviour of the gate in front of the app."""

    def test_preflight_allowed_origin(self, client, verifier):
        resp = client.options("/api/recipes", headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        })
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"
        assert resp.headers["access-control-max-age"] == "3600"
        assert verifier.calls == []

    def test_preflight_unknown_origin(self, client):
        resp = client.options("/api/recipes", headers={
            "Origin": "https://evil.example",
            "Access-Control-Request-Method": "POST",
        })
        assert resp.status_code == 200
        assert "access-control-allow-origin" not in resp.headers

    def test_missing_authorization(self, client):
        resp = client.get("/api/recipes")
        assert resp.status_code == 401
        assert resp.json()["message"] == "Missing or invalid Authorization header"

    def test_invalid_token(self, client, verifier):
        resp = client.get("/api/recipes", headers={"Authorization": "Bearer forged"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid Firebase ID token"
        assert verifier.calls == ["forged"]

    def test_reject_carries_cors_for_allowed_origin(self, client):
        resp = client.get("/api/recipes", headers={"Origin": "http://localhost:5174"})
        assert resp.status_code == 401
        assert resp.headers["access-control-allow-origin"] == "http://localhost:5174"

    def test_valid_token_attaches_principal(self, client):
        resp = client.post("/api/recipes", json=carbonara(), headers=U1)
        assert resp.status_code == 201
        assert resp.json()["ownerUid"] == "u1"

    def test_public_listing_without_token(self, client, verifier):
        resp = client.get("/api/recipes/public")
        assert resp.status_code == 200
        assert verifier.calls == []

    def test_health_without_token(self, client):
        resp = client.get("/actuator/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "UP", "store": "UP"}

    def test_auth_disabled_runs_as_test_user(self, store, verifier):
        app = create_app(settings=make_settings(AUTH_ENABLED=False), store=store, verifier=verifier)
        client = TestClient(app)

        resp = client.post("/api/recipes", json=carbonara())

        assert resp.status_code == 201
        assert resp.json()["ownerUid"] == "test-user"
        assert verifier.calls == []
