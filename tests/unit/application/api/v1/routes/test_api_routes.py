"""Route tests against the assembled application (in-memory SQLite, no provider calls)."""

from urllib.parse import parse_qs, urlsplit
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from arealink.application.api.rest.app import create_app
from arealink.config import (
    Config,
    DatabaseConfig,
    OAuthConfig,
    OAuthProviderConfig,
    OAuthStateConfig,
)


@pytest.fixture
def client():
    config = Config(
        database=DatabaseConfig(url="sqlite+aiosqlite:///:memory:"),
        oauth=OAuthConfig(
            providers={
                "zoom": OAuthProviderConfig(
                    client_id="zoom-client",
                    client_secret="zoom-secret",
                    redirect_uri="http://localhost:8081/auth/zoom/callback",
                )
            },
            state=OAuthStateConfig(secret="test-secret-key-256-bits-long-xx"),
        ),
    )
    with TestClient(create_app(config)) as test_client:
        yield test_client


class TestPublicRoutes:
    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_providers(self, client):
        response = client.get("/api/v1/auth/providers")

        assert response.json() == {"providers": ["zoom"]}

    def test_authorize(self, client):
        response = client.get("/api/v1/auth/Zoom/authorize", params={"scope": ["meeting:write"]})

        assert response.status_code == 200
        body = response.json()
        assert body["provider"] == "zoom"
        assert body["state_token"]
        query = parse_qs(urlsplit(body["authorization_url"]).query)
        assert query["state"] == [body["state"]]
        assert query["scope"] == ["meeting:write"]
        assert query["redirect_uri"] == ["http://localhost:8081/auth/zoom/callback"]

    def test_authorize_unknown_provider(self, client):
        response = client.get("/api/v1/auth/myspace/authorize")

        assert response.status_code == 404
        assert response.json()["code"] == "provider_not_configured"

    def test_exchange_with_forged_state(self, client):
        response = client.post(
            "/api/v1/auth/zoom/exchange",
            json={"code": "auth-code", "state": "s", "state_token": "forged"},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "oauth_state_invalid"

    def test_exchange_with_state_token_but_no_state(self, client):
        state_token = client.get("/api/v1/auth/zoom/authorize").json()["state_token"]

        response = client.post(
            "/api/v1/auth/zoom/exchange",
            json={"code": "auth-code", "state_token": state_token},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "oauth_state_invalid"

class TestSessionRequiredRoutes:
    """Routes that act for a signed-in user reject anonymous callers."""

    def test_identities_without_session(self, client):
        response = client.get("/api/v1/identities")

        assert response.status_code == 401
        assert response.json()["code"] == "missing_session"

    def test_unknown_session_cookie(self, client):
        client.cookies.set("area_session", str(uuid4()))

        response = client.get("/api/v1/identities")

        assert response.status_code == 401

    def test_run_reaction_without_session(self, client):
        response = client.post(
            "/api/v1/reactions/zoom_create_meeting/run",
            json={"identity_id": str(uuid4()), "params": {"topic": "Standup"}},
        )

        assert response.status_code == 401

    def test_link_without_session(self, client):
        response = client.post("/api/v1/auth/zoom/link", json={"code": "auth-code"})

        assert response.status_code == 401
        assert response.json()["code"] == "missing_session"
