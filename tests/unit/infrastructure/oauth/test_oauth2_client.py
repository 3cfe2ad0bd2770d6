"""Tests for OAuth2Client against a mocked token endpoint."""

import base64
import json
from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from arealink.domain.shared.error import ExternalServiceError, ValidationError
from arealink.infrastructure.oauth.client import ClientSettings, OAuth2Client
from arealink.infrastructure.oauth.pkce import derive_code_challenge

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)
TOKEN_URL = "https://auth.example.com/token"


class FixedClock:
    def now(self) -> datetime:
        return NOW


def make_client(handler, **overrides) -> tuple[OAuth2Client, httpx.AsyncClient]:
    settings = ClientSettings(
        name="Example",
        client_id="client-1",
        client_secret="secret-1",
        authorize_url="https://auth.example.com/authorize",
        token_url=TOKEN_URL,
        scopes=("email", "profile"),
        **overrides,
    )
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OAuth2Client(settings, http, FixedClock()), http


def token_response(payload: dict, status: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        handler.requests.append(request)
        return httpx.Response(status, json=payload)

    handler.requests = []
    return handler


class TestAuthorizationUrl:
    def test_pkce_url(self):
        client, _ = make_client(token_response({}))

        response = client.authorization_url("http://localhost/callback", use_pkce=True)

        query = parse_qs(urlsplit(response.url).query)
        assert query["response_type"] == ["code"]
        assert query["client_id"] == ["client-1"]
        assert query["redirect_uri"] == ["http://localhost/callback"]
        assert query["scope"] == ["email profile"]
        assert query["state"] == [response.state]
        assert query["code_challenge_method"] == ["S256"]
        assert response.code_verifier is not None
        assert query["code_challenge"] == [derive_code_challenge(response.code_verifier)]

    def test_explicit_state_and_extra_params(self):
        client, _ = make_client(token_response({}))

        response = client.authorization_url(
            "http://localhost/callback",
            state="state-abc",
            scopes=["meeting:write"],
            extra={"access_type": "offline"},
        )

        query = parse_qs(urlsplit(response.url).query)
        assert response.state == "state-abc"
        assert query["scope"] == ["meeting:write"]
        assert query["access_type"] == ["offline"]
        assert "code_challenge" not in query
        assert response.code_verifier is None

    def test_redirect_required(self):
        client, _ = make_client(token_response({}))

        with pytest.raises(ValidationError):
            client.authorization_url("  ")


class TestTokenRequests:
    """Tests for exchange, refresh, and token parsing."""

    @pytest.mark.asyncio
    async def test_exchange_posts_form_with_client_secret(self):
        handler = token_response(
            {"access_token": "a1", "refresh_token": "r1", "expires_in": 3600, "scope": "email profile"}
        )
        client, _ = make_client(handler)

        token = await client.exchange("code-1", "http://localhost/callback", code_verifier="v" * 43)

        body = parse_qs(handler.requests[0].content.decode())
        assert body["grant_type"] == ["authorization_code"]
        assert body["code"] == ["code-1"]
        assert body["client_id"] == ["client-1"]
        assert body["client_secret"] == ["secret-1"]
        assert body["code_verifier"] == ["v" * 43]
        assert token.access_token == "a1"
        assert token.refresh_token == "r1"
        assert token.scopes == ("email", "profile")
        assert token.expires_at == NOW + timedelta(seconds=3600)

    @pytest.mark.asyncio
    async def test_basic_auth_json_body(self):
        handler = token_response({"access_token": "a1"})
        client, _ = make_client(handler, token_auth_method="basic", token_format="json")

        await client.refresh("r1", ["meeting:write"])

        request = handler.requests[0]
        expected = base64.b64encode(b"client-1:secret-1").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        body = json.loads(request.content)
        assert body == {
            "grant_type": "refresh_token",
            "refresh_token": "r1",
            "scope": "meeting:write",
        }

    @pytest.mark.asyncio
    async def test_expires_at_and_string_numbers(self):
        client, _ = make_client(token_response({}))
        epoch = int((NOW + timedelta(hours=2)).timestamp())

        token = client.parse_token(
            {"access_token": "a1", "expires_at": str(epoch), "expires_in": "60", "scope": ["a", "b"]}
        )

        assert token.expires_at == NOW + timedelta(hours=2)
        assert token.scopes == ("a", "b")

    @pytest.mark.asyncio
    async def test_no_expiry_information(self):
        client, _ = make_client(token_response({}))

        token = client.parse_token({"access_token": "a1"})

        assert token.expires_at is None
        assert token.refresh_token is None

    @pytest.mark.asyncio
    async def test_error_payload_with_200(self):
        client, _ = make_client(
            token_response({"error": "bad_verification_code", "error_description": "expired"})
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.exchange("code-1", "http://localhost/callback")

        assert exc_info.value.code == "oauth_token_error"
        assert "bad_verification_code" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_error_status(self):
        client, _ = make_client(token_response({"error": "invalid_grant"}, status=400))

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.refresh("r1")

        assert "400" in exc_info.value.message
        assert "invalid_grant" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_access_token(self):
        client, _ = make_client(token_response({"token_type": "bearer"}))

        with pytest.raises(ExternalServiceError):
            await client.exchange("code-1", "http://localhost/callback")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client, _ = make_client(handler)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.refresh("r1")

        assert exc_info.value.code == "oauth_unavailable"

    @pytest.mark.asyncio
    async def test_refresh_token_required(self):
        handler = token_response({"access_token": "a1"})
        client, _ = make_client(handler)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.refresh("  ")

        assert exc_info.value.code == "refresh_token_missing"
        assert handler.requests == []
