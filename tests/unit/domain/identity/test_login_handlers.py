"""Unit tests for login command and identity query handlers."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from arealink.config import OAuthStateConfig
from arealink.domain.identity.command.login import (
    BeginAuthorization,
    BeginAuthorizationHandler,
    CompleteOAuth,
    CompleteOAuthHandler,
    LinkIdentity,
    LinkIdentityHandler,
)
from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.principal import Principal
from arealink.domain.identity.model.session import LoginResult, Session
from arealink.domain.identity.model.user import User
from arealink.domain.identity.model.value import IdentityId, SessionId
from arealink.domain.identity.port.provider import AuthorizationResponse, ExchangeRequest
from arealink.domain.identity.query.list_identities import ListIdentities, ListIdentitiesHandler
from arealink.domain.identity.service.state import PendingAuthorization, StateService
from arealink.domain.shared.error import AuthorizationError, InvalidStateError

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def make_state_service() -> StateService:
    return StateService(_config=OAuthStateConfig(secret="test-secret-key-256-bits-long-xx"))


def make_login() -> tuple[LoginResult, Identity]:
    user = User.create(email="jane@example.com", now=NOW)
    session = Session.create(user_id=user.id, ttl=timedelta(hours=168), now=NOW)
    identity = Identity(
        id=IdentityId.generate(),
        user_id=user.id,
        provider="zoom",
        subject="zoom-user-1",
        access_token="access-1",
        refresh_token="refresh-123",
        scopes=["meeting:write"],
        created_at=NOW,
        updated_at=NOW,
    )
    return LoginResult(user=user, session=session, cookie_name="area_session"), identity


def make_oauth_service() -> MagicMock:
    service = MagicMock()
    service.authorization_url.return_value = AuthorizationResponse(
        url="https://zoom.us/oauth/authorize?state=state-abc",
        state="state-abc",
        code_verifier="v" * 64,
        code_challenge="challenge",
        code_challenge_method="S256",
    )
    service.link_identity = AsyncMock(return_value=make_login()[1])
    service.exchange = AsyncMock(return_value=make_login())
    return service


class TestBeginAuthorizationHandler:
    @pytest.mark.asyncio
    async def test_returns_url_and_signed_state(self):
        oauth_service = make_oauth_service()
        state_service = make_state_service()
        handler = BeginAuthorizationHandler(oauth_service=oauth_service, state_service=state_service)

        result = await handler.run(
            BeginAuthorization(provider=" Zoom ", redirect_uri="http://localhost/callback")
        )

        assert result.authorization_url.startswith("https://zoom.us/oauth/authorize")
        assert result.state == "state-abc"
        pending = state_service.verify(result.state_token, state="state-abc")
        assert pending is not None
        assert pending.provider == "zoom"
        assert pending.code_verifier == "v" * 64
        assert pending.redirect_uri == "http://localhost/callback"
        oauth_service.authorization_url.assert_called_once()
        assert oauth_service.authorization_url.call_args.args[0] == "zoom"


class TestCompleteOAuthHandler:
    """Tests for CompleteOAuthHandler."""

    @pytest.mark.asyncio
    async def test_exchange_without_state_token(self):
        oauth_service = make_oauth_service()
        handler = CompleteOAuthHandler(oauth_service=oauth_service, state_service=make_state_service())

        result = await handler.run(
            CompleteOAuth(provider="zoom", code="auth-code", code_verifier="explicit")
        )

        assert result.email == "jane@example.com"
        assert result.cookie_name == "area_session"
        assert result.provider == "zoom"
        request = oauth_service.exchange.call_args.args[2]
        assert request == ExchangeRequest(redirect_uri=None, code_verifier="explicit")

    @pytest.mark.asyncio
    async def test_state_token_supplies_verifier_and_redirect(self):
        oauth_service = make_oauth_service()
        state_service = make_state_service()
        token = state_service.sign(
            PendingAuthorization(
                provider="zoom",
                state="state-abc",
                redirect_uri="http://localhost/callback",
                code_verifier="v" * 64,
            )
        )
        handler = CompleteOAuthHandler(oauth_service=oauth_service, state_service=state_service)

        await handler.run(
            CompleteOAuth(provider="Zoom", code="auth-code", state="state-abc", state_token=token)
        )

        request = oauth_service.exchange.call_args.args[2]
        assert request.redirect_uri == "http://localhost/callback"
        assert request.code_verifier == "v" * 64

    @pytest.mark.asyncio
    async def test_state_token_for_other_provider_rejected(self):
        oauth_service = make_oauth_service()
        state_service = make_state_service()
        token = state_service.sign(PendingAuthorization(provider="github", state="s"))
        handler = CompleteOAuthHandler(oauth_service=oauth_service, state_service=state_service)

        with pytest.raises(InvalidStateError):
            await handler.run(
                CompleteOAuth(provider="zoom", code="auth-code", state="s", state_token=token)
            )

        oauth_service.exchange.assert_not_called()

    @pytest.mark.asyncio
    async def test_state_token_without_state_rejected(self):
        oauth_service = make_oauth_service()
        state_service = make_state_service()
        token = state_service.sign(PendingAuthorization(provider="zoom", state="state-abc"))
        handler = CompleteOAuthHandler(oauth_service=oauth_service, state_service=state_service)

        with pytest.raises(InvalidStateError) as exc_info:
            await handler.run(CompleteOAuth(provider="zoom", code="auth-code", state_token=token))

        assert exc_info.value.code == "oauth_state_invalid"
        oauth_service.exchange.assert_not_called()


class TestLinkIdentityHandler:
    @pytest.mark.asyncio
    async def test_requires_session(self):
        oauth_service = make_oauth_service()
        handler = LinkIdentityHandler(
            oauth_service=oauth_service, state_service=make_state_service(), principal=None
        )

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.run(LinkIdentity(provider="zoom", code="auth-code"))

        assert exc_info.value.code == "missing_session"
        oauth_service.link_identity.assert_not_called()

    @pytest.mark.asyncio
    async def test_links_to_signed_in_user(self):
        oauth_service = make_oauth_service()
        state_service = make_state_service()
        token = state_service.sign(
            PendingAuthorization(provider="zoom", state="state-abc", code_verifier="v" * 64)
        )
        _, identity = make_login()
        principal = Principal(user_id=identity.user_id, session_id=SessionId.generate())
        handler = LinkIdentityHandler(
            oauth_service=oauth_service, state_service=state_service, principal=principal
        )

        result = await handler.run(
            LinkIdentity(provider="zoom", code="auth-code", state="state-abc", state_token=token)
        )

        oauth_service.link_identity.assert_awaited_once_with(
            identity.user_id,
            "zoom",
            "auth-code",
            ExchangeRequest(redirect_uri=None, code_verifier="v" * 64),
        )
        assert result.identity.provider == "zoom"
        assert "refresh-123" not in str(result.model_dump())

class TestListIdentitiesHandler:
    @pytest.mark.asyncio
    async def test_requires_session(self):
        handler = ListIdentitiesHandler(oauth_service=make_oauth_service(), principal=None)

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.run(ListIdentities())

        assert exc_info.value.code == "missing_session"

    @pytest.mark.asyncio
    async def test_tokens_are_not_returned(self):
        _, identity = make_login()
        oauth_service = MagicMock()
        oauth_service.list_identities = AsyncMock(return_value=[identity])
        principal = Principal(user_id=identity.user_id, session_id=SessionId.generate())
        handler = ListIdentitiesHandler(oauth_service=oauth_service, principal=principal)

        result = await handler.run(ListIdentities())

        oauth_service.list_identities.assert_awaited_once_with(identity.user_id)
        summary = result.identities[0]
        assert summary.id == str(identity.id)
        assert summary.has_refresh_token is True
        dumped = result.model_dump()
        assert "access-1" not in str(dumped)
        assert "refresh-123" not in str(dumped)
