"""Login commands for the OAuth authorization-code flow."""

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

import logfire

from arealink.domain.identity.model.principal import Principal
from arealink.domain.identity.model.session import RequestMetadata
from arealink.domain.identity.model.value import normalize_provider
from arealink.domain.identity.port.provider import AuthorizationRequest, ExchangeRequest
from arealink.domain.identity.query.list_identities import IdentitySummary
from arealink.domain.identity.service.oauth import OAuthService
from arealink.domain.identity.service.state import PendingAuthorization, StateService
from arealink.domain.shared.command import Command, CommandHandler, Result
from arealink.domain.shared.error import InvalidStateError


def resolve_exchange_request(
    state_service: StateService,
    provider: str,
    redirect_uri: str | None,
    code_verifier: str | None,
    state: str | None,
    state_token: str | None,
) -> ExchangeRequest:
    """Build the exchange parameters, filling gaps from a signed state token.

    A state token is only honoured together with the state the provider
    echoed, and only for the provider it was issued for.

    Raises:
        InvalidStateError: If the token is invalid, expired, unmatched, or
            sent without the echoed state
    """
    if state_token:
        echoed = (state or "").strip()
        pending = state_service.verify(state_token, state=echoed) if echoed else None
        if pending is None or pending.provider != normalize_provider(provider):
            raise InvalidStateError(
                "Invalid or expired OAuth state",
                code="oauth_state_invalid",
            )
        redirect_uri = redirect_uri or pending.redirect_uri
        code_verifier = code_verifier or pending.code_verifier

    return ExchangeRequest(redirect_uri=redirect_uri, code_verifier=code_verifier)


class BeginAuthorization(Command):
    """Command to start an OAuth authorization."""

    __public__: ClassVar[bool] = True

    provider: str
    redirect_uri: str | None = None  # Falls back to the provider's configured callback
    scopes: list[str] = []
    use_pkce: bool = True


class BeginAuthorizationResult(Result):
    """Authorization URL and the values the client returns on exchange."""

    provider: str
    authorization_url: str
    state: str
    code_verifier: str | None = None
    state_token: str  # Signed pending authorization


@dataclass
class BeginAuthorizationHandler(CommandHandler[BeginAuthorization, BeginAuthorizationResult]):
    """Handler for BeginAuthorization command."""

    oauth_service: OAuthService
    state_service: StateService

    async def run(self, cmd: BeginAuthorization) -> BeginAuthorizationResult:
        provider = normalize_provider(cmd.provider)
        response = self.oauth_service.authorization_url(
            provider,
            AuthorizationRequest(
                redirect_uri=cmd.redirect_uri,
                scopes=tuple(cmd.scopes),
                use_pkce=cmd.use_pkce,
            ),
        )
        state_token = self.state_service.sign(
            PendingAuthorization(
                provider=provider,
                state=response.state,
                redirect_uri=cmd.redirect_uri,
                code_verifier=response.code_verifier,
            )
        )
        return BeginAuthorizationResult(
            provider=provider,
            authorization_url=response.url,
            state=response.state,
            code_verifier=response.code_verifier,
            state_token=state_token,
        )


class CompleteOAuth(Command):
    """Command to exchange an authorization code and sign the user in."""

    __public__: ClassVar[bool] = True

    provider: str
    code: str
    redirect_uri: str | None = None
    code_verifier: str | None = None
    state: str | None = None  # Echoed by the provider
    state_token: str | None = None  # From BeginAuthorizationResult
    client_ip: str | None = None
    user_agent: str | None = None


class CompleteOAuthResult(Result):
    """Result containing the signed-in user, session, and linked identity."""

    user_id: str
    email: str
    session_id: str
    session_expires_at: datetime
    cookie_name: str
    identity_id: str
    provider: str
    subject: str


@dataclass
class CompleteOAuthHandler(CommandHandler[CompleteOAuth, CompleteOAuthResult]):
    """Handler for CompleteOAuth command."""

    oauth_service: OAuthService
    state_service: StateService

    async def run(self, cmd: CompleteOAuth) -> CompleteOAuthResult:
        request = resolve_exchange_request(
            self.state_service,
            cmd.provider,
            cmd.redirect_uri,
            cmd.code_verifier,
            cmd.state,
            cmd.state_token,
        )

        with logfire.span("CompleteOAuth", provider=cmd.provider):
            login, identity = await self.oauth_service.exchange(
                cmd.provider,
                cmd.code,
                request,
                RequestMetadata(client_ip=cmd.client_ip, user_agent=cmd.user_agent),
            )

        return CompleteOAuthResult(
            user_id=str(login.user.id),
            email=login.user.email,
            session_id=str(login.session.id),
            session_expires_at=login.session.expires_at,
            cookie_name=login.cookie_name,
            identity_id=str(identity.id),
            provider=identity.provider,
            subject=identity.subject,
        )


class LinkIdentity(Command):
    """Command to link a provider account to the signed-in user."""

    provider: str
    code: str
    redirect_uri: str | None = None
    code_verifier: str | None = None
    state: str | None = None
    state_token: str | None = None


class LinkIdentityResult(Result):
    identity: IdentitySummary


@dataclass
class LinkIdentityHandler(CommandHandler[LinkIdentity, LinkIdentityResult]):
    """Handler for LinkIdentity command."""

    oauth_service: OAuthService
    state_service: StateService
    principal: Principal | None

    async def run(self, cmd: LinkIdentity) -> LinkIdentityResult:
        assert self.principal is not None  # Guaranteed by the session gate

        request = resolve_exchange_request(
            self.state_service,
            cmd.provider,
            cmd.redirect_uri,
            cmd.code_verifier,
            cmd.state,
            cmd.state_token,
        )

        with logfire.span("LinkIdentity", provider=cmd.provider):
            identity = await self.oauth_service.link_identity(
                self.principal.user_id,
                cmd.provider,
                cmd.code,
                request,
            )

        return LinkIdentityResult(identity=IdentitySummary.from_identity(identity))
