"""DI provider for identity domain services and handlers."""

import logging
from uuid import UUID

from dishka import Provider, from_context, provide
from starlette.requests import Request

from arealink.config import Config
from arealink.domain.identity.command.login import (
    BeginAuthorizationHandler,
    CompleteOAuthHandler,
    LinkIdentityHandler,
)
from arealink.domain.identity.model.principal import Principal
from arealink.domain.identity.model.value import SessionId
from arealink.domain.identity.port.provider_registry import ProviderRegistry
from arealink.domain.identity.port.repository import (
    IdentityRepository,
    SessionRepository,
    UserRepository,
)
from arealink.domain.identity.query.list_identities import ListIdentitiesHandler
from arealink.domain.identity.service.freshness import TokenFreshnessGuard
from arealink.domain.identity.service.oauth import OAuthService
from arealink.domain.identity.service.state import StateService
from arealink.domain.shared.port.clock import Clock
from arealink.util.di.scope import Scope

logger = logging.getLogger(__name__)


class IdentityProvider(Provider):
    """DI provider for identity services, handlers, and the request principal."""

    request = from_context(provides=Request, scope=Scope.UOW)

    # Command/Query Handlers
    begin_authorization_handler = provide(BeginAuthorizationHandler, scope=Scope.UOW)
    complete_oauth_handler = provide(CompleteOAuthHandler, scope=Scope.UOW)
    link_identity_handler = provide(LinkIdentityHandler, scope=Scope.UOW)
    list_identities_handler = provide(ListIdentitiesHandler, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_state_service(self, config: Config) -> StateService:
        return StateService(_config=config.oauth.state)

    @provide(scope=Scope.UOW)
    def get_oauth_service(
        self,
        config: Config,
        providers: ProviderRegistry,
        identity_repo: IdentityRepository,
        user_repo: UserRepository,
        session_repo: SessionRepository,
        clock: Clock,
    ) -> OAuthService:
        return OAuthService(
            _providers=providers,
            _identity_repo=identity_repo,
            _user_repo=user_repo,
            _session_repo=session_repo,
            _clock=clock,
            _session_ttl=config.session.ttl,
            _cookie_name=config.session.cookie_name,
        )

    @provide(scope=Scope.UOW)
    def get_freshness_guard(
        self,
        providers: ProviderRegistry,
        identity_repo: IdentityRepository,
        clock: Clock,
    ) -> TokenFreshnessGuard:
        return TokenFreshnessGuard(
            _providers=providers,
            _identity_repo=identity_repo,
            _clock=clock,
        )

    @provide(scope=Scope.UOW)
    async def get_principal(
        self,
        request: Request,
        config: Config,
        session_repo: SessionRepository,
        clock: Clock,
    ) -> Principal | None:
        """Resolve the caller from the session cookie, or None when signed out."""
        raw = request.cookies.get(config.session.cookie_name)
        if not raw:
            return None
        try:
            session_id = SessionId(UUID(raw))
        except ValueError:
            logger.debug("Malformed session cookie ignored")
            return None

        session = await session_repo.get(session_id)
        if session is None or not session.active(clock.now()):
            return None
        return Principal(user_id=session.user_id, session_id=session.id)
