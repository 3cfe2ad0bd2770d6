"""OAuth service: authorization-code exchange, identity upsert, and login."""

import logging
from datetime import timedelta

from arealink.domain.identity.error import (
    EmptyProfileError,
    OAuthEmailMissingError,
    ProviderNotConfiguredError,
)
from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.profile import Profile
from arealink.domain.identity.model.session import LoginResult, RequestMetadata, Session
from arealink.domain.identity.model.token import TokenExchange
from arealink.domain.identity.model.user import User
from arealink.domain.identity.model.value import UserId, normalize_provider
from arealink.domain.identity.port.provider import (
    AuthorizationRequest,
    AuthorizationResponse,
    ExchangeRequest,
    OAuthProvider,
)
from arealink.domain.identity.port.provider_registry import ProviderRegistry
from arealink.domain.identity.port.repository import (
    IdentityRepository,
    SessionRepository,
    UserRepository,
)
from arealink.domain.shared.error import (
    AreaLinkError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from arealink.domain.shared.port.clock import Clock
from arealink.domain.shared.service import Service

logger = logging.getLogger(__name__)


class OAuthService(Service):
    """Orchestrates OAuth login and account linking.

    - authorization_url: Build the provider consent URL (state, PKCE)
    - exchange: Exchange a code, upsert the identity, resolve the user, open a session
    - link_identity: Exchange a code and link the account to a signed-in user
    - list_identities: Identities linked to a user
    """

    _providers: ProviderRegistry
    _identity_repo: IdentityRepository
    _user_repo: UserRepository
    _session_repo: SessionRepository
    _clock: Clock
    _session_ttl: timedelta
    _cookie_name: str

    def resolve_provider(self, name: str) -> OAuthProvider:
        """Look up a provider by (case-insensitive) name.

        Raises:
            ProviderNotConfiguredError: If the name is empty or not registered
        """
        normalized = normalize_provider(name)
        if not normalized:
            raise ProviderNotConfiguredError(name)
        provider = self._providers.get(normalized)
        if provider is None:
            raise ProviderNotConfiguredError(normalized)
        return provider

    def authorization_url(
        self,
        provider_name: str,
        request: AuthorizationRequest,
    ) -> AuthorizationResponse:
        """Build the authorization URL for a provider."""
        return self.resolve_provider(provider_name).authorization_url(request)

    async def exchange(
        self,
        provider_name: str,
        code: str,
        request: ExchangeRequest,
        metadata: RequestMetadata | None = None,
    ) -> tuple[LoginResult, Identity]:
        """Complete an OAuth login.

        Args:
            provider_name: Provider the code was issued by
            code: Authorization code from the callback
            request: Redirect URI and PKCE verifier used when authorizing
            metadata: Client IP and user agent recorded on the session

        Returns:
            Tuple of (login result with session, linked identity)

        Raises:
            ProviderNotConfiguredError: Unknown provider
            ValidationError: Missing authorization code
            ExternalServiceError: Provider rejected the code or is unreachable
            EmptyProfileError: Provider returned no account subject
            OAuthEmailMissingError: New link without an email to match a user
            ConflictError: A concurrent exchange created the same identity first
        """
        provider = self.resolve_provider(provider_name)
        exchange = await self._exchange_code(provider, code, request)

        identity, user = await self._upsert_identity(provider.name, exchange)
        result = await self._issue_session(user, provider.name, metadata)

        logger.info(
            "OAuth login completed: user_id=%s, provider=%s, subject=%s, identity_id=%s",
            user.id,
            provider.name,
            identity.subject,
            identity.id,
        )
        return result, identity

    async def link_identity(
        self,
        user_id: UserId,
        provider_name: str,
        code: str,
        request: ExchangeRequest,
    ) -> Identity:
        """Link a provider account to an already signed-in user.

        The user is given, not looked up by the provider's email. A provider
        account already linked to the same user has its tokens reconciled.

        Raises:
            ProviderNotConfiguredError: Unknown provider
            ValidationError: Missing authorization code
            ExternalServiceError: Provider rejected the code or is unreachable
            EmptyProfileError: Provider returned no account subject
            ConflictError: The provider account is linked to another user
        """
        provider = self.resolve_provider(provider_name)
        exchange = await self._exchange_code(provider, code, request)
        subject = exchange.profile.subject.strip()
        now = self._clock.now()

        existing = await self._identity_repo.get_by_provider_and_subject(provider.name, subject)
        if existing is None:
            identity = await self._identity_repo.create(
                Identity.create(
                    user_id=user_id,
                    provider=provider.name,
                    subject=subject,
                    token=exchange.token,
                    now=now,
                )
            )
            logger.info(
                "Identity linked: identity_id=%s, user_id=%s, provider=%s",
                identity.id,
                user_id,
                provider.name,
            )
            return identity

        if existing.user_id != user_id:
            logger.warning(
                "Identity link refused: identity_id=%s, owner=%s, requested_by=%s",
                existing.id,
                existing.user_id,
                user_id,
            )
            raise ConflictError(
                f"{provider.name} account is already linked to another user",
                code="identity_ownership_conflict",
            )

        identity = await self._identity_repo.update(existing.with_tokens(exchange.token, now))
        logger.info("Identity relinked: identity_id=%s, provider=%s", identity.id, provider.name)
        return identity

    async def list_identities(self, user_id: UserId | None) -> list[Identity]:
        """List the identities linked to a user.

        Raises:
            ValidationError: If no user id is given
        """
        if user_id is None:
            raise ValidationError("User id is required", field="user_id")
        return await self._identity_repo.list_by_user(user_id)

    async def _exchange_code(
        self, provider: OAuthProvider, code: str, request: ExchangeRequest
    ) -> TokenExchange:
        if not code.strip():
            raise ValidationError("Authorization code is required", field="code")

        try:
            exchange = await provider.exchange(code, request)
        except AreaLinkError as e:
            raise ExternalServiceError(
                f"{provider.name} code exchange failed: {e.message}",
                code=e.code,
            ) from e

        if exchange.profile.empty:
            raise EmptyProfileError(provider.name)
        return exchange

    async def _upsert_identity(
        self, provider: str, exchange: TokenExchange
    ) -> tuple[Identity, User]:
        subject = exchange.profile.subject.strip()
        existing = await self._identity_repo.get_by_provider_and_subject(provider, subject)

        if existing is None:
            user = await self._resolve_or_create_user(provider, exchange.profile)
            identity = Identity.create(
                user_id=user.id,
                provider=provider,
                subject=subject,
                token=exchange.token,
                now=self._clock.now(),
            )
            identity = await self._identity_repo.create(identity)
            logger.info(
                "Identity linked: identity_id=%s, user_id=%s, provider=%s",
                identity.id,
                user.id,
                provider,
            )
            return identity, user

        identity = existing.with_tokens(exchange.token, self._clock.now())
        identity = await self._identity_repo.update(identity)

        user = await self._user_repo.get(identity.user_id)
        if user is None:
            raise NotFoundError(
                f"User {identity.user_id} for identity {identity.id} not found",
                code="user_not_found",
            )
        return identity, user

    async def _resolve_or_create_user(self, provider: str, profile: Profile) -> User:
        email = (profile.email or "").strip().lower()
        if not email:
            raise OAuthEmailMissingError(provider)

        user = await self._user_repo.get_by_email(email)
        if user is not None:
            if not user.is_active:
                user.activate(self._clock.now())
                try:
                    user = await self._user_repo.update(user)
                except AreaLinkError as e:
                    logger.warning("Failed to activate user: user_id=%s, error=%s", user.id, e)
            return user

        try:
            return await self._user_repo.create(User.create(email=email, now=self._clock.now()))
        except ConflictError:
            existing = await self._user_repo.get_by_email(email)
            if existing is None:
                raise
            return existing

    async def _issue_session(
        self,
        user: User,
        provider: str,
        metadata: RequestMetadata | None,
    ) -> LoginResult:
        now = self._clock.now()
        session = Session.create(
            user_id=user.id,
            ttl=self._session_ttl,
            now=now,
            metadata=metadata,
            auth_provider=provider,
        )
        session = await self._session_repo.create(session)

        user.record_login(now)
        try:
            user = await self._user_repo.update(user)
        except AreaLinkError as e:
            logger.warning("Failed to record last login: user_id=%s, error=%s", user.id, e)

        return LoginResult(user=user, session=session, cookie_name=self._cookie_name)
