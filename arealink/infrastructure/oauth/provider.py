"""OAuth provider adapter driven by a ProviderDescriptor."""

import logging

import httpx

from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.profile import Profile
from arealink.domain.identity.model.token import TokenExchange
from arealink.domain.identity.port.provider import (
    AuthorizationRequest,
    AuthorizationResponse,
    ExchangeRequest,
    OAuthProvider,
)
from arealink.domain.shared.error import ExternalServiceError, ValidationError
from arealink.infrastructure.oauth.client import OAuth2Client, fetch_userinfo
from arealink.infrastructure.oauth.descriptor import ProviderDescriptor

logger = logging.getLogger(__name__)


class DescriptorOAuthProvider(OAuthProvider):
    """OAuthProvider implementation for any descriptor-described provider.

    The profile is read from the descriptor's userinfo endpoint after both
    exchange and refresh.
    """

    def __init__(
        self,
        name: str,
        descriptor: ProviderDescriptor,
        client: OAuth2Client,
        http_client: httpx.AsyncClient,
        redirect_uri: str,
        user_agent: str = "AREA-Server",
    ) -> None:
        self._name = name
        self._descriptor = descriptor
        self._client = client
        self._http = http_client
        self._redirect_uri = redirect_uri
        self._user_agent = user_agent

    @property
    def name(self) -> str:
        return self._name

    @property
    def default_scopes(self) -> tuple[str, ...]:
        return self._client.settings.scopes

    def authorization_url(self, request: AuthorizationRequest) -> AuthorizationResponse:
        extra = dict(self._descriptor.authorization_params)
        extra.update(request.extra_params)
        return self._client.authorization_url(
            self._redirect(request.redirect_uri),
            scopes=request.scopes,
            state=request.state,
            prompt=request.prompt,
            use_pkce=request.use_pkce,
            extra=extra,
        )

    async def exchange(self, code: str, request: ExchangeRequest) -> TokenExchange:
        token = await self._client.exchange(
            code,
            self._redirect(request.redirect_uri),
            code_verifier=request.code_verifier,
        )
        profile, raw_profile = await self._fetch_profile(token.access_token)
        return TokenExchange(token=token, profile=profile, raw_token=token.raw, raw_profile=raw_profile)

    async def refresh(self, identity: Identity) -> TokenExchange:
        if not (identity.refresh_token or "").strip():
            raise ExternalServiceError(
                f"{self._name}: no refresh token stored for identity {identity.id}",
                code="refresh_token_missing",
            )

        scopes = tuple(identity.scopes) or self.default_scopes
        token = await self._client.refresh(identity.refresh_token or "", scopes)

        profile, raw_profile = await self._fetch_profile(token.access_token)
        if not profile.subject:
            profile = Profile(
                provider=profile.provider or identity.provider,
                subject=identity.subject,
                email=profile.email,
                name=profile.name,
                picture_url=profile.picture_url,
                raw=profile.raw,
            )
        return TokenExchange(token=token, profile=profile, raw_token=token.raw, raw_profile=raw_profile)

    def _redirect(self, override: str | None) -> str:
        redirect = (override or "").strip() or self._redirect_uri
        if not redirect:
            raise ValidationError(f"{self._name}: redirect URI missing", field="redirect_uri")
        return redirect

    async def _fetch_profile(self, access_token: str) -> tuple[Profile, dict]:
        raw = await fetch_userinfo(
            self._http,
            self._descriptor.userinfo_url,
            access_token,
            provider=self._name,
            headers=self._descriptor.userinfo_headers,
            user_agent=self._user_agent,
        )
        profile = self._descriptor.profile_extractor(raw)
        logger.debug("Fetched %s profile: subject=%s", self._name, profile.subject)
        return profile, raw
