"""Provider registry implementation and its construction from configuration."""

import logging
from collections.abc import Mapping

import httpx

from arealink.config import HttpClientConfig, OAuthConfig
from arealink.domain.identity.model.value import normalize_provider
from arealink.domain.identity.port.provider import OAuthProvider
from arealink.domain.identity.port.provider_registry import ProviderRegistry
from arealink.domain.shared.error import ConfigurationError
from arealink.domain.shared.port.clock import Clock
from arealink.infrastructure.oauth.client import ClientSettings, OAuth2Client
from arealink.infrastructure.oauth.descriptor import BUILTIN_DESCRIPTORS, ProviderDescriptor
from arealink.infrastructure.oauth.provider import DescriptorOAuthProvider

logger = logging.getLogger(__name__)


class InMemoryProviderRegistry(ProviderRegistry):
    """In-memory provider registry.

    Stores a mapping of normalized provider names to their implementations.
    Providers are registered at application startup via DI.
    """

    def __init__(self, providers: Mapping[str, OAuthProvider] | None = None) -> None:
        self._providers: dict[str, OAuthProvider] = {}
        for name, provider in (providers or {}).items():
            self.register(name, provider)

    def get(self, provider: str) -> OAuthProvider | None:
        return self._providers.get(normalize_provider(provider))

    def available_providers(self) -> list[str]:
        return sorted(self._providers)

    def register(self, name: str, provider: OAuthProvider) -> None:
        key = normalize_provider(name)
        if not key:
            raise ConfigurationError("Provider name is required")
        self._providers[key] = provider


def build_provider_registry(
    config: OAuthConfig,
    http_client: httpx.AsyncClient,
    clock: Clock,
    http_config: HttpClientConfig | None = None,
    descriptors: Mapping[str, ProviderDescriptor] = BUILTIN_DESCRIPTORS,
) -> InMemoryProviderRegistry:
    """Build the registry for every allowed provider.

    When `allowed_providers` is empty, every provider with credentials in
    `providers` is enabled.

    Raises:
        ConfigurationError: If an enabled provider has no descriptor,
            no credentials, or no redirect URI
    """
    http_config = http_config or HttpClientConfig()
    credentials = {normalize_provider(k): v for k, v in config.providers.items()}
    names = config.allowed_providers or [k for k, v in credentials.items() if v.configured]

    registry = InMemoryProviderRegistry()
    for raw_name in names:
        name = normalize_provider(raw_name)
        if not name:
            continue

        descriptor = descriptors.get(name)
        if descriptor is None:
            raise ConfigurationError(f"No OAuth descriptor for provider: {name}")
        creds = credentials.get(name)
        if creds is None or not creds.client_id.strip():
            raise ConfigurationError(f"OAuth credentials for {name} not configured")
        if not creds.redirect_uri.strip():
            raise ConfigurationError(f"OAuth redirect URI for {name} not configured")

        client = OAuth2Client(
            ClientSettings(
                name=descriptor.display_name,
                client_id=creds.client_id,
                client_secret=creds.client_secret,
                authorize_url=descriptor.authorize_url,
                token_url=descriptor.token_url,
                scopes=tuple(creds.scopes) or descriptor.default_scopes,
                prompt=descriptor.default_prompt,
                audience=descriptor.audience,
                token_auth_method=descriptor.token_auth_method,
                token_format=descriptor.token_format,
                state_size=config.state_size,
                verifier_length=config.code_verifier_length,
            ),
            http_client,
            clock,
        )
        registry.register(
            name,
            DescriptorOAuthProvider(
                name=name,
                descriptor=descriptor,
                client=client,
                http_client=http_client,
                redirect_uri=creds.redirect_uri,
                user_agent=http_config.user_agent,
            ),
        )

    logger.info("OAuth providers enabled: %s", ", ".join(registry.available_providers()) or "none")
    return registry
