"""DI provider for OAuth infrastructure."""

from typing import AsyncIterable

import httpx
from dishka import Provider, provide

from arealink.config import Config
from arealink.domain.identity.port.provider_registry import ProviderRegistry
from arealink.domain.shared.port.clock import Clock
from arealink.infrastructure.clock import SystemClock
from arealink.infrastructure.oauth.provider_registry import build_provider_registry
from arealink.util.di.scope import Scope


class OAuthInfraProvider(Provider):
    """DI provider for the outbound HTTP client, clock, and OAuth providers."""

    @provide(scope=Scope.APP)
    def get_clock(self) -> Clock:
        return SystemClock()

    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Config) -> AsyncIterable[httpx.AsyncClient]:
        """Shared HTTP client for provider and reaction calls (connection pooling)."""
        timeout = httpx.Timeout(
            connect=config.http.connect_timeout,
            read=config.http.read_timeout,
            write=config.http.write_timeout,
            pool=config.http.pool_timeout,
        )
        async with httpx.AsyncClient(
            timeout=timeout, headers={"User-Agent": config.http.user_agent}
        ) as client:
            yield client

    @provide(scope=Scope.APP)
    def get_provider_registry(
        self, config: Config, http_client: httpx.AsyncClient, clock: Clock
    ) -> ProviderRegistry:
        """Provide ProviderRegistry with every configured OAuth provider."""
        return build_provider_registry(config.oauth, http_client, clock, config.http)
