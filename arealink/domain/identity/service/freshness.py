"""Token freshness guard: hands out a usable access token, refreshing when needed."""

import logging

from arealink.domain.identity.error import ProviderNotConfiguredError, TokenRefreshError
from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.token import OAuthToken
from arealink.domain.identity.port.provider_registry import ProviderRegistry
from arealink.domain.identity.port.repository import IdentityRepository
from arealink.domain.shared.error import AreaLinkError
from arealink.domain.shared.port.clock import Clock
from arealink.domain.shared.service import Service

logger = logging.getLogger(__name__)


def reconcile_tokens(identity: Identity, token: OAuthToken, clock: Clock) -> Identity:
    """Merge a newly issued token into an identity.

    The access token always replaces. Refresh token, expiry and scopes only
    replace the stored values when the provider supplied them.
    """
    return identity.with_tokens(token, clock.now())


class TokenFreshnessGuard(Service):
    """Decides whether an identity's access token can be used as-is.

    Refreshes through the provider when the token is missing, expired, or
    the caller forces it (after the provider rejected the cached token).
    Refreshed tokens are persisted before being returned.
    """

    _providers: ProviderRegistry
    _identity_repo: IdentityRepository
    _clock: Clock

    async def ensure_usable_token(
        self,
        identity: Identity,
        *,
        force: bool = False,
    ) -> tuple[Identity, str]:
        """Return the identity and an access token that is believed to be valid.

        Args:
            identity: The identity whose token is needed
            force: Refresh even if the cached token looks valid

        Returns:
            Tuple of (possibly updated identity, access token)

        Raises:
            ProviderNotConfiguredError: If the identity's provider is not registered
            TokenRefreshError: If the provider refused or failed the refresh
        """
        if not force and identity.has_usable_token(self._clock.now()):
            return identity, identity.access_token

        provider = self._providers.get(identity.provider)
        if provider is None:
            raise ProviderNotConfiguredError(identity.provider)

        logger.debug(
            "Refreshing token: identity_id=%s, provider=%s, forced=%s",
            identity.id,
            identity.provider,
            force,
        )
        try:
            refreshed = await provider.refresh(identity)
        except AreaLinkError as e:
            raise TokenRefreshError(identity.provider, e.message) from e

        updated = reconcile_tokens(identity, refreshed.token, self._clock)
        updated = await self._identity_repo.update(updated)

        logger.info(
            "Token refreshed: identity_id=%s, provider=%s, expires_at=%s",
            updated.id,
            updated.provider,
            updated.expires_at,
        )
        return updated, updated.access_token
