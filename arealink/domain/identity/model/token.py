"""OAuth token value objects."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from arealink.domain.identity.model.profile import Profile


@dataclass(frozen=True)
class OAuthToken:
    """Tokens issued by a provider's token endpoint.

    `refresh_token` and `expires_at` are optional: providers may omit them,
    in particular on refresh. An empty `scopes` tuple means the provider
    did not report scopes.
    """

    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    scopes: tuple[str, ...] = ()
    expires_at: datetime | None = None
    id_token: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TokenExchange:
    """Outcome of an authorization-code exchange or a token refresh."""

    token: OAuthToken
    profile: Profile
    raw_token: dict[str, Any] = field(default_factory=dict)
    raw_profile: dict[str, Any] = field(default_factory=dict)
