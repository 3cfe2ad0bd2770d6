"""Identity entity: a user's credentials for one third-party account."""

from datetime import datetime

from arealink.domain.identity.model.token import OAuthToken
from arealink.domain.identity.model.value import IdentityId, UserId
from arealink.domain.shared.model.entity import Entity


class Identity(Entity):
    """OAuth credentials linking a local user to a provider account.

    Invariants:
    - `(provider, subject)` identifies at most one identity
    - `provider` is stored lower-cased
    - a stored refresh token or scope set is only replaced by a non-empty value
    - `expires_at` absent means "valid until a call fails"
    """

    id: IdentityId
    user_id: UserId
    provider: str
    subject: str
    access_token: str
    refresh_token: str | None = None
    scopes: list[str] = []
    expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls,
        user_id: UserId,
        provider: str,
        subject: str,
        token: OAuthToken,
        now: datetime,
    ) -> "Identity":
        """Create a new identity from a freshly exchanged token."""
        return cls(
            id=IdentityId.generate(),
            user_id=user_id,
            provider=provider,
            subject=subject,
            access_token=token.access_token,
            refresh_token=token.refresh_token or None,
            scopes=list(token.scopes),
            expires_at=token.expires_at,
            created_at=now,
            updated_at=now,
        )

    def token_expired(self, now: datetime) -> bool:
        """Whether the access token is past its expiry.

        An identity without an expiry is never considered expired.
        """
        if self.expires_at is None:
            return False
        return now >= self.expires_at

    def has_usable_token(self, now: datetime) -> bool:
        return bool(self.access_token) and not self.token_expired(now)

    def with_tokens(self, token: OAuthToken, now: datetime) -> "Identity":
        """Return a copy carrying `token`, keeping stored values the token omits."""
        return self.model_copy(
            update={
                "access_token": token.access_token,
                "refresh_token": token.refresh_token or self.refresh_token,
                "scopes": list(token.scopes) if token.scopes else list(self.scopes),
                "expires_at": token.expires_at if token.expires_at is not None else self.expires_at,
                "updated_at": now,
            }
        )
