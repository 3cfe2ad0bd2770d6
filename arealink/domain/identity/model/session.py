"""Login sessions issued after a successful OAuth exchange."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from arealink.domain.identity.model.user import User
from arealink.domain.identity.model.value import SessionId, UserId
from arealink.domain.shared.model.entity import Entity


@dataclass(frozen=True)
class RequestMetadata:
    """Client details captured from the request that started a login."""

    client_ip: str | None = None
    user_agent: str | None = None


class Session(Entity):
    """A login session, referenced by the session cookie."""

    id: SessionId
    user_id: UserId
    issued_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None
    ip: str | None = None
    user_agent: str | None = None
    auth_provider: str | None = None

    @classmethod
    def create(
        cls,
        user_id: UserId,
        ttl: timedelta,
        now: datetime,
        metadata: RequestMetadata | None = None,
        auth_provider: str | None = None,
    ) -> "Session":
        metadata = metadata or RequestMetadata()
        return cls(
            id=SessionId.generate(),
            user_id=user_id,
            issued_at=now,
            expires_at=now + ttl,
            ip=metadata.client_ip,
            user_agent=metadata.user_agent,
            auth_provider=auth_provider,
        )

    def active(self, now: datetime) -> bool:
        """A session is active until it expires or is revoked."""
        return self.revoked_at is None and now < self.expires_at


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a login: the user, the new session, and the cookie to set."""

    user: User
    session: Session
    cookie_name: str
