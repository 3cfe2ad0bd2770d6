"""User aggregate for the identity domain."""

from datetime import datetime
from enum import StrEnum

from arealink.domain.identity.model.value import UserId
from arealink.domain.shared.model.aggregate import Aggregate


class UserStatus(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class UserRole(StrEnum):
    MEMBER = "member"
    ADMIN = "admin"


class User(Aggregate):
    """A local account that owns linked identities.

    Users signing in through OAuth for the first time are created active;
    `email` is stored lower-cased and is the lookup key for linking.
    """

    id: UserId
    email: str
    status: UserStatus = UserStatus.PENDING
    role: UserRole = UserRole.MEMBER
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None

    @classmethod
    def create(cls, email: str, now: datetime, status: UserStatus = UserStatus.ACTIVE) -> "User":
        """Create a new member account."""
        return cls(
            id=UserId.generate(),
            email=email,
            status=status,
            role=UserRole.MEMBER,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def activate(self, now: datetime) -> None:
        self.status = UserStatus.ACTIVE
        self.updated_at = now

    def record_login(self, now: datetime) -> None:
        self.last_login_at = now
        self.updated_at = now
