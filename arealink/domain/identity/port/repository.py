"""Repository ports for the identity domain."""

from abc import abstractmethod
from typing import Protocol

from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.session import Session
from arealink.domain.identity.model.user import User
from arealink.domain.identity.model.value import IdentityId, SessionId, UserId
from arealink.domain.shared.port import Port


class IdentityRepository(Port, Protocol):
    """Repository for linked Identity persistence."""

    @abstractmethod
    async def create(self, identity: Identity) -> Identity:
        """Insert a new identity.

        Raises:
            ConflictError: If an identity with the same (provider, subject) exists
        """
        ...

    @abstractmethod
    async def update(self, identity: Identity) -> Identity:
        """Replace the mutable fields of an existing identity, keyed by id.

        Raises:
            NotFoundError: If no identity has this id
        """
        ...

    @abstractmethod
    async def get(self, identity_id: IdentityId) -> Identity | None:
        """Get an identity by ID."""
        ...

    @abstractmethod
    async def get_by_provider_and_subject(self, provider: str, subject: str) -> Identity | None:
        """Get the identity for a provider account."""
        ...

    @abstractmethod
    async def list_by_user(self, user_id: UserId) -> list[Identity]:
        """All identities owned by a user, oldest first."""
        ...


class UserRepository(Port, Protocol):
    """Repository for User aggregate persistence."""

    @abstractmethod
    async def get(self, user_id: UserId) -> User | None:
        """Get a user by ID."""
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        """Get a user by lower-cased email."""
        ...

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a new user.

        Raises:
            ConflictError: If a user with the same email exists
        """
        ...

    @abstractmethod
    async def update(self, user: User) -> User:
        """Replace an existing user.

        Raises:
            NotFoundError: If no user has this id
        """
        ...


class SessionRepository(Port, Protocol):
    """Repository for login Session persistence."""

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Insert a new session."""
        ...

    @abstractmethod
    async def get(self, session_id: SessionId) -> Session | None:
        """Get a session by ID."""
        ...
