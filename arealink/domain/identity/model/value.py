"""Value objects for the identity domain."""

from uuid import UUID, uuid4

from pydantic import RootModel


class UserId(RootModel[UUID]):
    """Unique identifier for a User."""

    @classmethod
    def generate(cls) -> "UserId":
        return cls(uuid4())

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)


class IdentityId(RootModel[UUID]):
    """Unique identifier for a linked Identity."""

    @classmethod
    def generate(cls) -> "IdentityId":
        return cls(uuid4())

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)


class SessionId(RootModel[UUID]):
    """Unique identifier for a login Session."""

    @classmethod
    def generate(cls) -> "SessionId":
        return cls(uuid4())

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)


def normalize_provider(name: str | None) -> str:
    """Canonical form of a provider name ("  Zoom " -> "zoom")."""
    return (name or "").strip().lower()
