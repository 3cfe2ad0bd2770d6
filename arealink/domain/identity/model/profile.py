"""Provider profile returned during an exchange."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Profile:
    """Account details reported by an OAuth provider."""

    provider: str
    subject: str  # Provider-specific account id
    email: str | None = None
    name: str | None = None
    picture_url: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        """True when the profile cannot identify an account."""
        return not self.provider.strip() or not self.subject.strip()
