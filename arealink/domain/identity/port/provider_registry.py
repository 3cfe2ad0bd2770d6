"""Provider registry port for the identity domain."""

from abc import abstractmethod
from typing import Protocol

from arealink.domain.identity.port.provider import OAuthProvider
from arealink.domain.shared.port import Port


class ProviderRegistry(Port, Protocol):
    """Registry of configured OAuth providers, looked up by name."""

    @abstractmethod
    def get(self, provider: str) -> OAuthProvider | None:
        """Get a provider by name.

        Args:
            provider: The provider name (e.g., "zoom", "google")

        Returns:
            The provider if configured, None otherwise
        """
        ...

    @abstractmethod
    def available_providers(self) -> list[str]:
        """Names of every configured provider."""
        ...

    def is_available(self, provider: str) -> bool:
        return self.get(provider) is not None
