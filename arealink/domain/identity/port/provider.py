"""OAuth provider port for the identity domain."""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Protocol

from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.token import TokenExchange
from arealink.domain.shared.port import Port


@dataclass(frozen=True)
class AuthorizationRequest:
    """Options for building a provider authorization URL.

    Empty fields fall back to the provider's configured defaults.
    """

    redirect_uri: str | None = None
    scopes: tuple[str, ...] = ()
    state: str | None = None  # Generated when omitted
    use_pkce: bool = False
    prompt: str | None = None
    extra_params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthorizationResponse:
    """Authorization URL plus the values the caller must keep for the callback."""

    url: str
    state: str
    code_verifier: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None


@dataclass(frozen=True)
class ExchangeRequest:
    """Parameters that must match the authorization request."""

    redirect_uri: str | None = None
    code_verifier: str | None = None


class OAuthProvider(Port, Protocol):
    """Port for an OAuth2 provider capable of exchange and refresh.

    Implementations are adapters in infrastructure/oauth/.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Lower-cased provider name (e.g. 'zoom')."""
        ...

    @abstractmethod
    def authorization_url(self, request: AuthorizationRequest) -> AuthorizationResponse:
        """Build the URL that sends the user to the provider's consent page.

        Args:
            request: Authorization options (redirect URI, scopes, PKCE)

        Returns:
            The URL plus state and, when PKCE is used, the code verifier
        """
        ...

    @abstractmethod
    async def exchange(self, code: str, request: ExchangeRequest) -> TokenExchange:
        """Exchange an authorization code for tokens and the account profile.

        Args:
            code: Authorization code from the provider callback
            request: Redirect URI and PKCE verifier used when authorizing

        Returns:
            The issued token and the provider profile

        Raises:
            ExternalServiceError: If the provider rejects the code or is unreachable
        """
        ...

    @abstractmethod
    async def refresh(self, identity: Identity) -> TokenExchange:
        """Obtain a new access token using the identity's refresh token.

        Args:
            identity: Identity whose refresh token is used

        Returns:
            The refreshed token; refresh token, expiry and scopes may be absent

        Raises:
            ExternalServiceError: If no refresh token is stored or the provider refuses
        """
        ...
