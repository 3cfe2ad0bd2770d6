"""Errors raised by the identity domain."""

from arealink.domain.shared.error import (
    AuthorizationError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)


class ProviderNotConfiguredError(NotFoundError):
    """The requested OAuth provider is unknown or has no credentials."""

    def __init__(self, provider: str) -> None:
        label = provider or "<empty>"
        super().__init__(f"OAuth provider not configured: {label}", code="provider_not_configured")
        self.provider = provider


class EmptyProfileError(ExternalServiceError):
    """The provider returned a profile that identifies no account."""

    def __init__(self, provider: str) -> None:
        super().__init__(
            f"{provider} returned an empty profile",
            code="empty_profile",
        )
        self.provider = provider


class OAuthEmailMissingError(ValidationError):
    """The provider profile carries no email to link a user by."""

    def __init__(self, provider: str) -> None:
        super().__init__(
            f"{provider} profile has no email address",
            field="email",
            code="oauth_email_missing",
        )
        self.provider = provider


class IdentityNotOwnedError(AuthorizationError):
    """The identity belongs to a different user than the caller."""

    def __init__(self, identity_id: object) -> None:
        super().__init__(
            f"Identity {identity_id} does not belong to the caller",
            code="identity_not_owned",
        )
        self.identity_id = identity_id


class TokenRefreshError(ExternalServiceError):
    """Refreshing an identity's access token failed."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"{provider} token refresh failed: {reason}", code="token_refresh_failed")
        self.provider = provider
