from arealink.domain.identity.command.login import (
    BeginAuthorization,
    BeginAuthorizationHandler,
    BeginAuthorizationResult,
    CompleteOAuth,
    CompleteOAuthHandler,
    CompleteOAuthResult,
)

__all__ = [
    "BeginAuthorization",
    "BeginAuthorizationHandler",
    "BeginAuthorizationResult",
    "CompleteOAuth",
    "CompleteOAuthHandler",
    "CompleteOAuthResult",
]
