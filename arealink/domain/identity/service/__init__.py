from arealink.domain.identity.service.freshness import TokenFreshnessGuard, reconcile_tokens
from arealink.domain.identity.service.oauth import OAuthService
from arealink.domain.identity.service.state import PendingAuthorization, StateService

__all__ = [
    "OAuthService",
    "PendingAuthorization",
    "StateService",
    "TokenFreshnessGuard",
    "reconcile_tokens",
]
