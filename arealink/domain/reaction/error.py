"""Errors raised while executing reactions."""

from arealink.domain.reaction.model.result import ReactionResult
from arealink.domain.shared.error import ExternalServiceError


class UnauthorizedAfterRefreshError(ExternalServiceError):
    """The provider rejected the token again after a forced refresh."""

    def __init__(self, component: str, provider: str, result: ReactionResult | None = None) -> None:
        super().__init__(
            f"{component}: {provider} rejected credentials after token refresh",
            code="unauthorized_after_refresh",
        )
        self.component = component
        self.provider = provider
        self.result = result


class ActionFailedError(ExternalServiceError):
    """The provider API answered with a non-authorization error status."""

    def __init__(self, component: str, result: ReactionResult) -> None:
        super().__init__(
            f"{component}: {result.provider} API returned status {result.response.status}",
            code="action_failed",
        )
        self.component = component
        self.result = result

    @property
    def status(self) -> int:
        return self.result.response.status
