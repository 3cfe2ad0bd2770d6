"""Resilient action executor: one authenticated call, one retry after a forced refresh."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID

import logfire

from arealink.domain.identity.error import IdentityNotOwnedError
from arealink.domain.identity.model.identity import Identity
from arealink.domain.identity.model.value import IdentityId, UserId
from arealink.domain.identity.port.repository import IdentityRepository
from arealink.domain.identity.service.freshness import TokenFreshnessGuard
from arealink.domain.reaction.error import ActionFailedError, UnauthorizedAfterRefreshError
from arealink.domain.reaction.model.result import AttemptOutcome, ReactionResult
from arealink.domain.shared.error import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

P = TypeVar("P")


def parse_identity_id(value: IdentityId | UUID | str) -> IdentityId:
    """Parse an identity id given as IdentityId, UUID, or string."""
    if isinstance(value, IdentityId):
        return value
    if isinstance(value, UUID):
        return IdentityId(value)
    try:
        return IdentityId(UUID(str(value).strip()))
    except ValueError as e:
        raise ValidationError(f"Invalid identity id: {value!r}", field="identity_id") from e


class ResilientActionExecutor(ABC, Generic[P]):
    """Base class for reactions that call a provider API with a stored identity.

    Subclasses parse their parameters and perform a single HTTP attempt;
    this class owns ownership checks, token freshness, and the retry budget.
    A 401/403 answer triggers exactly one forced refresh and one more attempt.
    Any other error status fails immediately.
    """

    component: ClassVar[str]
    provider: ClassVar[str]
    max_attempts: ClassVar[int] = 2

    def __init__(
        self,
        identity_repo: IdentityRepository,
        freshness: TokenFreshnessGuard,
    ) -> None:
        self._identity_repo = identity_repo
        self._freshness = freshness

    def supports(self, component: str) -> bool:
        return component.strip().lower() == self.component

    @abstractmethod
    def parse_params(self, params: Mapping[str, Any]) -> P:
        """Validate raw parameters into a typed request.

        Raises:
            ValidationError: With `field` set to the offending parameter
        """
        ...

    @abstractmethod
    async def attempt(self, identity: Identity, access_token: str, request: P) -> ReactionResult:
        """Perform one outbound call and record it.

        Non-2xx answers are returned, not raised. Transport failures raise
        ExternalServiceError.
        """
        ...

    async def execute(
        self,
        identity_id: IdentityId | UUID | str,
        caller_user_id: UserId,
        params: Mapping[str, Any],
    ) -> ReactionResult:
        """Run the reaction for `caller_user_id` using one of their identities.

        Raises:
            ValidationError: Malformed parameters or identity id
            NotFoundError: Unknown identity
            IdentityNotOwnedError: Identity belongs to another user
            TokenRefreshError: The provider refused to refresh the token
            ActionFailedError: Non-authorization error status from the provider
            UnauthorizedAfterRefreshError: Token rejected even after refresh
        """
        request = self.parse_params(params)
        identity = await self._load_owned_identity(parse_identity_id(identity_id), caller_user_id)

        force_refresh = False
        result: ReactionResult | None = None
        with logfire.span(
            "reaction {component}",
            component=self.component,
            provider=self.provider,
            identity_id=str(identity.id),
        ):
            for attempt_no in range(1, self.max_attempts + 1):
                identity, access_token = await self._freshness.ensure_usable_token(
                    identity, force=force_refresh
                )
                result = await self.attempt(identity, access_token, request)
                result = result.model_copy(update={"attempts": attempt_no})

                outcome = result.outcome
                if outcome is AttemptOutcome.SUCCESS:
                    self._record_success(identity, result)
                    return result
                if outcome is AttemptOutcome.FAILED:
                    logger.warning(
                        "Reaction failed: component=%s, identity_id=%s, status=%d",
                        self.component,
                        identity.id,
                        result.response.status,
                    )
                    raise ActionFailedError(self.component, result)

                logger.info(
                    "Provider rejected token: component=%s, identity_id=%s, status=%d, attempt=%d",
                    self.component,
                    identity.id,
                    result.response.status,
                    attempt_no,
                )
                force_refresh = True

        raise UnauthorizedAfterRefreshError(self.component, self.provider, result)

    async def _load_owned_identity(self, identity_id: IdentityId, caller_user_id: UserId) -> Identity:
        identity = await self._identity_repo.get(identity_id)
        if identity is None:
            raise NotFoundError(f"Identity not found: {identity_id}", code="identity_not_found")
        if identity.user_id != caller_user_id:
            raise IdentityNotOwnedError(identity_id)
        if identity.provider != self.provider:
            raise ValidationError(
                f"Identity {identity_id} is linked to {identity.provider}, not {self.provider}",
                field="identity_id",
            )
        return identity

    def _record_success(self, identity: Identity, result: ReactionResult) -> None:
        logger.info(
            "Reaction executed: component=%s, provider=%s, user_id=%s, identity_id=%s, status=%d, attempts=%d",
            self.component,
            self.provider,
            identity.user_id,
            identity.id,
            result.response.status,
            result.attempts,
        )
        logfire.info(
            "reaction executed",
            component=self.component,
            provider=self.provider,
            user_id=str(identity.user_id),
            identity_id=str(identity.id),
            status=result.response.status,
            duration_ms=result.duration_ms,
            **result.output,
        )
