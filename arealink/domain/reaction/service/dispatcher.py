"""Selects the executor for a reaction component."""

from collections.abc import Mapping, Sequence
from typing import Any
from uuid import UUID

from arealink.domain.identity.model.value import IdentityId, UserId
from arealink.domain.reaction.model.result import ReactionResult
from arealink.domain.reaction.service.executor import ResilientActionExecutor
from arealink.domain.shared.error import NotFoundError


class ReactionDispatcher:
    """Routes reaction runs to the executor that supports the component."""

    def __init__(self, executors: Sequence[ResilientActionExecutor[Any]]) -> None:
        self._executors = list(executors)

    def executor_for(self, component: str) -> ResilientActionExecutor[Any]:
        for executor in self._executors:
            if executor.supports(component):
                return executor
        raise NotFoundError(f"Unknown reaction component: {component}", code="unknown_component")

    async def execute(
        self,
        component: str,
        identity_id: IdentityId | UUID | str,
        user_id: UserId,
        params: Mapping[str, Any],
    ) -> ReactionResult:
        return await self.executor_for(component).execute(identity_id, user_id, params)
