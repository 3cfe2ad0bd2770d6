"""Command to run a reaction with one of the caller's identities."""

from dataclasses import dataclass
from typing import Any

from arealink.domain.identity.model.principal import Principal
from arealink.domain.reaction.model.result import ReactionResult
from arealink.domain.reaction.service.dispatcher import ReactionDispatcher
from arealink.domain.shared.command import Command, CommandHandler, Result


class RunReaction(Command):
    component: str
    identity_id: str
    params: dict[str, Any] = {}


class RunReactionResult(Result):
    result: ReactionResult


@dataclass
class RunReactionHandler(CommandHandler[RunReaction, RunReactionResult]):
    """Handler for RunReaction command."""

    dispatcher: ReactionDispatcher
    principal: Principal | None

    async def run(self, cmd: RunReaction) -> RunReactionResult:
        assert self.principal is not None  # Guaranteed by the session gate
        result = await self.dispatcher.execute(
            cmd.component,
            cmd.identity_id,
            self.principal.user_id,
            cmd.params,
        )
        return RunReactionResult(result=result)
