from arealink.domain.reaction.command.run_reaction import (
    RunReaction,
    RunReactionHandler,
    RunReactionResult,
)

__all__ = ["RunReaction", "RunReactionHandler", "RunReactionResult"]
