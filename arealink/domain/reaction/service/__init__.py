from arealink.domain.reaction.service.dispatcher import ReactionDispatcher
from arealink.domain.reaction.service.executor import ResilientActionExecutor, parse_identity_id

__all__ = ["ReactionDispatcher", "ResilientActionExecutor", "parse_identity_id"]
