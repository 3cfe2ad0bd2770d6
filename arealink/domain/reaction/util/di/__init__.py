from arealink.domain.reaction.util.di.provider import ReactionProvider

__all__ = ["ReactionProvider"]
