"""DI provider for reaction executors and the dispatcher."""

import httpx
from dishka import Provider, provide

from arealink.config import Config
from arealink.domain.identity.port.repository import IdentityRepository
from arealink.domain.identity.service.freshness import TokenFreshnessGuard
from arealink.domain.reaction.command.run_reaction import RunReactionHandler
from arealink.domain.reaction.service.dispatcher import ReactionDispatcher
from arealink.infrastructure.reaction.zoom import ZoomMeetingExecutor
from arealink.util.di.scope import Scope


class ReactionProvider(Provider):
    run_reaction_handler = provide(RunReactionHandler, scope=Scope.UOW)

    @provide(scope=Scope.UOW)
    def get_dispatcher(
        self,
        config: Config,
        identity_repo: IdentityRepository,
        freshness: TokenFreshnessGuard,
        http_client: httpx.AsyncClient,
    ) -> ReactionDispatcher:
        return ReactionDispatcher(
            [
                ZoomMeetingExecutor(
                    identity_repo,
                    freshness,
                    http_client,
                    user_agent=config.http.user_agent,
                ),
            ]
        )
