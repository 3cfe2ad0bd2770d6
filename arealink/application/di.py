from dishka import AsyncContainer, Provider, from_context, make_async_container

from arealink.config import Config
from arealink.domain.identity.util.di import IdentityProvider
from arealink.domain.reaction.util.di import ReactionProvider
from arealink.infrastructure.oauth import OAuthInfraProvider
from arealink.infrastructure.persistence import PersistenceProvider
from arealink.util.di.scope import Scope


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        ConfigProvider(),
        PersistenceProvider(),
        OAuthInfraProvider(),
        IdentityProvider(),
        ReactionProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
