from typing import AsyncIterable

from dishka import Provider, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from arealink.config import Config
from arealink.domain.identity.port.repository import (
    IdentityRepository,
    SessionRepository,
    UserRepository,
)
from arealink.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from arealink.infrastructure.persistence.repository import (
    SqlIdentityRepository,
    SqlSessionRepository,
    SqlUserRepository,
)
from arealink.util.di.scope import Scope


class PersistenceProvider(Provider):
    # APP-scoped factories
    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config.database)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    # UOW-scoped session (one per unit of work)
    @provide(scope=Scope.UOW)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterable[AsyncSession]:
        async with session_factory() as session:
            yield session
            await session.commit()

    # UOW-scoped repositories
    identity_repo = provide(SqlIdentityRepository, scope=Scope.UOW, provides=IdentityRepository)
    user_repo = provide(SqlUserRepository, scope=Scope.UOW, provides=UserRepository)
    session_repo = provide(SqlSessionRepository, scope=Scope.UOW, provides=SessionRepository)
