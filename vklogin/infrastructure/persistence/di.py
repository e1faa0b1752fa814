from collections.abc import AsyncIterable

from dishka import from_context, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from vklogin.config import Config
from vklogin.domain.auth.port.repository import (
    AccountRepository,
    AuthRequestRepository,
    IdentityLinkRepository,
)
from vklogin.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from vklogin.infrastructure.persistence.repository.auth import (
    SqlAccountRepository,
    SqlAuthRequestRepository,
    SqlIdentityLinkRepository,
)
from vklogin.util.di.base import Provider
from vklogin.util.di.scope import Scope


class PersistenceProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    # APP-scoped factories
    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    # Repositories open one transaction per call, so they can live for the whole app
    auth_request_repo = provide(
        SqlAuthRequestRepository, scope=Scope.APP, provides=AuthRequestRepository
    )
    account_repo = provide(SqlAccountRepository, scope=Scope.APP, provides=AccountRepository)
    identity_link_repo = provide(
        SqlIdentityLinkRepository, scope=Scope.APP, provides=IdentityLinkRepository
    )
