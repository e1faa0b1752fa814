from dishka import AsyncContainer, make_async_container

from vklogin.config import Config
from vklogin.domain.auth.util.di import AuthProvider
from vklogin.infrastructure.auth import AuthInfraProvider
from vklogin.infrastructure.persistence import PersistenceProvider
from vklogin.util.di.base import Provider
from vklogin.util.di.scope import Scope


def create_container(
    config: Config | None = None,
    auth_infra: Provider | None = None,
) -> AsyncContainer:
    """Build the application container.

    Args:
        config: Settings; read from env/YAML when omitted
        auth_infra: Replacement for AuthInfraProvider (tests swap the VK HTTP client)
    """
    if config is None:
        # Pydantic Settings populates from env vars at runtime
        config = Config()  # type: ignore[call-arg]

    return make_async_container(
        PersistenceProvider(),
        AuthProvider(),
        auth_infra or AuthInfraProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
