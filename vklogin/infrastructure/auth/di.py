"""DI provider for auth infrastructure."""

from collections.abc import AsyncIterable

import httpx
from dishka import provide

from vklogin.config import Config
from vklogin.domain.auth.port.identity_provider import IdentityProvider
from vklogin.infrastructure.auth.vk import VkIdentityProvider
from vklogin.util.di.base import Provider
from vklogin.util.di.scope import Scope

# HTTP client timeout configuration
_HTTP_TIMEOUT = httpx.Timeout(
    connect=5.0,  # Connection timeout
    read=10.0,  # Read timeout
    write=5.0,  # Write timeout
    pool=5.0,  # Pool timeout
)


class AuthInfraProvider(Provider):
    """DI provider for auth infrastructure adapters."""

    @provide(scope=Scope.APP)
    async def get_auth_http_client(self) -> AsyncIterable[httpx.AsyncClient]:
        """Shared HTTP client for VK calls (connection pooling)."""
        async with httpx.AsyncClient(timeout=_HTTP_TIMEOUT) as client:
            yield client

    @provide(scope=Scope.APP)
    def get_identity_provider(
        self, config: Config, http_client: httpx.AsyncClient
    ) -> IdentityProvider:
        return VkIdentityProvider(config=config.auth.vk, http_client=http_client)
