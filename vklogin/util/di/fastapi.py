"""Custom Dishka FastAPI integration using Scope.UOW."""

from dishka import AsyncContainer
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from vklogin.util.di.scope import Scope as AppScope


class ContainerMiddleware:
    """ASGI middleware that creates a Scope.UOW container for each HTTP request.

    A custom version of dishka.integrations.starlette.ContainerMiddleware
    that uses Scope.UOW instead of dishka.Scope.REQUEST.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive, send=send)

        async with request.app.state.dishka_container(
            {Request: request},
            scope=AppScope.UOW,
        ) as request_container:
            request.state.dishka_container = request_container
            return await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app) -> None:
    """Setup Dishka DI with the Scope.UOW middleware.

    Args:
        container: The async DI container
        app: FastAPI or Starlette application
    """
    app.add_middleware(ContainerMiddleware)
    app.state.dishka_container = container
