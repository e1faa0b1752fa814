import logging
from contextlib import asynccontextmanager

import logfire
from dishka import AsyncContainer
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from vklogin.application.api.v1.errors import map_login_error
from vklogin.application.api.v1.routes import auth, health
from vklogin.application.di import create_container
from vklogin.config import Config, configure_logging
from vklogin.domain.shared.error import LoginError
from vklogin.infrastructure.persistence.database import create_schema
from vklogin.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: AsyncContainer = app.state.dishka_container
    config = await container.get(Config)

    if config.database.auto_migrate and config.database.url.startswith("sqlite"):
        await create_schema(await container.get(AsyncEngine))

    yield

    await container.close()


def create_app(config: Config | None = None, container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Run with ``uvicorn --factory vklogin.application.api.rest.app:create_app``
    or ``vklogin serve``.
    """
    if config is None:
        # Pydantic Settings populates from env vars at runtime
        config = Config()  # type: ignore[call-arg]

    configure_logging(config.logging)
    logger.info("Starting %s v%s", config.server.name, config.server.version)

    if not config.auth.session.secret:
        logger.warning("auth.session.secret is empty; session tokens are forgeable")

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI and outbound VK calls for tracing
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    setup_dishka(container or create_container(config), app_instance)

    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(auth.router, prefix="/api/v1")

    # Global error handler - maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(LoginError)
    async def login_error_handler(request: Request, exc: LoginError):
        http_exc = map_login_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
            headers=http_exc.headers,
        )

    # Global exception handler - logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance
