"""Command line entry point using Cyclopts."""

import asyncio
import sys
from datetime import UTC, datetime, timedelta

import cyclopts
import uvicorn
from rich.console import Console
from sqlalchemy.ext.asyncio import AsyncEngine

from vklogin.config import Config, configure_logging
from vklogin.domain.auth.port.repository import AuthRequestRepository
from vklogin.domain.shared.error import LoginError
from vklogin.infrastructure.persistence.migrate import run_migrations

app = cyclopts.App(
    name="vklogin",
    help="Login With VK - server and maintenance commands",
)

console = Console(stderr=True)


@app.command
def serve(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Run the HTTP server.

    Args:
        host: Host to bind to.
        port: Port to listen on.
    """
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)
    # SQLite creates its tables at app startup instead
    if config.database.auto_migrate and not config.database.url.startswith("sqlite"):
        run_migrations(config.database.url)

    uvicorn.run(
        "vklogin.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
    )


@app.command
def migrate() -> None:
    """Apply pending database migrations."""
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)
    run_migrations(config.database.url)
    console.print("[green]✓[/green] Database is up to date")


@app.command(name="prune-requests")
def prune_requests(older_than: int = 3600) -> None:
    """Delete auth requests that were never completed.

    Args:
        older_than: Minimum age in seconds of the requests to delete.
    """
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)
    cutoff = datetime.now(UTC) - timedelta(seconds=older_than)

    try:
        removed = asyncio.run(_prune_requests(config, cutoff))
    except LoginError as e:
        console.print(f"[red]✗[/red] {e.diagnostic}")
        sys.exit(1)

    console.print(f"[green]✓[/green] Removed {removed} abandoned auth request(s)")


async def _prune_requests(config: Config, cutoff: datetime) -> int:
    from vklogin.application.di import create_container

    container = create_container(config)
    try:
        # Resolving the engine first lets close() dispose it
        await container.get(AsyncEngine)
        repo = await container.get(AuthRequestRepository)
        return await repo.delete_created_before(cutoff)
    finally:
        await container.close()


def main() -> None:
    app()
