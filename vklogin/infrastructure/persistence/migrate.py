"""Database migration utilities.

Migrations are run synchronously before the async server starts. The
revision scripts ship inside the package, so an installed ``vklogin
migrate`` finds them without a source checkout.
"""

import logging
from importlib.resources import files
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

logger = logging.getLogger(__name__)


def script_location() -> Path:
    """Directory holding env.py and the revision scripts."""
    return Path(str(files("vklogin.infrastructure.persistence") / "migrations"))


def to_sync_url(database_url: str) -> str:
    """Convert async database URL to sync equivalent for migrations.

    Alembic runs synchronously, so we need sync drivers:
    - sqlite+aiosqlite:/// -> sqlite:///
    - postgresql+asyncpg:// -> postgresql:// (psycopg2)
    """
    url = database_url.replace("+aiosqlite", "").replace("+asyncpg", "")
    if "sqlite:///" in url:
        parts = url.split("///", 1)
        if len(parts) == 2 and parts[1].startswith("~"):
            url = f"sqlite:///{Path(parts[1]).expanduser()}"
    return url


def get_alembic_config(database_url: str) -> AlembicConfig:
    """Create Alembic config with the given database URL."""
    config = AlembicConfig()
    config.set_main_option("script_location", str(script_location()))
    config.set_main_option("sqlalchemy.url", to_sync_url(database_url))
    # Keep the logging set up by configure_logging()
    config.attributes["skip_logging_config"] = True
    return config


def run_migrations(database_url: str) -> None:
    """Run pending Alembic migrations."""
    sync_url = to_sync_url(database_url)

    if "sqlite:///" in sync_url and ":memory:" not in sync_url:
        Path(sync_url.split("///")[-1]).parent.mkdir(parents=True, exist_ok=True)

    command.upgrade(get_alembic_config(database_url), "head")
    logger.info("Database migrations complete")
