"""Database engine and session factory creation."""

import os
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from vklogin.config import Config
from vklogin.infrastructure.persistence.tables import metadata


def _expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite URLs and ensure parent directory exists."""
    if not url.startswith("sqlite") or ":memory:" in url:
        return url

    # Extract path from URL (sqlite+aiosqlite:///path or sqlite:///path)
    prefix_end = url.index("///") + 3
    prefix = url[:prefix_end]
    path = url[prefix_end:]

    abs_path = os.path.abspath(os.path.expanduser(path))
    Path(abs_path).parent.mkdir(parents=True, exist_ok=True)

    return f"{prefix}{abs_path}"


def _enable_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """SQLite ships with foreign key enforcement off, per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(config: Config) -> AsyncEngine:
    """Create async database engine.

    Handles SQLite and PostgreSQL with appropriate settings. File-backed
    SQLite gets a connection per session, so a rollback in one session never
    discards another session's writes; concurrent writers wait on the busy
    timeout instead of failing.
    """
    url = _expand_sqlite_path(config.database.url)
    is_sqlite = url.startswith("sqlite")

    if is_sqlite and ":memory:" in url:
        engine_kwargs: dict[str, Any] = {
            "echo": config.database.echo,
            # An in-memory database only exists on its one connection
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    elif is_sqlite:
        engine_kwargs = {
            "echo": config.database.echo,
            "connect_args": {
                "check_same_thread": False,
                "timeout": config.database.busy_timeout_seconds,
            },
        }
    else:
        engine_kwargs = {
            "echo": config.database.echo,
            "pool_pre_ping": True,
            "pool_size": 5,
            "max_overflow": 10,
        }

    engine = create_async_engine(url, **engine_kwargs)
    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory for dependency injection."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create missing tables in place.

    Used for SQLite when ``database.auto_migrate`` is on; other deployments
    run ``vklogin migrate`` (Alembic).
    """
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
