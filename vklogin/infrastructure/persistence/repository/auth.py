"""SQLAlchemy repository implementations for the auth domain.

Each repository call runs in its own transaction, so a write is durable and
visible to concurrent callbacks as soon as the call returns.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vklogin.domain.auth.model.account import Account
from vklogin.domain.auth.model.auth_request import AuthRequest
from vklogin.domain.auth.model.identity_link import ExternalIdentityLink
from vklogin.domain.auth.model.value import (
    AccountId,
    AuthRequestId,
    LinkId,
    ProfileFields,
)
from vklogin.domain.auth.port.repository import (
    AccountRepository,
    AuthRequestRepository,
    IdentityLinkRepository,
)
from vklogin.domain.shared.error import StoreUnavailableError
from vklogin.infrastructure.persistence.tables import (
    accounts_table,
    auth_requests_table,
    identity_links_table,
)

logger = logging.getLogger(__name__)


def _row_to_auth_request(row: dict) -> AuthRequest:
    """Convert a database row to an AuthRequest model."""
    return AuthRequest(
        id=AuthRequestId(UUID(row["id"])),
        created_at=row["created_at"],
    )


def _row_to_account(row: dict) -> Account:
    """Convert a database row to an Account model."""
    return Account(
        id=AccountId(UUID(row["id"])),
        username=row["username"],
        password_hash=row["password_hash"],
        created_at=row["created_at"],
    )


def _account_to_dict(account: Account) -> dict:
    """Convert an Account model to a database row dict."""
    return {
        "id": str(account.id),
        "username": account.username,
        "password_hash": account.password_hash,
        "created_at": account.created_at,
    }


def _row_to_link(row: dict) -> ExternalIdentityLink:
    """Convert a database row to an ExternalIdentityLink model."""
    return ExternalIdentityLink(
        id=LinkId(UUID(row["id"])),
        external_id=row["external_id"],
        access_token=row["access_token"],
        profile=ProfileFields.model_validate(row["profile"]),
        account_id=AccountId(UUID(row["account_id"])),
        created_at=row["created_at"],
    )


def _link_to_dict(link: ExternalIdentityLink) -> dict:
    """Convert an ExternalIdentityLink model to a database row dict."""
    return {
        "id": str(link.id),
        "external_id": link.external_id,
        "access_token": link.access_token,
        "profile": link.profile.model_dump(),
        "account_id": str(link.account_id),
        "created_at": link.created_at,
    }


class _SqlRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """Run a block in one committed transaction; store errors become StoreUnavailableError."""
        try:
            async with self._sessions.begin() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error("%s failed: %s", type(self).__name__, e)
            raise StoreUnavailableError(f"Store operation failed: {type(e).__name__}") from e


class SqlAuthRequestRepository(_SqlRepository, AuthRequestRepository):
    """SQLAlchemy implementation of AuthRequestRepository."""

    async def save(self, auth_request: AuthRequest) -> None:
        async with self._transaction() as session:
            await session.execute(
                insert(auth_requests_table).values(
                    id=str(auth_request.id),
                    created_at=auth_request.created_at,
                )
            )

    async def consume(self, request_id: AuthRequestId) -> AuthRequest | None:
        async with self._transaction() as session:
            stmt = select(auth_requests_table).where(auth_requests_table.c.id == str(request_id))
            row = (await session.execute(stmt)).mappings().first()
            if row is None:
                return None

            # Only the caller whose DELETE removed the row wins
            result = await session.execute(
                delete(auth_requests_table).where(auth_requests_table.c.id == str(request_id))
            )
            if result.rowcount != 1:
                return None

            return _row_to_auth_request(dict(row))

    async def delete_created_before(self, cutoff: datetime) -> int:
        async with self._transaction() as session:
            result = await session.execute(
                delete(auth_requests_table).where(auth_requests_table.c.created_at < cutoff)
            )
            return result.rowcount


class SqlAccountRepository(_SqlRepository, AccountRepository):
    """SQLAlchemy implementation of AccountRepository."""

    async def get(self, account_id: AccountId) -> Account | None:
        async with self._transaction() as session:
            stmt = select(accounts_table).where(accounts_table.c.id == str(account_id))
            row = (await session.execute(stmt)).mappings().first()
            return _row_to_account(dict(row)) if row else None

    async def save(self, account: Account) -> None:
        account_dict = _account_to_dict(account)
        async with self._transaction() as session:
            exists = (
                await session.execute(
                    select(accounts_table.c.id).where(accounts_table.c.id == str(account.id))
                )
            ).first()

            if exists:
                stmt = (
                    update(accounts_table)
                    .where(accounts_table.c.id == str(account.id))
                    .values(**account_dict)
                )
            else:
                stmt = insert(accounts_table).values(**account_dict)

            await session.execute(stmt)


class SqlIdentityLinkRepository(_SqlRepository, IdentityLinkRepository):
    """SQLAlchemy implementation of IdentityLinkRepository."""

    async def first_by_external_id(self, external_id: str) -> ExternalIdentityLink | None:
        async with self._transaction() as session:
            stmt = (
                select(identity_links_table)
                .where(identity_links_table.c.external_id == external_id)
                .order_by(identity_links_table.c.created_at, identity_links_table.c.id)
                .limit(1)
            )
            row = (await session.execute(stmt)).mappings().first()
            return _row_to_link(dict(row)) if row else None

    async def first_by_account_id(self, account_id: AccountId) -> ExternalIdentityLink | None:
        async with self._transaction() as session:
            stmt = (
                select(identity_links_table)
                .where(identity_links_table.c.account_id == str(account_id))
                .order_by(identity_links_table.c.created_at, identity_links_table.c.id)
                .limit(1)
            )
            row = (await session.execute(stmt)).mappings().first()
            return _row_to_link(dict(row)) if row else None

    async def save(self, link: ExternalIdentityLink) -> None:
        link_dict = _link_to_dict(link)
        async with self._transaction() as session:
            exists = (
                await session.execute(
                    select(identity_links_table.c.id).where(
                        identity_links_table.c.id == str(link.id)
                    )
                )
            ).first()

            if exists:
                stmt = (
                    update(identity_links_table)
                    .where(identity_links_table.c.id == str(link.id))
                    .values(**link_dict)
                )
            else:
                stmt = insert(identity_links_table).values(**link_dict)

            await session.execute(stmt)
