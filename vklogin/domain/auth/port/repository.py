"""Repository ports for the auth domain.

Every operation is its own durable step: once the awaitable returns, the
change is visible to every other in-flight callback.
"""

from abc import abstractmethod
from datetime import datetime
from typing import Protocol

from vklogin.domain.auth.model.account import Account
from vklogin.domain.auth.model.auth_request import AuthRequest
from vklogin.domain.auth.model.identity_link import ExternalIdentityLink
from vklogin.domain.auth.model.value import AccountId, AuthRequestId
from vklogin.domain.shared.port import Port


class AuthRequestRepository(Port, Protocol):
    """Persistence for pending AuthRequests."""

    @abstractmethod
    async def save(self, auth_request: AuthRequest) -> None:
        """Persist a new auth request."""
        ...

    @abstractmethod
    async def consume(self, request_id: AuthRequestId) -> AuthRequest | None:
        """Delete the request and return it.

        Returns None when it does not exist or another caller already
        consumed it. Only one caller can ever receive a given request.
        """
        ...

    @abstractmethod
    async def delete_created_before(self, cutoff: datetime) -> int:
        """Delete abandoned requests. Returns the number removed."""
        ...


class AccountRepository(Port, Protocol):
    """Repository for Account aggregate persistence."""

    @abstractmethod
    async def get(self, account_id: AccountId) -> Account | None:
        """Get an account by ID."""
        ...

    @abstractmethod
    async def save(self, account: Account) -> None:
        """Save an account (create or update)."""
        ...


class IdentityLinkRepository(Port, Protocol):
    """Repository for ExternalIdentityLink persistence."""

    @abstractmethod
    async def first_by_external_id(self, external_id: str) -> ExternalIdentityLink | None:
        """Oldest link for a VK user id, ordered by (created_at, id)."""
        ...

    @abstractmethod
    async def first_by_account_id(self, account_id: AccountId) -> ExternalIdentityLink | None:
        """Oldest link owned by an account."""
        ...

    @abstractmethod
    async def save(self, link: ExternalIdentityLink) -> None:
        """Save a link (create or update)."""
        ...
