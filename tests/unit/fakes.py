"""In-memory fakes of the auth repositories.

Every call yields to the event loop once, so tasks started with
``asyncio.gather`` interleave between store operations the way concurrent
callbacks do against a real store.
"""

import asyncio
from datetime import datetime

from vklogin.domain.auth.model.account import Account
from vklogin.domain.auth.model.auth_request import AuthRequest
from vklogin.domain.auth.model.identity_link import ExternalIdentityLink
from vklogin.domain.auth.model.value import AccountId, AuthRequestId


class FakeAuthRequestRepository:
    def __init__(self) -> None:
        self.requests: dict[AuthRequestId, AuthRequest] = {}

    async def save(self, auth_request: AuthRequest) -> None:
        await asyncio.sleep(0)
        self.requests[auth_request.id] = auth_request

    async def consume(self, request_id: AuthRequestId) -> AuthRequest | None:
        await asyncio.sleep(0)
        return self.requests.pop(request_id, None)

    async def delete_created_before(self, cutoff: datetime) -> int:
        stale = [rid for rid, r in self.requests.items() if r.created_at < cutoff]
        for rid in stale:
            del self.requests[rid]
        return len(stale)


class FakeAccountRepository:
    def __init__(self) -> None:
        self.accounts: dict[AccountId, Account] = {}
        self.saves = 0

    async def get(self, account_id: AccountId) -> Account | None:
        await asyncio.sleep(0)
        return self.accounts.get(account_id)

    async def save(self, account: Account) -> None:
        await asyncio.sleep(0)
        self.saves += 1
        self.accounts[account.id] = account.model_copy()


class FakeIdentityLinkRepository:
    def __init__(self) -> None:
        self.links: list[ExternalIdentityLink] = []
        self.saves = 0

    async def first_by_external_id(self, external_id: str) -> ExternalIdentityLink | None:
        await asyncio.sleep(0)
        return self._oldest(lk for lk in self.links if lk.external_id == external_id)

    async def first_by_account_id(self, account_id: AccountId) -> ExternalIdentityLink | None:
        await asyncio.sleep(0)
        return self._oldest(lk for lk in self.links if lk.account_id == account_id)

    async def save(self, link: ExternalIdentityLink) -> None:
        await asyncio.sleep(0)
        self.saves += 1
        self.links = [lk for lk in self.links if lk.id != link.id]
        self.links.append(link.model_copy())

    @staticmethod
    def _oldest(links) -> ExternalIdentityLink | None:
        ordered = sorted(links, key=lambda lk: (lk.created_at, str(lk.id)))
        return ordered[0].model_copy() if ordered else None
