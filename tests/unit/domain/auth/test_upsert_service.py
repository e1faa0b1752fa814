"""Unit tests for IdentityUpsertService."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from tests.unit.fakes import FakeAccountRepository, FakeIdentityLinkRepository
from vklogin.domain.auth.model.account import Account
from vklogin.domain.auth.model.identity_link import ExternalIdentityLink
from vklogin.domain.auth.model.value import AccountId, LinkId, ProfileFields
from vklogin.domain.auth.service.upsert import IdentityUpsertService
from vklogin.domain.shared.error import StoreUnavailableError

PROFILE = ProfileFields(first_name="Ana", last_name="Li")


@pytest.fixture
def account_repo() -> FakeAccountRepository:
    return FakeAccountRepository()


@pytest.fixture
def link_repo() -> FakeIdentityLinkRepository:
    return FakeIdentityLinkRepository()


@pytest.fixture
def service(
    account_repo: FakeAccountRepository, link_repo: FakeIdentityLinkRepository
) -> IdentityUpsertService:
    return IdentityUpsertService(_account_repo=account_repo, _link_repo=link_repo)


class TestFirstLogin:
    @pytest.mark.asyncio
    async def test_creates_account_and_link(
        self,
        service: IdentityUpsertService,
        account_repo: FakeAccountRepository,
        link_repo: FakeIdentityLinkRepository,
    ):
        account = await service.upsert("t1", "7", PROFILE)

        assert list(account_repo.accounts) == [account.id]
        assert len(link_repo.links) == 1
        link = link_repo.links[0]
        assert link.account_id == account.id
        assert link.external_id == "7"
        assert link.access_token == "t1"
        assert link.profile.first_name == "Ana"
        assert link.profile.last_name == "Li"

    @pytest.mark.asyncio
    async def test_numeric_external_id_is_normalized(
        self, service: IdentityUpsertService, link_repo: FakeIdentityLinkRepository
    ):
        first = await service.upsert("t1", 7, PROFILE)
        second = await service.upsert("t1", "7", PROFILE)

        assert first.id == second.id
        assert link_repo.links[0].external_id == "7"


class TestReturningLogin:
    @pytest.mark.asyncio
    async def test_same_token_does_not_write(
        self,
        service: IdentityUpsertService,
        account_repo: FakeAccountRepository,
        link_repo: FakeIdentityLinkRepository,
    ):
        first = await service.upsert("t1", "7", PROFILE)
        account_saves, link_saves = account_repo.saves, link_repo.saves

        second = await service.upsert("t1", "7", PROFILE)

        assert second.id == first.id
        assert account_repo.saves == account_saves
        assert link_repo.saves == link_saves

    @pytest.mark.asyncio
    async def test_new_token_is_stored_on_the_link(
        self,
        service: IdentityUpsertService,
        account_repo: FakeAccountRepository,
        link_repo: FakeIdentityLinkRepository,
    ):
        first = await service.upsert("t1", "7", PROFILE)

        second = await service.upsert("t2", "7", PROFILE)

        assert second.id == first.id
        assert len(account_repo.accounts) == 1
        assert len(link_repo.links) == 1
        assert link_repo.links[0].access_token == "t2"

    @pytest.mark.asyncio
    async def test_profile_is_not_refreshed(
        self, service: IdentityUpsertService, link_repo: FakeIdentityLinkRepository
    ):
        await service.upsert("t1", "7", PROFILE)

        await service.upsert("t2", "7", ProfileFields(first_name="Anna", last_name="Lee"))

        assert link_repo.links[0].profile.first_name == "Ana"


class TestOldestLinkWins:
    @pytest.mark.asyncio
    async def test_resolves_to_account_of_oldest_link(
        self,
        service: IdentityUpsertService,
        account_repo: FakeAccountRepository,
        link_repo: FakeIdentityLinkRepository,
    ):
        now = datetime.now(UTC)
        old_account = Account.create()
        young_account = Account.create()
        await account_repo.save(old_account)
        await account_repo.save(young_account)
        for account, created_at in ((young_account, now), (old_account, now - timedelta(1))):
            await link_repo.save(
                ExternalIdentityLink(
                    id=LinkId.generate(),
                    external_id="7",
                    access_token="t1",
                    profile=PROFILE,
                    account_id=account.id,
                    created_at=created_at,
                )
            )

        account = await service.upsert("t1", "7", PROFILE)

        assert account.id == old_account.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("callers", [2, 5])
    async def test_concurrent_first_logins_converge(
        self,
        callers: int,
        service: IdentityUpsertService,
        account_repo: FakeAccountRepository,
        link_repo: FakeIdentityLinkRepository,
    ):
        """Every caller misses the lookup and creates, then all return the oldest."""
        results = await asyncio.gather(
            *(service.upsert("t1", "7", PROFILE) for _ in range(callers))
        )

        assert len({account.id for account in results}) == 1
        oldest = await link_repo.first_by_external_id("7")
        assert oldest is not None
        assert results[0].id == oldest.account_id
        # Losing pairs stay behind, unreferenced
        assert len(account_repo.accounts) == callers
        assert len(link_repo.links) == callers


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_dangling_link_raises(self, link_repo: FakeIdentityLinkRepository):
        await link_repo.save(
            ExternalIdentityLink.create(
                account_id=AccountId(uuid4()),
                external_id="7",
                access_token="t1",
                profile=PROFILE,
            )
        )
        service = IdentityUpsertService(_account_repo=FakeAccountRepository(), _link_repo=link_repo)

        with pytest.raises(StoreUnavailableError) as exc_info:
            await service.upsert("t1", "7", PROFILE)

        assert exc_info.value.code == "dangling_link"

    @pytest.mark.asyncio
    async def test_link_invisible_after_write_raises(self):
        link_repo = AsyncMock()
        link_repo.first_by_external_id.return_value = None
        account_repo = AsyncMock()
        service = IdentityUpsertService(_account_repo=account_repo, _link_repo=link_repo)

        with pytest.raises(StoreUnavailableError) as exc_info:
            await service.upsert("t1", "7", PROFILE)

        assert exc_info.value.code == "link_not_visible"
        assert link_repo.first_by_external_id.await_count == 2

    @pytest.mark.asyncio
    async def test_account_save_failure_skips_link_write(self):
        link_repo = AsyncMock()
        link_repo.first_by_external_id.return_value = None
        account_repo = AsyncMock()
        account_repo.save.side_effect = StoreUnavailableError("down")
        service = IdentityUpsertService(_account_repo=account_repo, _link_repo=link_repo)

        with pytest.raises(StoreUnavailableError):
            await service.upsert("t1", "7", PROFILE)

        link_repo.save.assert_not_awaited()
