"""Identity upsert: find or create the local account bound to a VK identity."""

import logging

from vklogin.domain.auth.model.account import Account
from vklogin.domain.auth.model.identity_link import ExternalIdentityLink
from vklogin.domain.auth.model.value import ProfileFields, normalize_external_id
from vklogin.domain.auth.port.repository import AccountRepository, IdentityLinkRepository
from vklogin.domain.shared.error import StoreUnavailableError
from vklogin.domain.shared.service import Service

logger = logging.getLogger(__name__)


class IdentityUpsertService(Service):
    """Binds VK identities to local accounts without locks or unique constraints.

    Two callbacks for a never-seen identity may both miss the lookup and both
    create an account and link. Each then re-runs the lookup, which always
    picks the oldest link, so both return the same account. The younger pair
    stays in the store, unreferenced.
    """

    _account_repo: AccountRepository
    _link_repo: IdentityLinkRepository

    async def upsert(
        self,
        access_token: str,
        external_id: str | int,
        profile: ProfileFields,
    ) -> Account:
        """Return the account linked to ``external_id``, creating it on first login.

        Raises:
            StoreUnavailableError: On store failure, or when a link points at
                a missing account
        """
        external_id = normalize_external_id(external_id)

        account = await self._find_linked_account(access_token, external_id)
        if account is not None:
            return account

        await self._create_linked_account(access_token, external_id, profile)

        # Re-run instead of returning the new account: a concurrent first
        # login may have linked an older account that must win.
        account = await self._find_linked_account(access_token, external_id)
        if account is None:
            raise StoreUnavailableError(
                f"Link for external_id={external_id} not visible after write",
                code="link_not_visible",
            )
        return account

    async def _find_linked_account(self, access_token: str, external_id: str) -> Account | None:
        link = await self._link_repo.first_by_external_id(external_id)
        if link is None:
            return None

        account = await self._account_repo.get(link.account_id)
        if account is None:
            raise StoreUnavailableError(
                f"Link {link.id} references missing account {link.account_id}",
                code="dangling_link",
            )

        # Unchanged tokens must not cost a write
        if link.replace_access_token(access_token):
            await self._link_repo.save(link)
            logger.info(
                "Access token updated: account_id=%s, external_id=%s", account.id, external_id
            )

        return account

    async def _create_linked_account(
        self, access_token: str, external_id: str, profile: ProfileFields
    ) -> None:
        account = Account.create()
        await self._account_repo.save(account)

        link = ExternalIdentityLink.create(
            account_id=account.id,
            external_id=external_id,
            access_token=access_token,
            profile=profile,
        )
        await self._link_repo.save(link)

        logger.info("New account created: account_id=%s, external_id=%s", account.id, external_id)
