"""Auth service for orchestrating the VK login flow."""

import logging
from dataclasses import dataclass

from vklogin.domain.auth.model.account import Account
from vklogin.domain.auth.model.auth_request import AuthRequest
from vklogin.domain.auth.model.value import AccountId, AuthRequestId, ProfileFields
from vklogin.domain.auth.port.identity_provider import IdentityProvider, ProviderProfile
from vklogin.domain.auth.port.repository import AuthRequestRepository, IdentityLinkRepository
from vklogin.domain.auth.port.session_issuer import SessionIssuer
from vklogin.domain.auth.service.upsert import IdentityUpsertService
from vklogin.domain.shared.error import (
    InvalidRequestError,
    InvalidStateError,
    NotLinkedError,
    ProfileFetchError,
)
from vklogin.domain.shared.service import Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallbackOutcome:
    """What a successful callback produces."""

    session_token: str
    account: Account
    external_id: str


class AuthService(Service):
    """Orchestrates the login flow.

    - begin_auth: Issue a single-use auth request and build the VK redirect
    - handle_callback: Consume the request, exchange the code, fetch the
      profile, upsert the account and mint a session
    - fetch_linked_profile: Re-fetch the live VK profile of a signed-in account

    Every step short-circuits on the first error. Nothing is retried here.
    """

    _auth_request_repo: AuthRequestRepository
    _link_repo: IdentityLinkRepository
    _identity_provider: IdentityProvider
    _upsert: IdentityUpsertService
    _session_issuer: SessionIssuer
    _state_ttl_seconds: int = 600

    async def begin_auth(self) -> str:
        """Persist a new auth request and return the VK authorization URL.

        Raises:
            StoreUnavailableError: If the request could not be saved
        """
        auth_request = AuthRequest.create()
        await self._auth_request_repo.save(auth_request)

        logger.info("Auth request issued: state=%s", auth_request.id)
        return self._identity_provider.get_authorization_url(state=str(auth_request.id))

    async def handle_callback(self, code: str | None, state: str | None) -> CallbackOutcome:
        """Validate a VK callback and resolve it to a session.

        Args:
            code: Authorization code from the callback query
            state: Auth request id from the callback query

        Raises:
            InvalidRequestError: If code or state is missing
            InvalidStateError: If state matches no live auth request
            TokenExchangeError: If VK rejects the code
            ProfileFetchError: If the profile cannot be fetched
            StoreUnavailableError: On store failure
        """
        if not (code and code.strip()) or not (state and state.strip()):
            raise InvalidRequestError("Invalid auth response received.")

        await self._consume_state(state)

        grant = await self._identity_provider.exchange_code(code)
        profile = await self._identity_provider.fetch_profile(grant.access_token)

        if profile.external_id != grant.external_id:
            raise ProfileFetchError(
                f"Profile uid {profile.external_id} does not match token user {grant.external_id}"
            )

        account = await self._upsert.upsert(
            grant.access_token,
            grant.external_id,
            ProfileFields(
                first_name=profile.first_name,
                last_name=profile.last_name,
                extra=profile.raw_data,
            ),
        )

        session_token = self._session_issuer.mint_session_token(account)
        logger.info(
            "Callback complete: account_id=%s, external_id=%s", account.id, grant.external_id
        )
        return CallbackOutcome(
            session_token=session_token,
            account=account,
            external_id=grant.external_id,
        )

    async def fetch_linked_profile(self, account_id: AccountId) -> ProviderProfile:
        """Fetch the live VK profile for an account using its stored token.

        Raises:
            NotLinkedError: If the account has no link
            ProfileFetchError: If VK rejects the stored token
        """
        link = await self._link_repo.first_by_account_id(account_id)
        if link is None:
            raise NotLinkedError()
        return await self._identity_provider.fetch_profile(link.access_token)

    async def _consume_state(self, state: str) -> None:
        """Delete the auth request before anything touches the network.

        Runs even if the rest of the callback fails, so a state value can
        never be used twice.
        """
        request_id = AuthRequestId.parse(state)
        auth_request = (
            await self._auth_request_repo.consume(request_id) if request_id is not None else None
        )

        if auth_request is None:
            logger.warning("Callback with unknown or replayed state: %s", state)
            raise InvalidStateError("Invalid or expired auth request.")

        if auth_request.is_expired(self._state_ttl_seconds):
            logger.warning("Callback with expired state: %s", state)
            raise InvalidStateError("Invalid or expired auth request.")
