"""Unit tests for login command and profile query handlers."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from vklogin.config import SessionConfig
from vklogin.domain.auth.command.login import (
    BeginAuth,
    BeginAuthHandler,
    CompleteCallback,
    CompleteCallbackHandler,
)
from vklogin.domain.auth.model.account import Account
from vklogin.domain.auth.model.principal import CurrentAccount
from vklogin.domain.auth.model.value import AccountId
from vklogin.domain.auth.port.identity_provider import ProviderProfile
from vklogin.domain.auth.query.get_linked_profile import (
    GetLinkedProfile,
    GetLinkedProfileHandler,
)
from vklogin.domain.auth.service.auth import CallbackOutcome
from vklogin.domain.auth.service.token import TokenService
from vklogin.domain.shared.error import AuthorizationError


class TestBeginAuthHandler:
    @pytest.mark.asyncio
    async def test_is_public(self):
        auth_service = AsyncMock()
        auth_service.begin_auth.return_value = "https://oauth.vk.com/authorize?state=x"
        handler = BeginAuthHandler(auth_service=auth_service)

        result = await handler.run(BeginAuth())

        assert result.authorization_url == "https://oauth.vk.com/authorize?state=x"


class TestCompleteCallbackHandler:
    @pytest.mark.asyncio
    async def test_maps_outcome_to_result(self):
        account = Account.create()
        auth_service = AsyncMock()
        auth_service.handle_callback.return_value = CallbackOutcome(
            session_token="jwt", account=account, external_id="7"
        )
        token_service = TokenService(
            _config=SessionConfig(secret="test-secret-key-256-bits-long-xx", expire_minutes=60)
        )
        handler = CompleteCallbackHandler(auth_service=auth_service, token_service=token_service)

        result = await handler.run(CompleteCallback(code="c1", state="s1"))

        auth_service.handle_callback.assert_awaited_once_with(code="c1", state="s1")
        assert result.session_token == "jwt"
        assert result.token_type == "Bearer"
        assert result.expires_in == 3600
        assert result.account_id == str(account.id)
        assert result.external_id == "7"


class TestGetLinkedProfileHandler:
    @pytest.mark.asyncio
    async def test_requires_principal(self):
        handler = GetLinkedProfileHandler(principal=None, auth_service=AsyncMock())  # type: ignore[arg-type]

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.run(GetLinkedProfile())

        assert exc_info.value.code == "missing_token"

    @pytest.mark.asyncio
    async def test_returns_live_profile_of_principal(self):
        account_id = AccountId.generate()
        auth_service = MagicMock()
        auth_service.fetch_linked_profile = AsyncMock(
            return_value=ProviderProfile(
                external_id="7",
                first_name="Ana",
                last_name="Li",
                raw_data={"uid": 7},
            )
        )
        handler = GetLinkedProfileHandler(
            principal=CurrentAccount(account_id=account_id, username="u"),
            auth_service=auth_service,
        )

        result = await handler.run(GetLinkedProfile())

        auth_service.fetch_linked_profile.assert_awaited_once_with(account_id)
        assert result.uid == "7"
        assert result.raw == {"uid": 7}
