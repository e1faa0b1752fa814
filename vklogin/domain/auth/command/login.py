"""Login commands for the VK OAuth flow."""

from typing import ClassVar

from vklogin.domain.auth.service.auth import AuthService
from vklogin.domain.auth.service.token import TokenService
from vklogin.domain.shared.command import Command, CommandHandler, Result


class BeginAuth(Command):
    """Command to start the VK login flow."""

    __public__: ClassVar[bool] = True


class BeginAuthResult(Result):
    """Result containing the VK authorization URL."""

    authorization_url: str


class BeginAuthHandler(CommandHandler[BeginAuth, BeginAuthResult]):
    """Handler for BeginAuth command."""

    auth_service: AuthService

    async def run(self, cmd: BeginAuth) -> BeginAuthResult:
        url = await self.auth_service.begin_auth()
        return BeginAuthResult(authorization_url=url)


class CompleteCallback(Command):
    """Command to complete the flow from the VK callback query."""

    __public__: ClassVar[bool] = True

    code: str | None = None
    state: str | None = None


class CompleteCallbackResult(Result):
    """Session issued for the resolved account."""

    session_token: str
    token_type: str = "Bearer"
    expires_in: int  # Seconds until the session token expires
    account_id: str
    external_id: str


class CompleteCallbackHandler(CommandHandler[CompleteCallback, CompleteCallbackResult]):
    """Handler for CompleteCallback command."""

    auth_service: AuthService
    token_service: TokenService

    async def run(self, cmd: CompleteCallback) -> CompleteCallbackResult:
        outcome = await self.auth_service.handle_callback(code=cmd.code, state=cmd.state)
        return CompleteCallbackResult(
            session_token=outcome.session_token,
            expires_in=self.token_service.session_expire_seconds,
            account_id=str(outcome.account.id),
            external_id=outcome.external_id,
        )
