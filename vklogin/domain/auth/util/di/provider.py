"""DI provider for auth domain."""

import logging
from uuid import UUID

import jwt
from dishka import from_context, provide
from starlette.requests import Request

from vklogin.config import Config
from vklogin.domain.auth.command.login import BeginAuthHandler, CompleteCallbackHandler
from vklogin.domain.auth.model.principal import CurrentAccount
from vklogin.domain.auth.model.value import AccountId
from vklogin.domain.auth.port.identity_provider import IdentityProvider
from vklogin.domain.auth.port.repository import (
    AccountRepository,
    AuthRequestRepository,
    IdentityLinkRepository,
)
from vklogin.domain.auth.port.session_issuer import SessionIssuer
from vklogin.domain.auth.query.get_linked_profile import GetLinkedProfileHandler
from vklogin.domain.auth.service.auth import AuthService
from vklogin.domain.auth.service.token import TokenService
from vklogin.domain.auth.service.upsert import IdentityUpsertService
from vklogin.domain.shared.error import AuthorizationError
from vklogin.util.di.base import Provider
from vklogin.util.di.scope import Scope

logger = logging.getLogger(__name__)


class AuthProvider(Provider):
    """DI provider for auth domain services and handlers."""

    request = from_context(provides=Request, scope=Scope.UOW)

    # Command Handlers
    begin_auth_handler = provide(BeginAuthHandler, scope=Scope.UOW)
    complete_callback_handler = provide(CompleteCallbackHandler, scope=Scope.UOW)

    # Query Handlers
    get_linked_profile_handler = provide(GetLinkedProfileHandler, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_token_service(self, config: Config) -> TokenService:
        """Provide TokenService."""
        return TokenService(_config=config.auth.session)

    @provide(scope=Scope.APP)
    def get_session_issuer(self, token_service: TokenService) -> SessionIssuer:
        return token_service

    @provide(scope=Scope.APP)
    def get_upsert_service(
        self,
        account_repo: AccountRepository,
        link_repo: IdentityLinkRepository,
    ) -> IdentityUpsertService:
        return IdentityUpsertService(_account_repo=account_repo, _link_repo=link_repo)

    @provide(scope=Scope.APP)
    def get_auth_service(
        self,
        config: Config,
        auth_request_repo: AuthRequestRepository,
        link_repo: IdentityLinkRepository,
        identity_provider: IdentityProvider,
        upsert: IdentityUpsertService,
        session_issuer: SessionIssuer,
    ) -> AuthService:
        """Provide AuthService."""
        return AuthService(
            _auth_request_repo=auth_request_repo,
            _link_repo=link_repo,
            _identity_provider=identity_provider,
            _upsert=upsert,
            _session_issuer=session_issuer,
            _state_ttl_seconds=config.auth.state_ttl_seconds,
        )

    @provide(scope=Scope.UOW)
    def get_current_account(
        self,
        request: Request,
        token_service: TokenService,
    ) -> CurrentAccount:
        """Resolve the caller from the Bearer session token.

        Raises:
            AuthorizationError: If the token is missing, expired, or invalid
        """
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            raise AuthorizationError("Authorization header required", code="missing_token")

        token = auth_header[7:]  # Remove "Bearer " prefix

        try:
            payload = token_service.validate_session_token(token)
            return CurrentAccount(
                account_id=AccountId(UUID(payload["sub"])),
                username=payload.get("username", ""),
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthorizationError("Token has expired", code="token_expired") from e
        except (jwt.InvalidTokenError, KeyError, ValueError) as e:
            logger.debug("Rejected session token: %s", e)
            raise AuthorizationError("Invalid token", code="invalid_token") from e
