"""Token service: session JWTs for accounts resolved by the login flow."""

import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from vklogin.config import SessionConfig
from vklogin.domain.auth.model.account import Account
from vklogin.domain.shared.service import Service

logger = logging.getLogger(__name__)

SESSION_AUDIENCE = "authenticated"


class TokenService(Service):
    """Mints and validates session tokens (the SessionIssuer adapter).

    Session tokens are HS256 JWTs whose subject is the account id. They are
    the only credential handed back to the browser after a successful
    callback.
    """

    _config: SessionConfig

    def mint_session_token(self, account: Account) -> str:
        """Create a signed session token for an account."""
        now = datetime.now(UTC)
        expires_at = now + timedelta(minutes=self._config.expire_minutes)

        payload = {
            "sub": str(account.id),
            "username": account.username,
            "aud": SESSION_AUDIENCE,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": secrets.token_hex(16),
        }

        return jwt.encode(
            payload,
            self._config.secret,
            algorithm=self._config.algorithm,
        )

    def validate_session_token(self, token: str) -> dict[str, Any]:
        """Validate and decode a session token.

        Raises:
            jwt.InvalidTokenError: If token is invalid or expired
        """
        return jwt.decode(
            token,
            self._config.secret,
            algorithms=[self._config.algorithm],
            audience=SESSION_AUDIENCE,
        )

    @property
    def session_expire_seconds(self) -> int:
        return self._config.expire_minutes * 60
