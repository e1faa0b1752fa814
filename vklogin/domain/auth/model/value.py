"""Value objects for the auth domain."""

import base64
import hashlib
import secrets
from uuid import UUID

from pydantic import Field

from vklogin.domain.shared.model.value import Identifier, ValueObject


class AuthRequestId(Identifier):
    """Identifier of a pending login attempt. Round-tripped as the OAuth ``state``."""

    @classmethod
    def parse(cls, state: str) -> "AuthRequestId | None":
        """Parse a ``state`` query value; None if it cannot be one of ours."""
        try:
            return cls(UUID(state))
        except (TypeError, ValueError):
            return None


class AccountId(Identifier):
    """Unique identifier for an Account."""


class LinkId(Identifier):
    """Unique identifier for an ExternalIdentityLink."""


def normalize_external_id(value: str | int) -> str:
    """VK sends numeric ids; store and compare them as strings."""
    return str(value).strip()


class ProfileFields(ValueObject):
    """Display attributes cached on a link at creation time."""

    first_name: str
    last_name: str
    extra: dict = Field(default_factory=dict)


# Random bytes per generated credential, as base64 this is 32 characters.
CREDENTIAL_BYTES = 24


class Credentials(ValueObject):
    """System-generated login for an account. Never derived from provider data."""

    username: str
    password: str

    @classmethod
    def generate(cls) -> "Credentials":
        return cls(
            username=base64.b64encode(secrets.token_bytes(CREDENTIAL_BYTES)).decode(),
            password=base64.b64encode(secrets.token_bytes(CREDENTIAL_BYTES)).decode(),
        )

    @property
    def password_hash(self) -> str:
        return hashlib.sha256(self.password.encode()).hexdigest()
