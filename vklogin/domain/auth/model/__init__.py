"""Auth domain models."""

from .account import Account
from .auth_request import AuthRequest
from .identity_link import ExternalIdentityLink
from .principal import CurrentAccount
from .value import AccountId, AuthRequestId, Credentials, LinkId, ProfileFields

__all__ = [
    "Account",
    "AccountId",
    "AuthRequest",
    "AuthRequestId",
    "Credentials",
    "CurrentAccount",
    "ExternalIdentityLink",
    "LinkId",
    "ProfileFields",
]
