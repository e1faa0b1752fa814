"""Auth domain ports."""

from .identity_provider import IdentityProvider, ProviderProfile, TokenGrant
from .repository import AccountRepository, AuthRequestRepository, IdentityLinkRepository
from .session_issuer import SessionIssuer

__all__ = [
    "AccountRepository",
    "AuthRequestRepository",
    "IdentityLinkRepository",
    "IdentityProvider",
    "ProviderProfile",
    "SessionIssuer",
    "TokenGrant",
]
