"""Auth domain services."""

from .auth import AuthService, CallbackOutcome
from .token import TokenService
from .upsert import IdentityUpsertService

__all__ = ["AuthService", "CallbackOutcome", "IdentityUpsertService", "TokenService"]
