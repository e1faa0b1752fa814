"""AuthRequest entity: one pending login attempt."""

from datetime import UTC, datetime, timedelta

from vklogin.domain.auth.model.value import AuthRequestId
from vklogin.domain.shared.model.entity import Entity


class AuthRequest(Entity):
    """A login attempt between authorization redirect and callback.

    Invariants:
    - `id` doubles as the OAuth `state` value
    - Single-use: the first callback that consumes it deletes it
    """

    id: AuthRequestId
    created_at: datetime

    @classmethod
    def create(cls) -> "AuthRequest":
        return cls(id=AuthRequestId.generate(), created_at=datetime.now(UTC))

    def is_expired(self, ttl_seconds: int, now: datetime | None = None) -> bool:
        """A ttl of 0 means requests never expire."""
        if ttl_seconds <= 0:
            return False
        now = now or datetime.now(UTC)
        created_at = self.created_at
        if created_at.tzinfo is None:
            # SQLite drops tzinfo on the way back
            created_at = created_at.replace(tzinfo=UTC)
        return now - created_at > timedelta(seconds=ttl_seconds)
