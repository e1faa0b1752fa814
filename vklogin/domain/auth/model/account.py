"""Account aggregate: the local user bound to a VK identity."""

from datetime import UTC, datetime

from vklogin.domain.auth.model.value import AccountId, Credentials
from vklogin.domain.shared.model.aggregate import Aggregate


class Account(Aggregate):
    """A local user record.

    Accounts are created on first login for a VK identity and are never
    changed by the login flow afterwards. Only a hash of the generated
    password is kept.
    """

    id: AccountId
    username: str
    password_hash: str
    created_at: datetime

    @classmethod
    def create(cls, credentials: Credentials | None = None) -> "Account":
        credentials = credentials or Credentials.generate()
        return cls(
            id=AccountId.generate(),
            username=credentials.username,
            password_hash=credentials.password_hash,
            created_at=datetime.now(UTC),
        )
