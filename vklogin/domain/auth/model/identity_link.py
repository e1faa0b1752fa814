"""ExternalIdentityLink entity.

Binds one VK identity to one local Account.
"""

from datetime import UTC, datetime

from vklogin.domain.auth.model.value import AccountId, LinkId, ProfileFields
from vklogin.domain.shared.model.entity import Entity


class ExternalIdentityLink(Entity):
    """A link between an Account and a VK user id.

    Invariants:
    - At most one *effective* link per `external_id`: the oldest by
      (`created_at`, `id`). Younger duplicates may exist after a race and
      are ignored.
    - `account_id` and `external_id` are immutable after creation
    """

    id: LinkId
    external_id: str
    access_token: str
    profile: ProfileFields
    account_id: AccountId
    created_at: datetime

    @classmethod
    def create(
        cls,
        account_id: AccountId,
        external_id: str,
        access_token: str,
        profile: ProfileFields,
    ) -> "ExternalIdentityLink":
        return cls(
            id=LinkId.generate(),
            external_id=external_id,
            access_token=access_token,
            profile=profile,
            account_id=account_id,
            created_at=datetime.now(UTC),
        )

    def replace_access_token(self, access_token: str) -> bool:
        """Store a new access token. Returns False when nothing changed."""
        if access_token == self.access_token:
            return False
        self.access_token = access_token
        return True
