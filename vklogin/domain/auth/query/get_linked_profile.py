"""Query: live VK profile of the signed-in account."""

from typing import Any

from vklogin.domain.auth.model.principal import CurrentAccount
from vklogin.domain.auth.service.auth import AuthService
from vklogin.domain.shared.query import Query, QueryHandler, Result


class GetLinkedProfile(Query):
    pass


class LinkedProfile(Result):
    uid: str
    first_name: str
    last_name: str
    raw: dict[str, Any]


class GetLinkedProfileHandler(QueryHandler[GetLinkedProfile, LinkedProfile]):
    principal: CurrentAccount
    auth_service: AuthService

    async def run(self, query: GetLinkedProfile) -> LinkedProfile:
        profile = await self.auth_service.fetch_linked_profile(self.principal.account_id)
        return LinkedProfile(
            uid=profile.external_id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            raw=profile.raw_data,
        )
