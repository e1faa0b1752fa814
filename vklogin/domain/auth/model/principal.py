"""Authenticated caller resolved from a session token."""

from dataclasses import dataclass

from vklogin.domain.auth.model.value import AccountId


@dataclass(frozen=True)
class CurrentAccount:
    """The account behind the Bearer session token of the current request."""

    account_id: AccountId
    username: str
