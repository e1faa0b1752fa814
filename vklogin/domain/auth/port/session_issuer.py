"""Session issuer port: turns a resolved Account into a client credential."""

from abc import abstractmethod
from typing import Protocol

from vklogin.domain.auth.model.account import Account
from vklogin.domain.shared.port import Port


class SessionIssuer(Port, Protocol):
    @abstractmethod
    def mint_session_token(self, account: Account) -> str:
        """Return an opaque session token for the account."""
        ...
