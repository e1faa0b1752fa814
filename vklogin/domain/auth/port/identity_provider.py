"""Identity provider port for the auth domain."""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Protocol

from vklogin.domain.shared.port import Port


@dataclass(frozen=True)
class TokenGrant:
    """Result of a successful authorization code exchange."""

    access_token: str
    external_id: str
    raw_data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderProfile:
    """Basic profile of a VK user."""

    external_id: str
    first_name: str
    last_name: str
    raw_data: dict[str, Any] = field(default_factory=dict)


class IdentityProvider(Port, Protocol):
    """Port for the external OAuth2 provider.

    Implemented by VkIdentityProvider in infrastructure/.
    """

    @abstractmethod
    def get_authorization_url(self, state: str) -> str:
        """Build the URL the browser is redirected to.

        Args:
            state: Anti-forgery value, echoed back on the callback

        Returns:
            Full authorization URL
        """
        ...

    @abstractmethod
    async def exchange_code(self, code: str) -> TokenGrant:
        """Exchange an authorization code for an access token.

        Raises:
            TokenExchangeError: On transport failure, non-2xx status, or a
                response without ``access_token`` and ``user_id``
        """
        ...

    @abstractmethod
    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Fetch the profile of the user the token belongs to.

        Raises:
            ProfileFetchError: On transport failure or a response without
                ``uid``, ``first_name`` and ``last_name``
        """
        ...
