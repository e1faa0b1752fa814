"""VK identity provider adapter."""

import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from vklogin.config import VkConfig
from vklogin.domain.auth.model.value import normalize_external_id
from vklogin.domain.auth.port.identity_provider import (
    IdentityProvider,
    ProviderProfile,
    TokenGrant,
)
from vklogin.domain.shared.error import ProfileFetchError, TokenExchangeError

logger = logging.getLogger(__name__)


def _describe_error(payload: Any) -> str | None:
    """Flatten a VK error payload into ``"<code> <message>"``.

    The token endpoint answers ``{"error": "...", "error_description": "..."}``,
    the API answers ``{"error": {"error_code": 5, "error_msg": "..."}}``.
    """
    if not isinstance(payload, dict) or "error" not in payload:
        return None
    error = payload["error"]
    if isinstance(error, dict):
        return f"{error.get('error_code', '')} {error.get('error_msg', '')}".strip()
    description = payload.get("error_description")
    return f"{error} {description}" if description else str(error)


class VkIdentityProvider(IdentityProvider):
    """IdentityProvider implementation for VK OAuth (authorization code flow)."""

    def __init__(self, config: VkConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    def get_authorization_url(self, state: str) -> str:
        """Generate VK authorization URL."""
        params = {
            "client_id": self._config.client_id,
            "scope": self._config.scope,
            "redirect_uri": self._config.redirect_uri,
            "v": self._config.api_version,
            "response_type": "code",
            "state": state,
        }
        return f"{self._config.authorize_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> TokenGrant:
        """Exchange authorization code for an access token."""
        data = {
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "code": code,
            "redirect_uri": self._config.redirect_uri,
        }

        try:
            response = await self._http.post(
                self._config.token_url,
                data=data,
                headers={
                    "Accept": "application/json",
                    "User-Agent": self._config.user_agent,
                },
            )
        except httpx.RequestError as e:
            logger.warning("VK token request failed: %s", e)
            raise TokenExchangeError("Failed to connect to VK") from e

        token_data = self._json_or_none(response)

        if response.status_code != 200:
            logger.warning("VK token exchange failed: status=%d", response.status_code)
            raise TokenExchangeError(
                _describe_error(token_data) or f"VK token exchange failed: {response.status_code}"
            )

        # {"access_token": "...", "expires_in": 86400, "user_id": 7}
        if (
            not isinstance(token_data, dict)
            or not token_data.get("access_token")
            or not token_data.get("user_id")
        ):
            raise TokenExchangeError(_describe_error(token_data) or "Invalid access request.")

        return TokenGrant(
            access_token=str(token_data["access_token"]),
            external_id=normalize_external_id(token_data["user_id"]),
            raw_data={k: v for k, v in token_data.items() if k != "access_token"},
        )

    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Fetch the profile for the user owning ``access_token``."""
        try:
            response = await self._http.get(
                self._config.profile_url,
                params={"access_token": access_token, "v": self._config.api_version},
                headers={"User-Agent": self._config.user_agent},
            )
        except httpx.RequestError as e:
            logger.warning("VK profile request failed: %s", e)
            raise ProfileFetchError("Failed to connect to VK") from e

        body = self._json_or_none(response)

        if response.status_code != 200:
            logger.warning("VK profile fetch failed: status=%d", response.status_code)
            raise ProfileFetchError(
                _describe_error(body) or f"VK profile fetch failed: {response.status_code}"
            )

        # {"response": [{"uid": 7, "first_name": "Ana", "last_name": "Li"}]}
        users = body.get("response") if isinstance(body, dict) else None
        user = users[0] if isinstance(users, list) and users else None
        if not isinstance(user, dict):
            raise ProfileFetchError(_describe_error(body) or "Unable to parse VK data")

        # API versions 5.x name the id field "id", older ones "uid"
        uid = user.get("uid", user.get("id"))
        if not (uid and user.get("first_name") and user.get("last_name")):
            raise ProfileFetchError("Unable to parse VK data")

        return ProviderProfile(
            external_id=normalize_external_id(uid),
            first_name=str(user["first_name"]),
            last_name=str(user["last_name"]),
            raw_data=user,
        )

    @staticmethod
    def _json_or_none(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None
