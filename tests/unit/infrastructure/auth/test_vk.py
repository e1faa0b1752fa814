"""Unit tests for VkIdentityProvider."""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from vklogin.config import VkConfig
from vklogin.domain.shared.error import ProfileFetchError, TokenExchangeError
from vklogin.infrastructure.auth.vk import VkIdentityProvider

CONFIG = VkConfig(
    client_id="42",
    client_secret="shh",
    scope="friends",
    redirect_uri="https://app.example.com/api/v1/auth/callback",
)


def make_provider(handler) -> VkIdentityProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return VkIdentityProvider(config=CONFIG, http_client=client)


class TestAuthorizationUrl:
    def test_contains_client_and_state(self):
        provider = make_provider(lambda request: httpx.Response(500))

        url = provider.get_authorization_url(state="S1")

        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == CONFIG.authorize_url
        assert params["client_id"] == ["42"]
        assert params["scope"] == ["friends"]
        assert params["redirect_uri"] == [CONFIG.redirect_uri]
        assert params["v"] == ["5.28"]
        assert params["response_type"] == ["code"]
        assert params["state"] == ["S1"]


class TestExchangeCode:
    @pytest.mark.asyncio
    async def test_returns_token_and_user_id(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200, json={"access_token": "t1", "expires_in": 86400, "user_id": 7}
            )

        grant = await make_provider(handler).exchange_code("c1")

        assert grant.access_token == "t1"
        assert grant.external_id == "7"
        assert "access_token" not in grant.raw_data
        form = parse_qs(seen[0].content.decode())
        assert form["code"] == ["c1"]
        assert form["client_secret"] == ["shh"]
        assert seen[0].headers["User-Agent"] == "vklogin"

    @pytest.mark.asyncio
    async def test_provider_error_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401,
                json={"error": "invalid_grant", "error_description": "Code is invalid"},
            )

        with pytest.raises(TokenExchangeError) as exc_info:
            await make_provider(handler).exchange_code("bad")

        assert exc_info.value.message == "invalid_grant Code is invalid"
        assert exc_info.value.code == "token_exchange_failed"

    @pytest.mark.asyncio
    async def test_missing_user_id(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"access_token": "t1"})

        with pytest.raises(TokenExchangeError, match="Invalid access request."):
            await make_provider(handler).exchange_code("c1")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        with pytest.raises(TokenExchangeError, match="502"):
            await make_provider(handler).exchange_code("c1")

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TokenExchangeError, match="Failed to connect to VK"):
            await make_provider(handler).exchange_code("c1")


class TestFetchProfile:
    @pytest.mark.asyncio
    async def test_parses_first_user(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200, json={"response": [{"uid": 7, "first_name": "Ana", "last_name": "Li"}]}
            )

        profile = await make_provider(handler).fetch_profile("t1")

        assert profile.external_id == "7"
        assert (profile.first_name, profile.last_name) == ("Ana", "Li")
        assert profile.raw_data["uid"] == 7
        assert seen[0].url.params["access_token"] == "t1"
        assert seen[0].url.params["v"] == "5.28"

    @pytest.mark.asyncio
    async def test_accepts_id_field(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"response": [{"id": 7, "first_name": "Ana", "last_name": "Li"}]}
            )

        profile = await make_provider(handler).fetch_profile("t1")

        assert profile.external_id == "7"

    @pytest.mark.asyncio
    async def test_api_error_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"error": {"error_code": 5, "error_msg": "User authorization failed"}},
            )

        with pytest.raises(ProfileFetchError) as exc_info:
            await make_provider(handler).fetch_profile("revoked")

        assert exc_info.value.message == "5 User authorization failed"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"response": []},
            {"response": [{"uid": 7, "first_name": "Ana"}]},
            {"response": "nope"},
            {},
        ],
    )
    async def test_unparseable_profile(self, body):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=body)

        with pytest.raises(ProfileFetchError, match="Unable to parse VK data"):
            await make_provider(handler).fetch_profile("t1")
