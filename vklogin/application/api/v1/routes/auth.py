"""Authentication routes for the VK login flow."""

import logging
from typing import Annotated
from urllib.parse import urlencode

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Query, Response
from fastapi.responses import RedirectResponse

from vklogin.config import Config
from vklogin.domain.auth.command.login import (
    BeginAuth,
    BeginAuthHandler,
    CompleteCallback,
    CompleteCallbackHandler,
)
from vklogin.domain.auth.query.get_linked_profile import (
    GetLinkedProfile,
    GetLinkedProfileHandler,
    LinkedProfile,
)
from vklogin.domain.shared.error import LoginError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"], route_class=DishkaRoute)


def _error_redirect(config: Config, error: str, description: str) -> RedirectResponse:
    error_params = urlencode({"error": error, "error_description": description})
    return RedirectResponse(
        url=f"{config.frontend.url}{config.frontend.error_path}?{error_params}",
        status_code=302,
    )


@router.get("/authorize")
async def authorize(
    config: FromDishka[Config],
    handler: FromDishka[BeginAuthHandler],
) -> Response:
    """Start the login flow.

    Stores a single-use auth request and redirects to VK's authorization page.
    """
    try:
        result = await handler.run(BeginAuth())
    except LoginError as e:
        logger.error("Failed to save auth request: %s", e.diagnostic)
        return _error_redirect(config, e.code, "Failed to save auth request.")

    return RedirectResponse(url=result.authorization_url, status_code=302)


@router.get("/callback")
async def handle_oauth_callback(
    config: FromDishka[Config],
    handler: FromDishka[CompleteCallbackHandler],
    code: Annotated[str | None, Query()] = None,
    state: Annotated[str | None, Query()] = None,
    error: Annotated[str | None, Query()] = None,
    error_description: Annotated[str | None, Query()] = None,
) -> Response:
    """Handle the redirect back from VK.

    On success the browser lands on the frontend with the session token in
    the URL fragment; on failure on the frontend error page with an opaque
    diagnostic.
    """
    # VK reports a denied consent screen as ?error=access_denied
    if error:
        logger.warning("VK returned error: %s - %s", error, error_description)
        return _error_redirect(config, error, error_description or "Authentication failed")

    try:
        result = await handler.run(CompleteCallback(code=code, state=state))
    except LoginError as e:
        logger.warning("OAuth callback rejected: %s", e.diagnostic)
        return _error_redirect(config, e.code, e.diagnostic)
    except Exception as e:
        logger.exception("OAuth callback failed: %s", e)
        return _error_redirect(config, "oauth_error", "Authentication failed. Please try again.")

    token_params = urlencode(
        {
            "session_token": result.session_token,
            "token_type": result.token_type,
            "expires_in": result.expires_in,
            "account_id": result.account_id,
        }
    )
    logger.info("OAuth complete: account_id=%s", result.account_id)
    return RedirectResponse(
        url=f"{config.frontend.url}{config.frontend.success_path}#auth={token_params}",
        status_code=302,
    )


@router.get("/profile", response_model=LinkedProfile)
async def get_linked_profile(
    handler: FromDishka[GetLinkedProfileHandler],
) -> LinkedProfile:
    """Live VK profile of the signed-in account, fetched with its stored token."""
    return await handler.run(GetLinkedProfile())
