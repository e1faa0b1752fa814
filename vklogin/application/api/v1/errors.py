"""Centralized error transformation for API routes.

Maps vklogin errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from vklogin.domain.shared.error import (
    AuthorizationError,
    DomainError,
    InfrastructureError,
    InvalidRequestError,
    InvalidStateError,
    LoginError,
    NotFoundError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    InvalidRequestError: 400,
    InvalidStateError: 400,
    NotFoundError: 404,
    AuthorizationError: 403,
}

# AuthorizationError codes meaning "who are you?" rather than "not allowed"
UNAUTHENTICATED_CODES = frozenset({"missing_token", "invalid_token", "token_expired"})


def map_login_error(error: LoginError) -> HTTPException:
    """Map a vklogin error to an HTTPException.

    Args:
        error: The error to map.

    Returns:
        HTTPException with appropriate status code and detail.
    """
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        # Store and provider failures -> 503 Service Unavailable
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        # Distinguish 401 (unauthenticated) from 403 (unauthorized)
        if isinstance(error, AuthorizationError) and error.code in UNAUTHENTICATED_CODES:
            return HTTPException(
                status_code=401,
                detail=detail,
                headers={"WWW-Authenticate": "Bearer"},
            )
        status_code = next(
            (
                status
                for error_type, status in DOMAIN_ERROR_STATUS_MAP.items()
                if isinstance(error, error_type)
            ),
            400,
        )
        return HTTPException(status_code=status_code, detail=detail)

    # Fallback for unknown LoginError subclasses
    return HTTPException(status_code=500, detail=detail)
