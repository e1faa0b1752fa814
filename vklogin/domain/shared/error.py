"""Error hierarchy for vklogin.

Error layers:
- LoginError: Base class for all vklogin errors
- DomainError: Rejected requests, unknown state, missing links (4xx responses)
- InfrastructureError: Store and provider failures (503 responses)

Every error carries a machine-readable ``code``. The callback route only ever
shows ``code`` and ``diagnostic`` to the browser, never the provider payload.
"""


class LoginError(Exception):
    """Base class for all vklogin errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)

    @property
    def diagnostic(self) -> str:
        """Opaque, user-displayable description of the failure."""
        return f"{self.code} {self.message}"


# =============================================================================
# Domain Errors (caller-caused or state-related - typically 4xx)
# =============================================================================


class DomainError(LoginError):
    """Base class for domain errors."""


class InvalidRequestError(DomainError):
    """Callback parameters missing or malformed."""

    def __init__(self, message: str, code: str = "invalid_request") -> None:
        super().__init__(message, code=code)


class InvalidStateError(DomainError):
    """The ``state`` value does not match a live auth request (replayed, forged or expired)."""

    def __init__(self, message: str, code: str = "invalid_or_expired_state") -> None:
        super().__init__(message, code=code)


class NotFoundError(DomainError):
    """Resource not found."""


class NotLinkedError(NotFoundError):
    """The account has no linked provider identity."""

    def __init__(self, message: str = "No VK data found.", code: str = "not_linked") -> None:
        super().__init__(message, code=code)


class AuthorizationError(DomainError):
    """Caller not authenticated or not allowed."""


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(LoginError):
    """Base class for infrastructure/system errors."""


class StoreUnavailableError(InfrastructureError):
    """The durable store could not complete a read or write."""

    def __init__(self, message: str, code: str = "store_unavailable") -> None:
        super().__init__(message, code=code)


class ExternalServiceError(InfrastructureError):
    """The identity provider rejected a request or answered with garbage."""


class TokenExchangeError(ExternalServiceError):
    """Authorization code could not be exchanged for an access token."""

    def __init__(self, message: str, code: str = "token_exchange_failed") -> None:
        super().__init__(message, code=code)


class ProfileFetchError(ExternalServiceError):
    """Provider profile could not be fetched or parsed."""

    def __init__(self, message: str, code: str = "profile_fetch_failed") -> None:
        super().__init__(message, code=code)


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
