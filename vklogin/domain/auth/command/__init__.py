"""Auth domain commands."""

from .login import (
    BeginAuth,
    BeginAuthHandler,
    BeginAuthResult,
    CompleteCallback,
    CompleteCallbackHandler,
    CompleteCallbackResult,
)

__all__ = [
    "BeginAuth",
    "BeginAuthHandler",
    "BeginAuthResult",
    "CompleteCallback",
    "CompleteCallbackHandler",
    "CompleteCallbackResult",
]
