"""
familyvault/core/errors.py

Purpose: Map client exceptions to user-visible outcomes

- Human-readable alert text for every error class
- Detection of unauthenticated failures (hard transition to Login)
"""

from familyvault.core.exceptions import (
    NotAuthenticatedError,
    RemoteError,
    ValidationError,
    StaleReferenceError,
    IdentityError,
)
from familyvault.utils.constants import IDENTITY_ERROR_MESSAGES, SESSION_EXPIRED


def is_unauthenticated(exc: BaseException) -> bool:
    """
    True when the failure means the session is no longer usable:
    no credentials at all, or the backend answered 401.
    """
    if isinstance(exc, NotAuthenticatedError):
        return True
    return isinstance(exc, RemoteError) and exc.status == 401


def describe_error(exc: BaseException, fallback: str) -> str:
    """
    Picks the alert text for a failed user action.

    Validation and stale-reference errors carry messages written for the
    user; backend messages are shown when present; transport failures and
    anything unexpected fall back to the caller's generic text.

    Args:
        exc: The exception raised by the action
        fallback: Action-specific generic message

    Returns:
        Text suitable for an error alert
    """
    if isinstance(exc, (ValidationError, StaleReferenceError)):
        return exc.message
    if is_unauthenticated(exc):
        return SESSION_EXPIRED
    if isinstance(exc, IdentityError):
        return IDENTITY_ERROR_MESSAGES.get(exc.provider_code, fallback)
    if isinstance(exc, RemoteError) and exc.message:
        return exc.message
    # TransportError and anything unexpected
    return fallback
