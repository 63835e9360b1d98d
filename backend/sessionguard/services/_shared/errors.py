"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, or Redis directly. They serve as stable contracts between
token stores, the session token manager, and the delivery layer.

The translation to HTTP responses (RFC 7807) is handled by
``sessionguard/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from stores or domain logic.
    - The API layer later translates them to APIError.
    """

    pass


# --------------------------------------------------------------------------- #
# Session token protocol errors
# --------------------------------------------------------------------------- #


class SessionTokenError(ServiceError):
    """
    Base class for failures of a presented session token.

    Every subclass is terminal for the presented token: callers must not retry
    with the same token id and should send the client back to sign-in.

    :cvar code: Stable machine-readable identifier surfaced to clients.
    """

    code: str = "session_token_error"
    default_message: str = "Session token is no longer valid. Please sign in again."

    def __init__(self, message: str | None = None, *, user_id: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.user_id = user_id


class TokenNotFoundError(SessionTokenError):
    """The token never existed or the store already purged it."""

    code = "token_not_found"
    default_message = "Session token not found. Please sign in again."


class TokenExpiredError(SessionTokenError):
    """The absolute session ceiling has passed."""

    code = "token_expired"
    default_message = "Session has expired. Please sign in again."


class TokenRevokedError(SessionTokenError):
    """The token was consumed by a rotation or explicitly revoked."""

    code = "token_revoked"
    default_message = "Session token has been revoked."


class TokenReuseDetectedError(SessionTokenError):
    """
    An already-revoked token was presented to rotation.

    Raised only after every session of the owner has been revoked.
    """

    code = "token_reuse_detected"
    default_message = "Security threat detected. All sessions were signed out; please sign in again."


class ConcurrentRotationError(SessionTokenError):
    """Another request rotated the same token first; retry the whole refresh flow."""

    code = "concurrent_rotation"
    default_message = "Session token was refreshed concurrently. Please sign in again."


@dataclass(slots=True)
class RevocationIncompleteError(ServiceError):
    """
    Raised when revocation could not be confirmed for every token of a user.

    The caller must retry until the call succeeds; a partially revoked user
    undermines reuse detection.

    :param user_id: Owner whose tokens were being revoked.
    :param pending: Token references that could not be revoked.
    """

    user_id: str
    pending: tuple[str, ...] = ()

    def __str__(self) -> str:  # pragma: no cover
        return f"Revocation incomplete for user {self.user_id}: {len(self.pending)} pending"
