# sessionguard/services/_shared/base.py
from __future__ import annotations

import hashlib
from datetime import datetime

from sessionguard.core import errors as api_errors
from sessionguard.services._shared.errors import (
    RevocationIncompleteError,
    ServiceError,
    SessionTokenError,
)
from sessionguard.services._shared.ports.token_store import Clock, utc_now


def token_ref(token_id: str) -> str:
    """Short, non-reversible reference to a token id for logs and listings."""
    return hashlib.sha256(token_id.encode("utf-8")).hexdigest()[:12]


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Own the clock so time-dependent rules are testable.
    * Centralize error translation.
    * Keep services thin, orchestration-only, no web leakage.
    """

    def __init__(self, *, clock: Clock | None = None) -> None:
        """
        Initialize the base service.

        :param clock: Callable returning an aware UTC ``datetime``.
        :type clock: Clock | None
        """
        self._clock = clock or utc_now

    def now_utc(self) -> datetime:
        return self._clock()

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, SessionTokenError):
            # → 401, every token failure means "sign in again"
            return api_errors.Unauthorized(str(exc), code=exc.code)

        if isinstance(exc, RevocationIncompleteError):
            # → 503, caller must retry until confirmed
            return api_errors.APIError(
                message="Revocation could not be confirmed; retry the request.",
                status_code=503,
                code="revocation_incomplete",
            )

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        return exc
