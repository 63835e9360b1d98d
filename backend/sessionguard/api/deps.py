"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

F = TypeVar("F", bound=Callable[..., Any])

# Stored device descriptions are truncated to this many characters
MAX_DEVICE_INFO_LENGTH = 255


@dataclass(slots=True)
class ClientContext:
    """Advisory client metadata recorded on session tokens."""

    device_info: str | None
    ip_address: str | None


def client_context() -> ClientContext:
    """Extract device info (``User-Agent``) and client IP from the current request.

    ``request.remote_addr`` already reflects ``X-Forwarded-For`` when
    :mod:`sessionguard.core.proxy` installed ``ProxyFix``.
    A missing ``User-Agent`` yields ``None`` so rotation keeps the previous device info.
    """

    user_agent = (request.headers.get("User-Agent") or "").strip()
    return ClientContext(
        device_info=user_agent[:MAX_DEVICE_INFO_LENGTH] or None,
        ip_address=request.remote_addr,
    )


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def no_content() -> Response:
    """Return an empty ``204 No Content`` response."""

    return Response(status=204)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
