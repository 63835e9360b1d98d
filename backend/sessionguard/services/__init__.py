"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`sessionguard.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``sessionguard.services._shared.base``)
    * :class:`BaseService`

- Session tokens (from ``sessionguard.services.session_tokens``)
    * :class:`SessionTokenManager`
    * :class:`SessionTokenConfig`

- Auth facade (from ``sessionguard.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`RefreshIn`, :class:`LogoutIn`, :class:`TokenPairOut`
"""

from __future__ import annotations

from ._shared.base import BaseService
from .auth import AuthService, LoginIn, LogoutIn, RefreshIn, TokenPairOut
from .session_tokens import SessionTokenConfig, SessionTokenManager

__all__ = [
    "BaseService",
    "SessionTokenManager",
    "SessionTokenConfig",
    "AuthService",
    "LoginIn",
    "RefreshIn",
    "LogoutIn",
    "TokenPairOut",
]
