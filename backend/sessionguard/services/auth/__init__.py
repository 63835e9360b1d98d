from __future__ import annotations

from .dto import LoginIn, LogoutIn, RefreshIn, TokenPairOut
from .service import AuthService

__all__ = ["AuthService", "LoginIn", "LogoutIn", "RefreshIn", "TokenPairOut"]
