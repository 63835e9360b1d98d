"""Session token lifecycle: rotation, reuse detection and revocation."""

from __future__ import annotations

from .dto import SessionTokenConfig
from .service import SessionTokenManager

__all__ = ["SessionTokenConfig", "SessionTokenManager"]
