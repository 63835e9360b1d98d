"""Marshmallow schemas for request validation and response shaping."""

from __future__ import annotations

from .auth import LogoutSchema, RefreshSchema, SessionSchema, TokenPairSchema

__all__ = ["RefreshSchema", "LogoutSchema", "TokenPairSchema", "SessionSchema"]
