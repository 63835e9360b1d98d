"""
sessionguard.services._shared.ports
===================================

Collection of *ports* (hexagonal interfaces) that define the contracts for
session token storage and access-token issuing.

These ports decouple the service layer from concrete implementations of
token persistence and token encoding.

Modules
-------
- :mod:`token_store`:
    Defines :class:`~.SessionToken`, :class:`~.TokenStore` and
    :class:`~.InMemoryTokenStore`: the TTL-capable key-value contract that
    rotation and reuse detection rely on.

- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the abstraction for access-token creation.

Design Notes
------------
Concrete adapters (e.g., Redis, JWT) implement these interfaces under
``sessionguard.infra``.
"""

from __future__ import annotations

from .token_provider import StubTokenProvider, TokenProvider
from .token_store import Clock, InMemoryTokenStore, SessionToken, TokenStore, utc_now

__all__ = [
    "Clock",
    "SessionToken",
    "TokenStore",
    "InMemoryTokenStore",
    "utc_now",
    "TokenProvider",
    "StubTokenProvider",
]
