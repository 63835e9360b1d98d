"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from datetime import timedelta

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from sessionguard.infra.jwt import JWTTokenProvider
from sessionguard.infra.redis import RedisTokenStore
from sessionguard.services._shared.ports import InMemoryTokenStore, TokenStore
from sessionguard.services.auth.dto import AuthTokenConfig
from sessionguard.services.auth.service import AuthService
from sessionguard.services.session_tokens import SessionTokenConfig, SessionTokenManager

# Global singletons (import-safe)
jwt = JWTManager()

EXT_STORE = "token_store"
EXT_SESSIONS = "session_tokens"


def init_app(app: Flask) -> None:
    """Initialize JWT support and the session token store.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. When ``REDIS_URL`` is
        set the token store is Redis (connectivity checked eagerly);
        otherwise a process-local in-memory store is used, which is only
        correct for a single worker.
    """
    jwt.init_app(app)

    store: TokenStore
    redis_url = app.config.get("REDIS_URL")
    if redis_url:
        timeout = float(app.config.get("REDIS_SOCKET_TIMEOUT", 5.0))
        client = redis.Redis.from_url(
            redis_url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        try:
            client.ping()
        except RedisError as exc:
            raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
        app.extensions["redis_client"] = client
        store = RedisTokenStore(r=client)
    else:
        app.extensions.pop("redis_client", None)
        app.logger.warning("REDIS_URL not set; using in-memory session token store")
        store = InMemoryTokenStore()

    install_token_store(app, store)


def install_token_store(app: Flask, store: TokenStore) -> SessionTokenManager:
    """Bind ``store`` and a manager configured from ``app.config`` to the app."""
    manager = SessionTokenManager(store=store, config=SessionTokenConfig.from_mapping(app.config))
    app.extensions[EXT_STORE] = store
    app.extensions[EXT_SESSIONS] = manager
    return manager


def get_session_manager() -> SessionTokenManager:
    """Return the session token manager bound to the current app."""
    manager = current_app.extensions.get(EXT_SESSIONS)
    if manager is None:
        raise RuntimeError("Session tokens are not initialized. Call init_app() first.")
    return manager


def get_auth_service() -> AuthService:
    """Build an :class:`AuthService` over the current app's session manager."""
    expires = current_app.config.get("JWT_ACCESS_TOKEN_EXPIRES", 900)
    access = expires if isinstance(expires, timedelta) else timedelta(seconds=int(expires))
    return AuthService(
        sessions=get_session_manager(),
        token_provider=JWTTokenProvider(),
        token_cfg=AuthTokenConfig(access_expires=access),
    )
