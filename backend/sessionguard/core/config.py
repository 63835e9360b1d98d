"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# Load .env in development (no-op when absent)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable.

    Raises
    ------
    ValueError
        When the variable is set but is not an integer.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {val!r}") from exc


def env_float(name: str, default: float) -> float:
    """Parse a float from an environment variable (same rules as :func:`env_int`)."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return float(val.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {val!r}") from exc


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a development-safe placeholder.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` for signing access tokens.
    JWT_ACCESS_TOKEN_EXPIRES: int
        Access token lifetime in seconds.
    SESSION_TOKEN_INACTIVITY_EXPIRY_SECONDS: int
        Sliding window after which an unused session token disappears (14d).
    SESSION_TOKEN_ABSOLUTE_EXPIRY_SECONDS: int
        Ceiling for a whole session family (90d).
    SESSION_TOKEN_MAX_PER_USER: int
        Concurrent live sessions per user (device limit).
    SESSION_TOKEN_REUSE_GRACE_SECONDS: int
        Retention of revoked tokens so replays are detected (1h).
    REDIS_URL: str | None
        Token store location. When unset, an in-memory store is used.
    REDIS_SOCKET_TIMEOUT: float
        Per-command and connect timeout for Redis, in seconds.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    USE_PROXYFIX: bool
        Trust ``X-Forwarded-*`` headers from ``PROXY_FIX_X_FOR`` hops.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ACCESS_TOKEN_EXPIRES = env_int("JWT_ACCESS_TOKEN_EXPIRES_SECONDS", 900)

    # Session tokens
    SESSION_TOKEN_INACTIVITY_EXPIRY_SECONDS = env_int(
        "SESSION_TOKEN_INACTIVITY_EXPIRY_SECONDS", 1_209_600
    )
    SESSION_TOKEN_ABSOLUTE_EXPIRY_SECONDS = env_int(
        "SESSION_TOKEN_ABSOLUTE_EXPIRY_SECONDS", 7_776_000
    )
    SESSION_TOKEN_MAX_PER_USER = env_int("SESSION_TOKEN_MAX_PER_USER", 5)
    SESSION_TOKEN_REUSE_GRACE_SECONDS = env_int("SESSION_TOKEN_REUSE_GRACE_SECONDS", 3600)

    # Token store
    REDIS_URL = os.getenv("REDIS_URL") or None
    REDIS_SOCKET_TIMEOUT = env_float("REDIS_SOCKET_TIMEOUT", 5.0)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXY_FIX_X_FOR = env_int("PROXY_FIX_X_FOR", 1)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses the in-memory token store unless ``TEST_REDIS_URL`` is set.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    REDIS_URL = os.getenv("TEST_REDIS_URL") or None
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
