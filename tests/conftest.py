"""Global pytest fixtures for the sessionguard test-suite."""

from __future__ import annotations

import sys
from collections.abc import Generator
from pathlib import Path
from typing import Any

import fakeredis
import pytest
from flask import Flask

# Ensure the ``backend`` package is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "backend"))

from sessionguard import create_app  # noqa: E402
from sessionguard.core.config import TestingConfig  # noqa: E402
from sessionguard.core.extensions import get_session_manager  # noqa: E402
from sessionguard.infra.redis import RedisTokenStore  # noqa: E402
from sessionguard.services._shared.ports import InMemoryTokenStore, TokenStore  # noqa: E402
from sessionguard.services.session_tokens import (  # noqa: E402
    SessionTokenConfig,
    SessionTokenManager,
)

from tests.helpers.auth import expired_token, issue_token  # noqa: E402
from tests.helpers.clock import FakeClock  # noqa: E402

USER_ID = "user-1"


class _TestConfig(TestingConfig):
    """Testing config pinned to the in-memory store and a known JWT secret."""

    REDIS_URL = None
    JWT_SECRET_KEY = "test-secret-key-with-enough-entropy-123"
    LOG_LEVEL = "WARNING"


@pytest.fixture()
def app() -> Generator[Flask, None, None]:
    """Create a Flask application with a fresh in-memory token store.

    Returns
    -------
    Generator[Flask, None, None]
        Configured Flask application instance.
    """

    application = create_app(_TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(app: Flask) -> Any:
    """Return a Flask test client."""

    return app.test_client()


@pytest.fixture()
def app_sessions(app: Flask) -> SessionTokenManager:
    """Session token manager bound to ``app``."""

    return get_session_manager()


@pytest.fixture()
def auth_token(app: Flask) -> str:
    """Generate a valid access JWT for :data:`USER_ID`."""

    return issue_token(USER_ID)


@pytest.fixture()
def auth_header(auth_token: str) -> dict[str, str]:
    """Authorization header for authenticated requests."""

    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture()
def expired_auth_token(app: Flask) -> str:
    """Return an already expired JWT for :data:`USER_ID`."""

    return expired_token(USER_ID)


# --------------------------------------------------------------------------- #
# Service-level fixtures
# --------------------------------------------------------------------------- #


@pytest.fixture()
def clock() -> FakeClock:
    """Manually advanced clock shared by a manager and its collaborators."""

    return FakeClock()


@pytest.fixture()
def redis_client() -> fakeredis.FakeRedis:
    """Fresh fake Redis connection."""

    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture(params=["memory", "redis"])
def store(request: pytest.FixtureRequest) -> TokenStore:
    """Token store implementations exercised by the manager tests.

    Both stores expire entries on wall-clock time, so a manager driven by
    :class:`FakeClock` can pass a ceiling while the record is still stored.
    """

    if request.param == "memory":
        return InMemoryTokenStore()
    r = fakeredis.FakeRedis()
    r.flushall()
    return RedisTokenStore(r=r)


@pytest.fixture()
def session_config() -> SessionTokenConfig:
    """Small, readable lifetimes for time-travel tests."""

    return SessionTokenConfig(
        inactivity_expiry_seconds=600,
        absolute_expiry_seconds=3600,
        max_tokens_per_user=3,
        reuse_grace_seconds=120,
    )


@pytest.fixture()
def manager(
    store: TokenStore, session_config: SessionTokenConfig, clock: FakeClock
) -> SessionTokenManager:
    """Manager under test over the parametrized ``store``."""

    return SessionTokenManager(store=store, config=session_config, clock=clock)
