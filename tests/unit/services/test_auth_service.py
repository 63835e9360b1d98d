# tests/unit/services/test_auth_service.py
from __future__ import annotations

from datetime import timedelta

import pytest

from sessionguard.services._shared.errors import (
    TokenNotFoundError,
    TokenReuseDetectedError,
    TokenRevokedError,
)
from sessionguard.services._shared.ports import InMemoryTokenStore, StubTokenProvider
from sessionguard.services.auth import AuthService, LoginIn, LogoutIn, RefreshIn, TokenPairOut
from sessionguard.services.auth.dto import AuthTokenConfig
from sessionguard.services.session_tokens import SessionTokenManager


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def service() -> AuthService:
    """Build an AuthService wired to in-memory doubles."""
    return AuthService(
        sessions=SessionTokenManager(store=InMemoryTokenStore()),
        token_provider=StubTokenProvider(),
        token_cfg=AuthTokenConfig(access_expires=timedelta(minutes=5)),
    )


# -------------------------------- Tests ----------------------------------- #
def test_login_issues_token_pair_and_registers_session(service):
    """Login returns a token pair and stores the session token."""
    pair = service.login(LoginIn(user_id="u1", device_info="curl/8", ip_address="1.2.3.4"))

    assert isinstance(pair, TokenPairOut)
    assert pair.token_type == "bearer"
    assert pair.access_token.startswith("access.u1.")
    assert service.tokens.get_subject(pair.access_token) == "u1"

    stored = service.sessions.validate(pair.refresh_token)
    assert stored.user_id == "u1"
    assert stored.device_info == "curl/8"
    assert stored.ip_address == "1.2.3.4"


def test_refresh_rotates_and_blocks_reuse(service):
    """First refresh rotates; replaying the old token signs the user out."""
    pair1 = service.login(LoginIn(user_id="u1"))

    pair2 = service.refresh(RefreshIn(refresh_token=pair1.refresh_token))
    assert pair2.refresh_token != pair1.refresh_token
    assert pair2.access_token != pair1.access_token

    with pytest.raises(TokenReuseDetectedError):
        service.refresh(RefreshIn(refresh_token=pair1.refresh_token))

    with pytest.raises(TokenRevokedError):
        service.sessions.validate(pair2.refresh_token)


def test_refresh_unknown_token(service):
    with pytest.raises(TokenNotFoundError):
        service.refresh(RefreshIn(refresh_token="garbage"))


def test_logout_revokes_only_presented_session(service):
    """Logout ends one device; other sessions survive."""
    phone = service.login(LoginIn(user_id="u1"))
    laptop = service.login(LoginIn(user_id="u1"))

    service.logout(LogoutIn(refresh_token=phone.refresh_token))

    with pytest.raises(TokenRevokedError):
        service.sessions.validate(phone.refresh_token)
    assert service.sessions.validate(laptop.refresh_token).user_id == "u1"


def test_logout_all_sessions_flag(service):
    phone = service.login(LoginIn(user_id="u1"))
    laptop = service.login(LoginIn(user_id="u1"))

    service.logout(LogoutIn(refresh_token=phone.refresh_token, all_sessions=True))

    assert service.list_sessions("u1") == []
    with pytest.raises(TokenRevokedError):
        service.sessions.validate(laptop.refresh_token)


def test_logout_unknown_token_is_noop(service):
    """Logging out with a token the store does not know succeeds silently."""
    service.logout(LogoutIn(refresh_token="unknown"))


def test_logout_all_returns_count(service):
    service.login(LoginIn(user_id="u1"))
    service.login(LoginIn(user_id="u1"))
    service.login(LoginIn(user_id="u2"))

    assert service.logout_all("u1") == 2
    assert len(service.list_sessions("u2")) == 1
