"""Tests for the ``flask sessions`` command group."""

from __future__ import annotations

import pytest

from sessionguard.services._shared.base import token_ref
from sessionguard.services._shared.errors import TokenRevokedError

USER = "user-1"


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


def test_list_sessions(runner, app_sessions) -> None:
    token = app_sessions.create(USER, "Firefox", "10.0.0.1")

    result = runner.invoke(args=["sessions", "list", USER])

    assert result.exit_code == 0
    assert token_ref(token.token_id) in result.output
    assert "device=Firefox" in result.output
    assert token.token_id not in result.output


def test_list_sessions_empty(runner) -> None:
    result = runner.invoke(args=["sessions", "list", "nobody"])

    assert result.exit_code == 0
    assert "(no live sessions)" in result.output


def test_revoke_all(runner, app_sessions) -> None:
    tokens = [app_sessions.create(USER) for _ in range(2)]

    result = runner.invoke(args=["sessions", "revoke-all", USER])

    assert result.exit_code == 0
    assert "Revoked 2 session token(s)" in result.output
    for t in tokens:
        with pytest.raises(TokenRevokedError):
            app_sessions.validate(t.token_id)


def test_purge_requires_confirmation(runner, app_sessions) -> None:
    app_sessions.create(USER)

    result = runner.invoke(args=["sessions", "purge", USER], input="n\n")

    assert result.exit_code != 0
    assert len(app_sessions.store.list_by_user_id(USER)) == 1


def test_purge_hard_deletes(runner, app_sessions) -> None:
    app_sessions.create(USER)
    root = app_sessions.create(USER)
    app_sessions.rotate(root.token_id)

    result = runner.invoke(args=["sessions", "purge", USER, "--yes"])

    assert result.exit_code == 0
    assert "Deleted 3 session token(s)" in result.output
    assert app_sessions.store.list_by_user_id(USER) == []
