"""Tests for domain-to-HTTP error translation and problem responses."""

from __future__ import annotations

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from sessionguard.core.errors import APIError, Unauthorized
from sessionguard.services._shared.base import BaseService, token_ref
from sessionguard.services._shared.errors import (
    ConcurrentRotationError,
    RevocationIncompleteError,
    ServiceError,
    TokenExpiredError,
    TokenNotFoundError,
    TokenReuseDetectedError,
    TokenRevokedError,
)

from tests.helpers.assertions import assert_problem


@pytest.mark.parametrize(
    ("exc", "code"),
    [
        (TokenNotFoundError(), "token_not_found"),
        (TokenExpiredError(), "token_expired"),
        (TokenRevokedError(), "token_revoked"),
        (TokenReuseDetectedError(user_id="u1"), "token_reuse_detected"),
        (ConcurrentRotationError(), "concurrent_rotation"),
    ],
)
def test_token_errors_become_401(exc, code):
    translated = BaseService.translate_exceptions(exc)

    assert isinstance(translated, Unauthorized)
    assert translated.status_code == 401
    assert translated.code == code
    assert translated.message == exc.default_message


def test_revocation_incomplete_is_503():
    translated = BaseService.translate_exceptions(RevocationIncompleteError("u1", ("ref",)))

    assert isinstance(translated, APIError)
    assert translated.status_code == 503
    assert translated.code == "revocation_incomplete"


def test_other_service_errors_are_400():
    translated = BaseService.translate_exceptions(ServiceError("boom"))

    assert translated.status_code == 400
    assert translated.code == "bad_request"


def test_non_service_errors_pass_through():
    exc = RuntimeError("x")

    assert BaseService.translate_exceptions(exc) is exc


def test_token_ref_is_short_and_stable():
    ref = token_ref("some-token-id")

    assert len(ref) == 12
    assert ref == token_ref("some-token-id")
    assert "some-token-id" not in ref


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/v1/nope")

    body = assert_problem(resp, 404, "not_found")
    assert "/api/v1/nope" in body["detail"]


def test_validation_error_is_422(client):
    resp = client.post("/api/v1/auth/refresh", json={})

    body = assert_problem(resp, 422, "validation_error")
    assert "refresh_token" in body["details"]["errors"]


def test_store_outage_is_503(client, app_sessions, monkeypatch):
    """Store failures surface as 503 so the client keeps its current token."""

    def boom(*_args, **_kwargs):
        raise RedisConnectionError("down")

    monkeypatch.setattr(app_sessions.store, "get", boom)

    resp = client.post("/api/v1/auth/refresh", json={"refresh_token": "abc"})

    assert_problem(resp, 503, "service_unavailable")
