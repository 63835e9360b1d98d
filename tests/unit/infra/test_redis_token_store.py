# tests/unit/infra/test_redis_token_store.py
"""
Unit tests for RedisTokenStore using fakeredis.

These tests exercise the main flows:
- put + get (hash layout and user index)
- compare_and_set (success, stale expectation, concurrent write)
- delete
- list_by_user_id index cleanup

They use fakeredis.FakeRedis so they run entirely in-memory and integrate with pytest.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from sessionguard.infra.redis import RedisTokenStore
from sessionguard.services._shared.ports import SessionToken


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


def _token(token_id: str = "tok-1", user_id: str = "user-1", **overrides) -> SessionToken:
    now = _now()
    data = dict(
        token_id=token_id,
        user_id=user_id,
        created_at=now,
        last_used_at=now,
        absolute_expiry_at=now + timedelta(days=90),
        inactivity_expiry_seconds=1_209_600,
    )
    data.update(overrides)
    return SessionToken(**data)


@pytest.fixture
def rstore(redis_client):
    """Provide a RedisTokenStore backed by FakeRedis."""
    return RedisTokenStore(r=redis_client)


def test_put_and_get(rstore, redis_client):
    """put() writes one hash with a TTL and indexes it under the owner."""
    token = _token(device_info="ua/1", ip_address="1.2.3.4")

    rstore.put(token.token_id, token, 120)

    assert rstore.get(token.token_id) == token
    assert 0 < redis_client.ttl("st:tok-1") <= 120
    assert redis_client.smembers("st:u:user-1") == {b"tok-1"}
    assert redis_client.hget("st:tok-1", "revoked") == b"0"


def test_optional_fields_omitted(rstore, redis_client):
    """None-valued metadata is not stored and round-trips as None."""
    token = _token()

    rstore.put(token.token_id, token, 60)

    fields = {k.decode() for k in redis_client.hkeys("st:tok-1")}
    assert "device_info" not in fields
    assert "replaced_by_token_id" not in fields
    assert rstore.get("tok-1") == token


def test_get_missing(rstore):
    assert rstore.get("nope") is None


def test_ttl_is_reset_on_put(rstore, redis_client):
    token = _token()
    rstore.put(token.token_id, token, 1000)
    rstore.put(token.token_id, token, 10)

    assert redis_client.ttl("st:tok-1") <= 10


def test_compare_and_set_success(rstore, redis_client):
    token = _token()
    rstore.put(token.token_id, token, 1000)
    consumed = token.as_revoked(replaced_by="tok-2")

    assert rstore.compare_and_set(token.token_id, token, consumed, 60) is True

    stored = rstore.get(token.token_id)
    assert stored == consumed
    assert stored.replaced_by_token_id == "tok-2"
    assert redis_client.ttl("st:tok-1") <= 60


def test_compare_and_set_stale_expectation(rstore):
    token = _token()
    rstore.put(token.token_id, token, 1000)
    first = token.as_revoked(replaced_by="tok-2")
    assert rstore.compare_and_set(token.token_id, token, first, 60) is True

    second = token.as_revoked(replaced_by="tok-3")

    assert rstore.compare_and_set(token.token_id, token, second, 60) is False
    assert rstore.get(token.token_id).replaced_by_token_id == "tok-2"


def test_compare_and_set_missing_key(rstore):
    token = _token()

    assert rstore.compare_and_set(token.token_id, token, token.as_revoked(), 60) is False
    assert rstore.get(token.token_id) is None


def test_compare_and_set_aborts_on_concurrent_write(rstore, redis_client, monkeypatch):
    """A write landing between WATCH and EXEC makes the transaction fail."""
    token = _token()
    rstore.put(token.token_id, token, 1000)
    original = RedisTokenStore.from_mapping

    def racing_from_mapping(h):
        value = original(h)
        # another client touches the key after the watched read
        redis_client.hset("st:tok-1", "ip_address", "9.9.9.9")
        return value

    monkeypatch.setattr(RedisTokenStore, "from_mapping", staticmethod(racing_from_mapping))

    assert rstore.compare_and_set(token.token_id, token, token.as_revoked(), 60) is False
    monkeypatch.undo()
    assert rstore.get(token.token_id).revoked is False


def test_delete_removes_hash_and_index(rstore, redis_client):
    token = _token()
    rstore.put(token.token_id, token, 60)

    rstore.delete(token.token_id)
    rstore.delete(token.token_id)

    assert rstore.get(token.token_id) is None
    assert redis_client.exists("st:tok-1") == 0
    assert redis_client.smembers("st:u:user-1") == set()


def test_list_by_user_cleans_stale_index(rstore, redis_client):
    """Expired hashes are dropped from the owner's index while listing."""
    a = _token("a")
    b = _token("b", revoked=True)
    other = _token("c", user_id="user-2")
    for t in (a, b, other):
        rstore.put(t.token_id, t, 60)

    # Simulate TTL expiry of "a"
    redis_client.delete("st:a")

    found = rstore.list_by_user_id("user-1")

    assert [t.token_id for t in found] == ["b"]
    assert found[0].revoked is True
    assert redis_client.smembers("st:u:user-1") == {b"b"}


def test_ping(rstore):
    assert rstore.ping() is True
