"""Health endpoint tests."""

from __future__ import annotations

import fakeredis
from redis.exceptions import ConnectionError as RedisConnectionError


def test_health_in_memory(client) -> None:
    """Without Redis the endpoint reports the in-memory store."""

    # Act
    resp = client.get("/api/v1/health")

    # Assert
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "ok"
    assert body["store"] == "memory"


def test_health_with_redis(app, client) -> None:
    app.extensions["redis_client"] = fakeredis.FakeRedis()

    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json()["store"] == "ok"


class _DownRedis:
    def ping(self):
        raise RedisConnectionError("down")


def test_health_degraded_when_redis_down(app, client) -> None:
    app.extensions["redis_client"] = _DownRedis()

    resp = client.get("/api/v1/health")

    assert resp.status_code == 503
    assert resp.get_json() == {
        "status": "degraded",
        "store": "fail",
        "version": "dev",
        "commit": "unknown",
    }
