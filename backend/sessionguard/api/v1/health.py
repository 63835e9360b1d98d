"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from sessionguard.api.deps import json_response, timing

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application and token store health information."""

    client = current_app.extensions.get("redis_client")
    if client is None:
        store_status = "memory"
    else:
        store_status = "ok"
        try:
            client.ping()
        except RedisError:
            current_app.logger.exception("healthcheck.store_error")
            store_status = "fail"
    version = current_app.config.get("APP_VERSION", "dev")
    commit = current_app.config.get("APP_COMMIT", "unknown")
    status = 503 if store_status == "fail" else 200
    payload = {
        "status": "ok" if status == 200 else "degraded",
        "store": store_status,
        "version": version,
        "commit": commit,
    }
    return json_response(payload, status=status)
