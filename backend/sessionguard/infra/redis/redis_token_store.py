# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

import redis  # type: ignore[import-untyped]

from sessionguard.services._shared.ports import SessionToken, TokenStore

# Hash fields that may be absent (stored only when not None)
_OPTIONAL_FIELDS = ("replaced_by_token_id", "device_info", "ip_address")


def _s(value: Any, default: str = "") -> str:
    """Decode a Redis reply (bytes or str) into ``str``."""
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisTokenStore(TokenStore):
    """
    Redis-backed session token store.

    Each token is one hash ``st:{token_id}`` carrying its own TTL; a set
    ``st:u:{user_id}`` indexes token ids per owner. Compare-and-set uses
    WATCH/MULTI/EXEC (optimistic locking).

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token_id: str) -> str:
        return f"st:{token_id}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"st:u:{user_id}"

    @staticmethod
    def to_mapping(token: SessionToken) -> dict[str, str]:
        mapping = {
            "token_id": token.token_id,
            "user_id": token.user_id,
            "created_at": token.created_at.isoformat(),
            "last_used_at": token.last_used_at.isoformat(),
            "absolute_expiry_at": token.absolute_expiry_at.isoformat(),
            "inactivity_expiry_seconds": str(token.inactivity_expiry_seconds),
            "revoked": "1" if token.revoked else "0",
        }
        for name in _OPTIONAL_FIELDS:
            value = getattr(token, name)
            if value is not None:
                mapping[name] = value
        return mapping

    @staticmethod
    def from_mapping(h: dict[Any, Any]) -> SessionToken | None:
        if not h:
            return None
        data = {_s(k): _s(v) for k, v in h.items()}
        return SessionToken(
            token_id=data["token_id"],
            user_id=data["user_id"],
            created_at=datetime.fromisoformat(data["created_at"]),
            last_used_at=datetime.fromisoformat(data["last_used_at"]),
            absolute_expiry_at=datetime.fromisoformat(data["absolute_expiry_at"]),
            inactivity_expiry_seconds=int(data["inactivity_expiry_seconds"]),
            revoked=data.get("revoked", "0") == "1",
            replaced_by_token_id=data.get("replaced_by_token_id"),
            device_info=data.get("device_info"),
            ip_address=data.get("ip_address"),
        )

    def _queue_write(self, p: Any, key: str, value: SessionToken, ttl_seconds: int) -> None:
        """Queue the commands that (re)write one token on pipeline ``p``."""
        k = self._k(key)
        # replace the whole hash so cleared optional fields do not linger
        p.delete(k)
        p.hset(k, mapping=self.to_mapping(value))
        p.expire(k, max(1, int(ttl_seconds)))
        p.sadd(self._ku(value.user_id), key)

    # -------------------- API ------------------------

    def put(self, key: str, value: SessionToken, ttl_seconds: int) -> None:
        pipe = self.r.pipeline(transaction=True)
        self._queue_write(pipe, key, value, ttl_seconds)
        pipe.execute()

    def get(self, key: str) -> SessionToken | None:
        return self.from_mapping(self.r.hgetall(self._k(key)))

    def compare_and_set(
        self,
        key: str,
        expected: SessionToken,
        new: SessionToken,
        ttl_seconds: int,
    ) -> bool:
        """
        Atomically replace ``expected`` with ``new``.

        Any concurrent write to the key between WATCH and EXEC aborts the
        transaction and reports failure; the caller decides whether to retry.
        """
        k = self._k(key)
        with self.r.pipeline() as p:
            try:
                p.watch(k)
                # immediate-mode read on the watched connection
                current = self.from_mapping(p.hgetall(k))
                if current is None or current != expected:
                    p.unwatch()
                    return False

                p.multi()
                self._queue_write(p, key, new, ttl_seconds)
                p.execute()
                return True
            except redis.WatchError:
                # Concurrent modification detected
                return False

    def delete(self, key: str) -> None:
        k = self._k(key)
        uid = self.r.hget(k, "user_id")
        with self.r.pipeline(transaction=True) as p:
            p.delete(k)
            if uid:
                p.srem(self._ku(_s(uid)), key)
            p.execute()

    def list_by_user_id(self, user_id: str) -> list[SessionToken]:
        key_u = self._ku(user_id)
        # Normalize bytes -> str and sort for determinism
        members = sorted(_s(j) for j in self.r.smembers(key_u))

        found: list[SessionToken] = []
        stale: list[str] = []
        for j in members:
            v = self.get(j)
            if v:
                found.append(v)
            else:
                # Underlying hash missing (expired/deleted) -> mark for cleanup
                stale.append(j)

        if stale:
            # Remove all stale entries from the user's index in one call
            self.r.srem(key_u, *stale)
        return found

    def ping(self) -> bool:
        return bool(self.r.ping())
