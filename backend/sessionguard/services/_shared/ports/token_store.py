from __future__ import annotations

import math
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from typing import Protocol

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class SessionToken:
    """
    Server-side record of one refresh credential.

    :ivar token_id: Opaque random identifier; store key and client-facing value.
    :ivar user_id: Owning principal.
    :ivar created_at: Mint instant (UTC).
    :ivar last_used_at: Instant of the rotation that produced this token.
    :ivar absolute_expiry_at: Family-wide ceiling, inherited unchanged on rotation.
    :ivar inactivity_expiry_seconds: Sliding window length, copied on rotation.
    :ivar revoked: Monotonic flag; never reverts to ``False``.
    :ivar replaced_by_token_id: Successor id, set when consumed by a rotation.
    :ivar device_info: Advisory client description.
    :ivar ip_address: Advisory client address.
    """

    token_id: str
    user_id: str
    created_at: datetime
    last_used_at: datetime
    absolute_expiry_at: datetime
    inactivity_expiry_seconds: int
    revoked: bool = False
    replaced_by_token_id: str | None = None
    device_info: str | None = None
    ip_address: str | None = None

    def is_valid(self, now: datetime) -> bool:
        """A token is valid iff it is not revoked and the absolute ceiling is ahead."""
        return not self.revoked and now < self.absolute_expiry_at

    def seconds_until_absolute_expiry(self, now: datetime) -> int:
        remaining = (self.absolute_expiry_at - now).total_seconds()
        return max(0, math.floor(remaining))

    def effective_ttl(self, now: datetime) -> int:
        """Seconds the store should keep the record: the tighter of both windows."""
        return min(self.inactivity_expiry_seconds, self.seconds_until_absolute_expiry(now))

    def as_revoked(self, *, replaced_by: str | None = None) -> SessionToken:
        """Return a revoked copy, keeping an existing successor pointer unless one is given."""
        return replace(
            self,
            revoked=True,
            replaced_by_token_id=replaced_by or self.replaced_by_token_id,
        )


class TokenStore(Protocol):
    """
    TTL-capable key-value store for session tokens.

    Keys are token ids. A key whose TTL elapsed behaves exactly like an absent
    key. ``put`` and a successful ``compare_and_set`` set the key's TTL to the
    supplied value (at least one second).
    """

    def put(self, key: str, value: SessionToken, ttl_seconds: int) -> None:
        """Upsert ``value`` under ``key`` with the given expiry."""

    def get(self, key: str) -> SessionToken | None:
        """Fetch a record, or ``None`` when absent or expired."""

    def compare_and_set(
        self,
        key: str,
        expected: SessionToken,
        new: SessionToken,
        ttl_seconds: int,
    ) -> bool:
        """
        Atomically replace ``expected`` with ``new``.

        :returns: ``True`` only if the stored value equalled ``expected`` at write time.
        """

    def delete(self, key: str) -> None:
        """Remove a record (no-op when absent)."""

    def list_by_user_id(self, user_id: str) -> list[SessionToken]:
        """Return every unexpired record owned by ``user_id`` (revoked ones included)."""


class InMemoryTokenStore(TokenStore):
    """
    Process-local token store with TTL and compare-and-set semantics.

    .. note::
       Uses a threading lock to emulate a single-node store's atomicity.
       Expiry is evaluated against the injected clock, so tests can move time.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now
        self._by_key: dict[str, tuple[SessionToken, datetime]] = {}
        self._by_user: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    # ------------------------- helpers -------------------------

    def _live(self, key: str) -> SessionToken | None:
        entry = self._by_key.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            self._drop(key, value.user_id)
            return None
        return value

    def _drop(self, key: str, user_id: str) -> None:
        self._by_key.pop(key, None)
        keys = self._by_user.get(user_id)
        if keys is not None:
            keys.discard(key)
            if not keys:
                del self._by_user[user_id]

    def _write(self, key: str, value: SessionToken, ttl_seconds: int) -> None:
        expires_at = self._clock() + timedelta(seconds=max(1, int(ttl_seconds)))
        self._by_key[key] = (value, expires_at)
        self._by_user.setdefault(value.user_id, set()).add(key)

    # -------------------------- API ----------------------------

    def put(self, key: str, value: SessionToken, ttl_seconds: int) -> None:
        with self._lock:
            self._write(key, value, ttl_seconds)

    def get(self, key: str) -> SessionToken | None:
        with self._lock:
            return self._live(key)

    def compare_and_set(
        self,
        key: str,
        expected: SessionToken,
        new: SessionToken,
        ttl_seconds: int,
    ) -> bool:
        with self._lock:
            current = self._live(key)
            if current is None or current != expected:
                return False
            self._write(key, new, ttl_seconds)
            return True

    def delete(self, key: str) -> None:
        with self._lock:
            entry = self._by_key.get(key)
            if entry is not None:
                self._drop(key, entry[0].user_id)

    def list_by_user_id(self, user_id: str) -> list[SessionToken]:
        with self._lock:
            keys = sorted(self._by_user.get(user_id, set()))
            found = [self._live(k) for k in keys]
            return [v for v in found if v is not None]

    def ttl(self, key: str) -> int | None:
        """Remaining seconds before ``key`` expires (test/ops helper)."""
        with self._lock:
            entry = self._by_key.get(key)
            if entry is None or self._live(key) is None:
                return None
            return max(0, math.ceil((entry[1] - self._clock()).total_seconds()))
