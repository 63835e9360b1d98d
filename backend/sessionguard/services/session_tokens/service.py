# sessionguard/services/session_tokens/service.py
from __future__ import annotations

import logging
import secrets
from datetime import timedelta

from sessionguard.services._shared.base import BaseService, token_ref
from sessionguard.services._shared.errors import (
    ConcurrentRotationError,
    RevocationIncompleteError,
    TokenExpiredError,
    TokenNotFoundError,
    TokenReuseDetectedError,
    TokenRevokedError,
)
from sessionguard.services._shared.ports.token_store import Clock, SessionToken, TokenStore
from sessionguard.services.session_tokens.dto import SessionTokenConfig

log = logging.getLogger(__name__)

# Contention retries for a single revocation before giving up.
MAX_REVOKE_ATTEMPTS = 5


class SessionTokenManager(BaseService):
    """
    Refresh-token lifecycle (create / rotate / validate / revoke).

    Every renewal consumes the presented token and chains to a successor that
    inherits the family's absolute ceiling. Presenting a consumed token again
    is treated as theft: all sessions of the owner are revoked.

    The manager keeps no state of its own; all of it lives in the
    :class:`TokenStore`, which may be shared by many processes.
    """

    def __init__(
        self,
        *,
        store: TokenStore,
        config: SessionTokenConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        :param store: TTL-capable store with atomic compare-and-set.
        :param config: Lifetime and capacity settings (defaults if omitted).
        :param clock: Source of "now" (aware UTC).
        """
        super().__init__(clock=clock)
        self.store = store
        self.cfg = config or SessionTokenConfig()

    @staticmethod
    def new_token_id() -> str:
        """256 bits from the OS CSPRNG, URL-safe."""
        return secrets.token_urlsafe(32)

    # ------------------------------------------------------------------ #
    # Create
    # ------------------------------------------------------------------ #

    def create(
        self,
        user_id: str,
        device_info: str | None = None,
        ip_address: str | None = None,
    ) -> SessionToken:
        """
        Start a new session family for ``user_id``.

        The oldest live sessions are revoked first when the user is at the
        configured device limit.

        :returns: The persisted root token of the new family.
        """
        self._enforce_capacity(user_id)

        now = self.now_utc()
        token = SessionToken(
            token_id=self.new_token_id(),
            user_id=user_id,
            created_at=now,
            last_used_at=now,
            absolute_expiry_at=now + timedelta(seconds=self.cfg.absolute_expiry_seconds),
            inactivity_expiry_seconds=self.cfg.inactivity_expiry_seconds,
            device_info=device_info,
            ip_address=ip_address,
        )
        ttl = min(self.cfg.inactivity_expiry_seconds, self.cfg.absolute_expiry_seconds)
        self.store.put(token.token_id, token, ttl)

        log.info(
            "session_token.created",
            extra={"user_id": user_id, "token_ref": token_ref(token.token_id), "ttl": ttl},
        )
        return token

    def _enforce_capacity(self, user_id: str) -> None:
        live = self.list_active(user_id)
        excess = len(live) - self.cfg.max_tokens_per_user + 1
        if excess <= 0:
            return

        oldest_first = sorted(live, key=lambda t: t.last_used_at)
        pending = tuple(
            token_ref(t.token_id)
            for t in oldest_first[:excess]
            if not self._revoke_record(t.token_id)[0]
        )
        if pending:
            # minting now would exceed the device limit
            raise RevocationIncompleteError(user_id, pending)

        log.info(
            "session_token.capacity_revoked",
            extra={"user_id": user_id, "count": excess},
        )

    # ------------------------------------------------------------------ #
    # Rotate
    # ------------------------------------------------------------------ #

    def rotate(
        self,
        token_id: str,
        device_info: str | None = None,
        ip_address: str | None = None,
    ) -> SessionToken:
        """
        Consume ``token_id`` and issue its successor.

        Security
        --------
        - A revoked token triggers **reuse detection**: every token of the
          owner is revoked before the error is raised.
        - The predecessor is revoked with a compare-and-set, so of two
          concurrent rotations of the same token exactly one succeeds.
        - The predecessor is kept for ``reuse_grace_seconds`` as a tripwire.

        :returns: The successor token; the client must discard the old one.
        :raises TokenNotFoundError: Unknown or store-expired token.
        :raises TokenReuseDetectedError: Token already consumed or revoked.
        :raises TokenExpiredError: Absolute ceiling passed.
        :raises ConcurrentRotationError: Lost a race against another rotation.
        """
        existing = self.store.get(token_id)
        if existing is None:
            log.warning("session_token.not_found", extra={"token_ref": token_ref(token_id)})
            raise TokenNotFoundError()

        if existing.revoked:
            log.warning(
                "session_token.reuse_detected",
                extra={"user_id": existing.user_id, "token_ref": token_ref(token_id)},
            )
            self.revoke_all(existing.user_id)
            raise TokenReuseDetectedError(user_id=existing.user_id)

        now = self.now_utc()
        if now >= existing.absolute_expiry_at:
            self.store.delete(token_id)
            log.info(
                "session_token.expired",
                extra={"user_id": existing.user_id, "token_ref": token_ref(token_id)},
            )
            raise TokenExpiredError(user_id=existing.user_id)

        successor = SessionToken(
            token_id=self.new_token_id(),
            user_id=existing.user_id,
            created_at=now,
            last_used_at=now,
            # sliding rotation never extends the family ceiling
            absolute_expiry_at=existing.absolute_expiry_at,
            inactivity_expiry_seconds=existing.inactivity_expiry_seconds,
            device_info=device_info if device_info is not None else existing.device_info,
            ip_address=ip_address if ip_address is not None else existing.ip_address,
        )
        consumed = existing.as_revoked(replaced_by=successor.token_id)

        # a predecessor pointer must always name a stored record
        self.store.put(successor.token_id, successor, max(1, successor.effective_ttl(now)))

        if not self.store.compare_and_set(
            token_id, existing, consumed, self.cfg.reuse_grace_seconds
        ):
            self.store.delete(successor.token_id)
            if self.store.get(token_id) is None:
                raise TokenNotFoundError()
            log.warning(
                "session_token.concurrent_rotation",
                extra={"user_id": existing.user_id, "token_ref": token_ref(token_id)},
            )
            raise ConcurrentRotationError(user_id=existing.user_id)

        log.info(
            "session_token.rotated",
            extra={
                "user_id": successor.user_id,
                "token_ref": token_ref(token_id),
                "successor_ref": token_ref(successor.token_id),
            },
        )
        return successor

    # ------------------------------------------------------------------ #
    # Validate (read-only)
    # ------------------------------------------------------------------ #

    def validate(self, token_id: str) -> SessionToken:
        """
        Check a token without advancing its rotation chain.

        :raises TokenNotFoundError: Unknown or store-expired token.
        :raises TokenRevokedError: Token consumed or revoked.
        :raises TokenExpiredError: Absolute ceiling passed.
        """
        token = self.store.get(token_id)
        if token is None:
            raise TokenNotFoundError()
        if token.revoked:
            raise TokenRevokedError(user_id=token.user_id)
        if self.now_utc() >= token.absolute_expiry_at:
            raise TokenExpiredError(user_id=token.user_id)
        return token

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def revoke(self, token_id: str) -> None:
        """Single-session logout. Idempotent; absent or revoked tokens are left alone."""
        token = self.store.get(token_id)
        if token is None or token.revoked:
            return
        if not self._revoke_record(token_id)[0]:
            raise RevocationIncompleteError(token.user_id, (token_ref(token_id),))
        log.info(
            "session_token.revoked",
            extra={"user_id": token.user_id, "token_ref": token_ref(token_id)},
        )

    def revoke_all(self, user_id: str) -> int:
        """
        Revoke every token of ``user_id`` across all families.

        Already-revoked tokens get their grace window refreshed. Successor
        pointers are followed, so a token minted by a rotation that committed
        after the listing is revoked as well. Store errors propagate to the
        caller, who must retry until this returns.

        :returns: Number of tokens processed.
        :raises RevocationIncompleteError: Contention prevented confirming some tokens.
        """
        seen: set[str] = set()
        pending: list[str] = []
        for token in self.store.list_by_user_id(user_id):
            pending.extend(self._revoke_chain(token.token_id, seen))
        if pending:
            raise RevocationIncompleteError(user_id, tuple(pending))

        log.info("session_token.revoked_all", extra={"user_id": user_id, "count": len(seen)})
        return len(seen)

    def _revoke_chain(self, token_id: str, seen: set[str]) -> list[str]:
        """
        Revoke ``token_id`` and every successor chained after it.

        :returns: References of tokens whose revocation could not be confirmed.
        """
        pending: list[str] = []
        next_id: str | None = token_id
        while next_id is not None and next_id not in seen:
            seen.add(next_id)
            done, successor_id = self._revoke_record(next_id, refresh_revoked=True)
            if not done:
                pending.append(token_ref(next_id))
            next_id = successor_id
        return pending

    def _revoke_record(
        self, token_id: str, *, refresh_revoked: bool = False
    ) -> tuple[bool, str | None]:
        """
        Mark one token revoked with the grace TTL using compare-and-set.

        A concurrent rotation's successor pointer is preserved because the
        write is always derived from the value currently stored.

        :returns: ``(done, successor_id)``. ``done`` is ``True`` once the token
            is revoked or gone and ``False`` if contention persisted;
            ``successor_id`` is the last successor pointer seen.
        """
        successor_id: str | None = None
        for _ in range(MAX_REVOKE_ATTEMPTS):
            current = self.store.get(token_id)
            if current is None:
                return True, successor_id
            successor_id = current.replaced_by_token_id
            if current.revoked and not refresh_revoked:
                return True, successor_id
            if self.store.compare_and_set(
                token_id, current, current.as_revoked(), self.cfg.reuse_grace_seconds
            ):
                return True, successor_id
        return False, successor_id

    # ------------------------------------------------------------------ #
    # Listing / hard delete
    # ------------------------------------------------------------------ #

    def list_active(self, user_id: str) -> list[SessionToken]:
        """Live sessions of ``user_id``, most recently used first."""
        now = self.now_utc()
        live = [t for t in self.store.list_by_user_id(user_id) if t.is_valid(now)]
        return sorted(live, key=lambda t: t.last_used_at, reverse=True)

    def delete_all(self, user_id: str) -> int:
        """
        Hard-delete every token of ``user_id`` (account deletion).

        :returns: Number of records removed.
        """
        tokens = self.store.list_by_user_id(user_id)
        for token in tokens:
            self.store.delete(token.token_id)
        log.info("session_token.deleted_all", extra={"user_id": user_id, "count": len(tokens)})
        return len(tokens)
