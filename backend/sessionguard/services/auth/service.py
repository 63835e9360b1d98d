# sessionguard/services/auth/service.py
from __future__ import annotations

import logging

from sessionguard.services._shared.base import BaseService
from sessionguard.services._shared.ports.token_provider import TokenProvider
from sessionguard.services._shared.ports.token_store import Clock, SessionToken
from sessionguard.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    TokenPairOut,
)
from sessionguard.services.session_tokens.service import SessionTokenManager

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / logout).

    This service pairs a session (refresh) token managed by
    :class:`SessionTokenManager` with a short-lived access token issued by a
    pluggable :class:`TokenProvider`. Identity verification happens before
    :meth:`login` is called.
    """

    def __init__(
        self,
        *,
        sessions: SessionTokenManager,
        token_provider: TokenProvider,
        token_cfg: AuthTokenConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param sessions: Session token manager (rotation + reuse detection).
        :param token_provider: Adapter for issuing access tokens.
        :param token_cfg: Access token expiry configuration.
        """
        super().__init__(clock=clock)
        self.sessions = sessions
        self.tokens = token_provider
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Start a session for an already verified user and issue a token pair.

        :param dto: Login input.
        :returns: Access/Refresh token pair.
        """
        # Register the session FIRST (server state), then issue the access token
        session = self.sessions.create(dto.user_id, dto.device_info, dto.ip_address)
        return self._pair_for(session)

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        :raises SessionTokenError: Any failure of the presented token; the
            client must sign in again.
        """
        successor = self.sessions.rotate(dto.refresh_token, dto.device_info, dto.ip_address)
        return self._pair_for(successor)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the presented refresh token. Optionally revoke all sessions of its owner.

        Unknown tokens are ignored: the client discards its copy either way.
        """
        session = self.sessions.store.get(dto.refresh_token)
        if session is None:
            return
        self.sessions.revoke(session.token_id)
        if dto.all_sessions:
            self.sessions.revoke_all(session.user_id)
        log.info(
            "auth.logout",
            extra={"user_id": session.user_id, "all_sessions": dto.all_sessions},
        )

    def logout_all(self, user_id: str) -> int:
        """Revoke every session of ``user_id``."""
        return self.sessions.revoke_all(user_id)

    def list_sessions(self, user_id: str) -> list[SessionToken]:
        return self.sessions.list_active(user_id)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _pair_for(self, session: SessionToken) -> TokenPairOut:
        access = self.tokens.create_access_token(
            identity=session.user_id,
            expires_delta=self.cfg.access_expires,
        )
        return TokenPairOut(access_token=access, refresh_token=session.token_id)
