# sessionguard/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for starting a session after the identity layer verified the user.

    :param user_id: Verified principal identifier.
    :type user_id: str
    :param device_info: Client description (e.g., User-Agent).
    :type device_info: str | None
    :param ip_address: Client address.
    :type ip_address: str | None
    """

    user_id: str
    device_info: str | None = None
    ip_address: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque session token id.
    :type refresh_token: str
    """

    refresh_token: str
    device_info: str | None = None
    ip_address: str | None = None


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Opaque session token id.
    :type refresh_token: str
    :param all_sessions: If True, revoke all sessions of the token owner.
    :type all_sessions: bool
    """

    refresh_token: str
    all_sessions: bool = False


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access token.
    :type access_token: str
    :param refresh_token: Opaque session token id.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


# ------------------------ Config DTO (optional) --------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Access token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    """

    access_expires: timedelta = timedelta(minutes=15)
