# sessionguard/services/session_tokens/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

DEFAULT_INACTIVITY_EXPIRY_SECONDS = 1_209_600  # 14 days
DEFAULT_ABSOLUTE_EXPIRY_SECONDS = 7_776_000  # 90 days
DEFAULT_MAX_TOKENS_PER_USER = 5
DEFAULT_REUSE_GRACE_SECONDS = 3600


@dataclass(frozen=True, slots=True)
class SessionTokenConfig:
    """
    Session token lifetime and capacity settings.

    :param inactivity_expiry_seconds: Sliding window; an unused token disappears after it.
    :type inactivity_expiry_seconds: int
    :param absolute_expiry_seconds: Ceiling for a whole session family.
    :type absolute_expiry_seconds: int
    :param max_tokens_per_user: Concurrent live sessions allowed per user.
    :type max_tokens_per_user: int
    :param reuse_grace_seconds: Retention of revoked tokens for reuse detection.
    :type reuse_grace_seconds: int
    """

    inactivity_expiry_seconds: int = DEFAULT_INACTIVITY_EXPIRY_SECONDS
    absolute_expiry_seconds: int = DEFAULT_ABSOLUTE_EXPIRY_SECONDS
    max_tokens_per_user: int = DEFAULT_MAX_TOKENS_PER_USER
    reuse_grace_seconds: int = DEFAULT_REUSE_GRACE_SECONDS

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{f.name} must be a positive integer, got {value!r}")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> SessionTokenConfig:
        """
        Build the settings from a Flask-style config mapping.

        Missing keys fall back to the defaults above.
        """
        return cls(
            inactivity_expiry_seconds=int(
                config.get(
                    "SESSION_TOKEN_INACTIVITY_EXPIRY_SECONDS", DEFAULT_INACTIVITY_EXPIRY_SECONDS
                )
            ),
            absolute_expiry_seconds=int(
                config.get("SESSION_TOKEN_ABSOLUTE_EXPIRY_SECONDS", DEFAULT_ABSOLUTE_EXPIRY_SECONDS)
            ),
            max_tokens_per_user=int(
                config.get("SESSION_TOKEN_MAX_PER_USER", DEFAULT_MAX_TOKENS_PER_USER)
            ),
            reuse_grace_seconds=int(
                config.get("SESSION_TOKEN_REUSE_GRACE_SECONDS", DEFAULT_REUSE_GRACE_SECONDS)
            ),
        )
