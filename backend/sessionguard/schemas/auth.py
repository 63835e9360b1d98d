"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from sessionguard.services._shared.base import token_ref
from sessionguard.services._shared.ports import SessionToken


class RefreshSchema(Schema):
    """Input payload for rotating a refresh token."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1, max=256))


class LogoutSchema(Schema):
    """Input payload for revoking a refresh token."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1, max=256))
    all_sessions = fields.Boolean(load_default=False)


class TokenPairSchema(Schema):
    """Response payload containing an access/refresh token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")


class SessionSchema(Schema):
    """Public view of a live session (the token id itself is never exposed)."""

    ref = fields.Method("get_ref")
    created_at = fields.DateTime(required=True)
    last_used_at = fields.DateTime(required=True)
    absolute_expiry_at = fields.DateTime(required=True)
    device_info = fields.String(allow_none=True)
    ip_address = fields.String(allow_none=True)

    def get_ref(self, obj: SessionToken) -> str:
        return token_ref(obj.token_id)
