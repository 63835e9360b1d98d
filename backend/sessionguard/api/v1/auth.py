"""Session endpoints: refresh rotation, logout and session listing."""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import get_jwt_identity

from sessionguard.api.deps import client_context, json_response, no_content, require_auth, timing
from sessionguard.core.extensions import get_auth_service
from sessionguard.schemas import LogoutSchema, RefreshSchema, SessionSchema, TokenPairSchema
from sessionguard.services.auth import LogoutIn, RefreshIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
token_schema = TokenPairSchema()
sessions_schema = SessionSchema(many=True)


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the presented refresh token and return a new token pair.

    Any token failure answers ``401`` with a stable ``code``; the client must
    sign in again and never retry with the same refresh token.
    """

    data = refresh_schema.load(request.get_json(silent=True) or {})
    client = client_context()
    pair = get_auth_service().refresh(
        RefreshIn(
            refresh_token=data["refresh_token"],
            device_info=client.device_info,
            ip_address=client.ip_address,
        )
    )
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@timing
def logout():
    """Revoke the presented refresh token (optionally every session of its owner)."""

    data = logout_schema.load(request.get_json(silent=True) or {})
    get_auth_service().logout(
        LogoutIn(refresh_token=data["refresh_token"], all_sessions=data["all_sessions"])
    )
    return no_content()


@bp.post("/logout-all")
@require_auth
@timing
def logout_all():
    """Revoke every session of the authenticated user."""

    get_auth_service().logout_all(str(get_jwt_identity()))
    return no_content()


@bp.get("/sessions")
@require_auth
@timing
def list_sessions():
    """List the authenticated user's live sessions, most recent first."""

    sessions = get_auth_service().list_sessions(str(get_jwt_identity()))
    return json_response({"data": sessions_schema.dump(sessions)})
