"""Flask CLI commands for operating on users' session tokens."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from sessionguard.core.extensions import get_session_manager
from sessionguard.services._shared.base import token_ref

LOGGER = logging.getLogger(__name__)


@click.group("sessions")
def sessions_cli() -> None:
    """Inspect and revoke session tokens."""


@sessions_cli.command("list")
@click.argument("user_id")
@with_appcontext
def list_command(user_id: str) -> None:
    """Print the live sessions of USER_ID, most recent first."""
    sessions = get_session_manager().list_active(user_id)
    if not sessions:
        click.echo("  (no live sessions)")
        return
    for s in sessions:
        click.echo(
            f"  {token_ref(s.token_id)}  last_used={s.last_used_at.isoformat()}  "
            f"expires={s.absolute_expiry_at.isoformat()}  device={s.device_info or '-'}  "
            f"ip={s.ip_address or '-'}"
        )


@sessions_cli.command("revoke-all")
@click.argument("user_id")
@with_appcontext
def revoke_all_command(user_id: str) -> None:
    """Sign USER_ID out everywhere (tokens stay detectable for the grace window)."""
    count = get_session_manager().revoke_all(user_id)
    LOGGER.info("cli.revoke_all", extra={"user_id": user_id, "count": count})
    click.echo(f"Revoked {count} session token(s) for {user_id}.")


@sessions_cli.command("purge")
@click.argument("user_id")
@click.confirmation_option(prompt="Hard-delete every session token of this user?")
@with_appcontext
def purge_command(user_id: str) -> None:
    """Hard-delete every session token of USER_ID (account deletion)."""
    count = get_session_manager().delete_all(user_id)
    click.echo(f"Deleted {count} session token(s) for {user_id}.")
