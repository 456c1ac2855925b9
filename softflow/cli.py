# softflow/cli.py
# Commands (run with FLASK_APP=softflow):
# - flask users create-admin --username admin --password "..." [--email admin@softflow.tech]
#   Create the admin account, or promote/unblock it if it exists.
# - flask users list
# - flask maintenance purge-sessions
#   Delete expired rows from the sessions table.

import click
from flask.cli import with_appcontext

from .models import User
from .services.accounts import ensure_admin
from .services.sessions import purge_expired


@click.group('users')
def users_group():
    """User account commands."""


@users_group.command('create-admin')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--email', default=None)
@with_appcontext
def create_admin_cli(username, password, email):
    user, created = ensure_admin(username, password, email=email)
    if created:
        click.echo(f"Created admin {user.username} (id={user.id}).")
    else:
        click.echo(f"Admin {user.username} already exists (id={user.id}); ensured admin + unblocked.")


@users_group.command('list')
@with_appcontext
def list_users_cli():
    users = User.query.order_by(User.id.asc()).all()
    if not users:
        click.echo("No users.")
        return
    for user in users:
        flags = []
        if user.is_admin:
            flags.append("admin")
        if user.is_verified:
            flags.append("verified")
        if user.is_blocked:
            flags.append("blocked")
        click.echo(f"{user.id:>5}  {user.username:<30} {user.email or '-':<35} {','.join(flags)}")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('purge-sessions')
@with_appcontext
def purge_sessions_cli():
    """Delete expired login sessions."""
    removed = purge_expired()
    click.echo(f"Deleted {removed} expired sessions.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
