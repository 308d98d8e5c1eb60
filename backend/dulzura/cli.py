# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/dulzura/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create any missing tables (use `flask db upgrade` for migrations-managed databases).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users create-admin --email admin@dulzura.local --nombre Admin --password "secret1"
#   Create an admin account, or promote an existing user.
# - python -m flask users list
#
# Maintenance (cron-friendly):
# - python -m flask auth sweep-tokens
#   Delete expired refresh tokens.
# - python -m flask photos prune-orphans
#   Delete photo files with no database row (local storage only).

import sys

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .errors import AppError
from .services import auth_service
from .services.photo_service import get_photo_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask users create-admin' next.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create-admin')
@click.option('--email', prompt=True, help='Email address')
@click.option('--nombre', prompt=True, help='Display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_admin_cli(email, nombre, password):
    """
    Create an admin account.

    If the email already exists the user is promoted to admin and reactivated;
    its password is not changed.
    """
    if len(password) < 6:
        click.echo("FAIL Password must be at least 6 characters")
        sys.exit(1)

    try:
        user, created = auth_service.create_admin(email.strip(), password, nombre.strip())
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"FAIL Failed to create admin: {e}")
        sys.exit(1)

    if created:
        click.echo(f"PASS Created admin: {user.email} (ID: {user.id})")
        click.echo("SECURITY Password securely hashed with bcrypt")
    else:
        click.echo(f"PASS Promoted existing user to admin: {user.email} (ID: {user.id})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role."""
    users = auth_service.list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Email':<35} {'Nombre':<20} {'Rol':<10} {'Active'}")
    click.echo("="*80)

    for user in users:
        active_str = "Yes" if user.activo else "No"
        click.echo(f"{user.id:<5} {user.email:<35} {user.nombre:<20} {user.rol:<10} {active_str}")

    click.echo("="*80 + "\n")


@click.group('auth')
def auth_group():
    """Token maintenance commands."""


@auth_group.command('sweep-tokens')
@with_appcontext
def sweep_tokens():
    """Delete refresh tokens past their expiry."""
    deleted = auth_service.sweep_expired_tokens()
    current_app.logger.info("Swept %d expired refresh tokens", deleted)
    click.echo(f"PASS Deleted {deleted} expired refresh tokens")


@click.group('photos')
def photos_group():
    """Photo storage maintenance commands."""


@photos_group.command('prune-orphans')
@with_appcontext
def prune_orphans():
    """Delete stored photo files that no database row references."""
    try:
        result = get_photo_service().prune_orphans()
    except AppError as e:
        click.echo(f"FAIL {e.message}")
        sys.exit(1)

    click.echo(f"PASS {result['message']}")


@photos_group.command('stats')
@with_appcontext
def photo_stats():
    """Print gallery size statistics."""
    for key, value in get_photo_service().statistics().items():
        click.echo(f"{key:<25} {value}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(auth_group)
    app.cli.add_command(photos_group)
