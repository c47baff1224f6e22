# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/managefy/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (no-op for tables that already exist).
# - python -m flask system seed
#   Insert the demo businesses, users, catalog and sales. Refuses to run
#   when any user or business already exists.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection:
# - python -m flask users list
#   List all users with their validation flag and memberships.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User, UserRole
from .services import seed_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('seed')
@with_appcontext
def seed():
    """Insert the demo fixture into an empty database."""
    db.create_all()
    if seed_service.seed_demo_data():
        click.echo("PASS Demo data inserted.")
    else:
        click.echo("SKIP Database already has users or businesses; nothing inserted.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system seed' to load demo data.")


@click.group('users')
def users_group():
    """User inspection commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their memberships."""
    users = db.session.query(User).order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<5} {'Email':<35} {'Name':<25} {'Validated':<10} {'Roles'}")
    click.echo("="*100)

    for user in users:
        user_roles = db.session.query(UserRole).filter_by(user_id=user.id).all()
        roles_str = ", ".join(f"{ur.business_id}:{ur.role}" for ur in user_roles) or "none"
        validated_str = "Yes" if user.validated else "No"

        click.echo(f"{user.id:<5} {user.email:<35} {user.name:<25} {validated_str:<10} {roles_str}")

    click.echo("="*100 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
