# Overview: Flask CLI command groups for bootstrap, user accounts and file maintenance.

# backend/sentra/cli.py
# Commands Legend (run from the backend directory):
# - python -m flask --app sentra system init
#   Create tables (if missing) and seed the sample add-on services.
# - python -m flask --app sentra system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask --app sentra users create --name "Jane" --email jane@example.com --role Team
#   Create a user (prompts for the password).
# - python -m flask --app sentra users list
#
# File maintenance (also reachable through POST /api/run-script):
# - python -m flask --app sentra files fix-all           (quick-fix-files)
# - python -m flask --app sentra files fix-acl-detailed  (fix-existing-files-acl)
# - python -m flask --app sentra files setup-acl         (setup-automatic-acl)
# The fix commands end with "Fixed: N", "Failed: N" and "Total files: N"
# lines that the script runner parses.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .models.auth import USER_ROLES
from .services import addon_service, storage_service
from .services.auth_service import create_user
from .services.storage_service import StorageNotConfiguredError, StorageError
from .validation import SentraError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Idempotent bootstrap: create tables and seed the add-on catalogue."""
    db.create_all()
    added = addon_service.seed_sample_services()
    click.echo(f"PASS Tables ready; {added} add-on service(s) seeded")


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

    click.echo("PASS Database reset complete. Run 'python -m flask --app sentra system init' to seed.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(USER_ROLES), prompt=True, help='Role')
@click.option('--client-id', type=int, help='Client ID (required for client roles)')
@with_appcontext
def create_user_cli(name, email, password, role, client_id):
    """Create a user with a bcrypt-hashed password."""
    try:
        user = create_user({
            "name": name,
            "email": email,
            "password": password,
            "role": role,
            "client_id": client_id,
        })
    except SentraError as e:
        raise click.ClickException(f"Failed to create user: {e}")
    click.echo(f"PASS Created user: {user.name} ({user.email}) with role '{user.role}'")


@users_group.command('list')
@with_appcontext
def list_users_cli():
    """List all users with role and status."""
    users = db.session.query(User).order_by(User.email).all()
    if not users:
        click.echo("No users found")
        return
    for user in users:
        scope = f" client={user.client_id}" if user.client_id else ""
        click.echo(f"{user.email:<40} {user.role:<14} {user.status}{scope}")


@click.group('files')
def files_group():
    """Object storage maintenance commands."""


def _fix_all(verbose: bool):
    try:
        result = storage_service.fix_all_files()
    except (StorageNotConfiguredError, StorageError) as e:
        raise click.ClickException(str(e))
    if verbose:
        click.echo(result["message"])
    click.echo(f"Fixed: {result['fixedCount']}")
    click.echo(f"Failed: {result['failedCount']}")
    click.echo(f"Total files: {result['totalFiles']}")


@files_group.command('fix-all')
@with_appcontext
def fix_all_cli():
    """Set public-read on every object in the bucket."""
    _fix_all(verbose=False)


@files_group.command('fix-acl-detailed')
@with_appcontext
def fix_acl_detailed_cli():
    """Same as fix-all, listing every key before fixing."""
    try:
        for key in storage_service.list_object_keys():
            click.echo(f"  {key}")
    except (StorageNotConfiguredError, StorageError) as e:
        raise click.ClickException(str(e))
    _fix_all(verbose=True)


@files_group.command('setup-acl')
@with_appcontext
def setup_acl_cli():
    """Check that newly uploaded objects come out publicly readable."""
    try:
        result = storage_service.setup_public_access()
    except (StorageNotConfiguredError, StorageError) as e:
        raise click.ClickException(str(e))
    click.echo(f"Public URL: {result['publicUrl']}")
    if result["aclReapplied"]:
        click.echo("WARN ACL had to be re-applied on the check object")
    if not result["success"]:
        raise click.ClickException("Check object is not publicly readable; check the bucket policy")
    click.echo("PASS Uploaded objects are publicly readable")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(files_group)
