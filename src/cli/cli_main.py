import traceback
from typing import Optional, Tuple

import click

from src.utils.config_access import load_access_config
from src.utils.env import read_secret
from src.utils.logging import get_logger, setup_cli_logging, setup_logging
from src.utils.rbac.errors import RBACError
from src.utils.rbac.jwt_parser import issue_session_token
from src.utils.rbac.permissions import has_capability
from src.utils.rbac.registry import RoleRegistry, get_registry, load_rbac_config
from src.utils.rbac.users import User


def _load_registry(roles_file: Optional[str]) -> RoleRegistry:
    if roles_file:
        return RoleRegistry(load_rbac_config(roles_file))
    return get_registry()


@click.group()
def cli():
    pass

@click.command()
@click.option('--department', '-d', type=str, default=None, help="Only list roles tagged with this department code")
@click.option('--roles-file', '-r', type=str, default=None, help="Path to a roles YAML file (defaults to the configured table)")
@click.option('--verbosity', '-v', type=int, default=3, help="Logging verbosity level (0-4)")
def roles(department: Optional[str], roles_file: Optional[str], verbosity: int):
    """List the registered roles."""
    setup_cli_logging(verbosity=verbosity)

    try:
        registry = _load_registry(roles_file)
    except RBACError as e:
        raise click.ClickException(e.message)

    if department is not None:
        entries = registry.list_roles_by_department(department)
        label = registry.departments.label(department)
        if not entries:
            click.echo(f"No roles found for department '{label}'")
            return
        click.echo(f"Roles in {label}:")
        for entry in entries:
            click.echo(f"  {entry['key']:22} {entry['displayName']:28} {entry['level']}")
        return

    click.echo("Registered roles:")
    for entry in registry.list_all_roles():
        click.echo(f"  {entry['key']:22} {entry['displayName']:28} {entry['level']:18} {entry['departmentLabel']}")

@click.command()
@click.argument('role')
@click.argument('capability')
@click.option('--custom', '-c', 'custom', type=str, multiple=True, help="Custom permission overriding the role set (repeatable)")
@click.option('--roles-file', '-r', type=str, default=None, help="Path to a roles YAML file")
@click.option('--verbosity', '-v', type=int, default=2, help="Logging verbosity level (0-4)")
def check(role: str, capability: str, custom: Tuple[str, ...], roles_file: Optional[str], verbosity: int):
    """Check whether ROLE (optionally with custom permissions) grants CAPABILITY."""
    setup_cli_logging(verbosity=verbosity)

    try:
        registry = _load_registry(roles_file)
    except RBACError as e:
        raise click.ClickException(e.message)

    user = User(id="cli", role=role, custom_permissions=tuple(custom))
    if has_capability(user, capability, registry):
        click.echo(f"GRANTED: {capability}")
        return
    click.echo(f"DENIED: {capability}")
    raise SystemExit(1)

@click.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--verbosity', '-v', type=int, default=2, help="Logging verbosity level (0-4)")
def validate_config(path: str, verbosity: int):
    """Validate a roles YAML file."""
    setup_cli_logging(verbosity=verbosity)

    try:
        registry = RoleRegistry(load_rbac_config(path))
    except RBACError as e:
        raise click.ClickException(f"Invalid roles configuration: {e.message}")

    click.echo(f"OK: {len(registry)} roles, {len(registry.departments)} departments")

@click.command()
@click.option('--user-id', '-u', type=str, required=True, help="User id to embed in the token")
@click.option('--role', type=str, required=True, help="Role claim (informational; the API re-reads the stored user)")
@click.option('--email', '-e', type=str, default="", help="Email claim")
@click.option('--expires', type=str, default=None, help="Lifetime such as 3600, 30m, 12h or 7d (defaults to jwt_expire)")
@click.option('--verbosity', '-v', type=int, default=2, help="Logging verbosity level (0-4)")
def token(user_id: str, role: str, email: str, expires: Optional[str], verbosity: int):
    """Mint a development session token signed with JWT_SECRET."""
    setup_cli_logging(verbosity=verbosity)

    secret = read_secret("JWT_SECRET")
    if not secret:
        raise click.ClickException("JWT_SECRET is not set (set JWT_SECRET or JWT_SECRET_FILE)")

    try:
        expires_in = expires or load_access_config()["jwt_expire"]
        encoded = issue_session_token(User(id=user_id, email=email, role=role), secret, expires_in=expires_in)
    except (RBACError, ValueError) as e:
        raise click.ClickException(str(e))

    click.echo(encoded)

@click.command()
@click.option('--config', '-c', 'config_file', type=str, default=None, help="Path to access.yaml")
@click.option('--verbosity', '-v', type=int, default=3, help="Logging verbosity level (0-4)")
def serve(config_file: Optional[str], verbosity: int):
    """Run the access API."""
    from src.interfaces.access_api.app import create_app

    try:
        config = load_access_config(config_file)
        setup_logging(config.get("log_level"))
        logger = get_logger(__name__)

        app = create_app(config=config)
        logger.info(f"Starting access API on {config['host']}:{config['port']}")
        app.run(host=config["host"], port=config["port"])
    except RBACError as e:
        if verbosity >= 4:
            traceback.print_exc()
        raise click.ClickException(e.message)


def main():
    """
    Entrypoint for tikidan-access cli tool implemented using Click.
    """
    cli()


cli.add_command(roles)
cli.add_command(check)
cli.add_command(validate_config)
cli.add_command(token)
cli.add_command(serve)
