"""Command-line interface for RoleStore.

This module provides the CLI commands for initializing the database and
inspecting or removing roles.
"""

import asyncio
from typing import Any, Awaitable, Callable, NoReturn

import click

from rolestore.core.config import get_settings
from rolestore.core.logging import configure_logging, get_logger
from rolestore.domain.entities import SearchFilter
from rolestore.domain.entities import search_filter as fp
from rolestore.domain.exceptions import RoleStoreError
from rolestore.domain.services import RoleStore
from rolestore.infrastructure.persistence.database import get_db_manager, init_database
from rolestore.infrastructure.persistence.unit_of_work import UnitOfWork


def _run_with_store(operation: Callable[[RoleStore], Awaitable[Any]]) -> Any:
    """Run an operation against a RoleStore in a single unit of work.

    Role store errors are reported on stderr and exit with status 1.
    """

    async def run() -> Any:
        db = get_db_manager()
        try:
            async with UnitOfWork(db.session_factory) as uow:
                return await operation(RoleStore(uow))
        finally:
            await db.disconnect()

    try:
        return asyncio.run(run())
    except RoleStoreError as e:
        click.echo(f"ERROR: {e.message}", err=True)
        raise SystemExit(1)


@click.group()
@click.version_option(version="0.1.0", prog_name="RoleStore")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides ROLESTORE_LOG_LEVEL)",
)
def cli(log_level: str | None) -> None:
    """RoleStore - role management with versioned snapshots."""
    settings = get_settings()
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def init_db(force: bool) -> None:
    """Initialize the database.

    Creates any missing database tables. Production requires --force.
    """
    settings = get_settings()

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Pass --force to create tables.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize() -> None:
        try:
            await init_database()
            click.echo("Database initialized successfully.")
        finally:
            await get_db_manager().disconnect()

    asyncio.run(initialize())


@cli.command("list-roles")
@click.option(
    "--name-contains",
    default=None,
    help="Only list roles whose name contains this text (case-insensitive)",
)
def list_roles(name_contains: str | None) -> None:
    """List roles with their members."""
    params = {fp.ROLE_NAME_PARTIAL: name_contains} if name_contains else {}
    roles = _run_with_store(lambda store: store.get_roles(SearchFilter(params=params)))

    if not roles:
        click.echo("No roles found.")
        return
    for role in roles:
        click.echo(
            f"{role.id}\t{role.name}\t"
            f"users={len(role.users)} groups={len(role.groups)} roles={len(role.roles)}"
        )


@cli.command("show-role")
@click.argument("name")
def show_role(name: str) -> None:
    """Show one role by name."""
    role = _run_with_store(lambda store: store.get_role_by_name(name))

    click.echo(f"""
Role: {role.name} (id {role.id})
{'=' * 40}
Description:    {role.description or '-'}
Created by:     {role.created_by or '-'}
Updated by:     {role.updated_by or '-'}
Policy version: {role.policy_version}
Role version:   {role.role_version}
""")
    for member in role.members:
        admin = " (admin)" if member.is_admin else ""
        click.echo(f"  {member.kind.value:<6} {member.name}{admin}")


@cli.command("delete-role")
@click.argument("name")
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def delete_role(name: str, force: bool) -> None:
    """Delete a role that nothing references."""
    if not force:
        click.confirm(f"Delete role '{name}'?", abort=True, default=False)

    _run_with_store(lambda store: store.delete_role_by_name(name))
    get_logger(__name__).info("Role deleted from CLI", role_name=name)
    click.echo(f"Role '{name}' deleted.")


@cli.command("role-version")
@click.option(
    "--service",
    default=None,
    help="Service name (used when roles are versioned per service)",
)
def role_version(service: str | None) -> None:
    """Print the current role version."""
    version = _run_with_store(lambda store: store.get_role_version(service))
    click.echo("uninitialized" if version is None else str(version))


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `rolestore` command is run
    or when using `python -m rolestore`.
    """
    cli()


if __name__ == "__main__":
    main()
