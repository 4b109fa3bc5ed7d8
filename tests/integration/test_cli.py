"""Integration tests for the rolestore CLI against a file-backed SQLite database."""

import asyncio

import pytest
import structlog
from click.testing import CliRunner

from rolestore.cli import cli
from rolestore.core.config import get_settings
from rolestore.domain.entities import Role, RoleMember
from rolestore.domain.services import RoleStore
from rolestore.infrastructure.persistence import database
from rolestore.infrastructure.persistence.models import PolicyRoleRefModel, ServiceModel
from rolestore.infrastructure.persistence.repositories import ServiceRepository
from rolestore.infrastructure.persistence.unit_of_work import UnitOfWork


@pytest.fixture
def cli_db(tmp_path, monkeypatch):
    """Point the CLI at a fresh database and create its tables."""
    monkeypatch.setenv("ROLESTORE_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/cli.db")
    monkeypatch.setenv("ROLESTORE_ENVIRONMENT", "testing")
    monkeypatch.setenv("ROLESTORE_LOG_LEVEL", "WARNING")
    # uncached loggers, so none keeps a handle on a CliRunner stream
    monkeypatch.setenv("ROLESTORE_LOG_FORMAT", "console")
    get_settings.cache_clear()
    monkeypatch.setattr(database, "_db_manager", None)

    result = CliRunner().invoke(cli, ["init-db", "--force"])
    assert result.exit_code == 0, result.output
    assert "Database initialized successfully." in result.output

    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


def seed_roles():
    async def seed():
        db = database.get_db_manager()
        try:
            async with db.session_factory() as session:
                service = await ServiceRepository(session).create(
                    ServiceModel(name="hive1", type="hive")
                )
                session.add(
                    PolicyRoleRefModel(
                        policy_id=1,
                        policy_name="hive-etl",
                        service_id=service.id,
                        role_name="etl-writers",
                    )
                )
                await session.commit()
            async with UnitOfWork(db.session_factory) as uow:
                store = RoleStore(uow)
                await store.create_role(
                    Role(
                        name="etl-writers",
                        description="ETL writers",
                        members=[RoleMember.user("alice", is_admin=True)],
                    ),
                    create_missing_principals=True,
                )
                await store.create_role(Role(name="auditors"))
        finally:
            await db.disconnect()

    asyncio.run(seed())


def test_role_version_uninitialized(cli_db):
    result = CliRunner().invoke(cli, ["role-version"])

    assert result.exit_code == 0
    assert "uninitialized" in result.output


def test_list_and_show_roles(cli_db):
    seed_roles()
    runner = CliRunner()

    listed = runner.invoke(cli, ["list-roles"])
    assert listed.exit_code == 0
    assert "etl-writers" in listed.output
    assert "auditors" in listed.output

    filtered = runner.invoke(cli, ["list-roles", "--name-contains", "ETL"])
    assert "etl-writers" in filtered.output
    assert "auditors" not in filtered.output

    shown = runner.invoke(cli, ["show-role", "etl-writers"])
    assert shown.exit_code == 0
    assert "ETL writers" in shown.output
    assert "alice (admin)" in shown.output


def test_show_missing_role(cli_db):
    result = CliRunner().invoke(cli, ["show-role", "nobody"])

    assert result.exit_code == 1
    assert "Role with name: nobody does not exist" in result.output


def test_delete_role(cli_db):
    seed_roles()
    runner = CliRunner()

    result = runner.invoke(cli, ["delete-role", "auditors", "--force"])
    assert result.exit_code == 0
    assert "Role 'auditors' deleted." in result.output

    # seeding committed once, the delete once more
    version = runner.invoke(cli, ["role-version"])
    assert version.output.strip().splitlines()[-1] == "2"


def test_delete_referenced_role_refused(cli_db):
    seed_roles()

    result = CliRunner().invoke(cli, ["delete-role", "etl-writers", "--force"])

    assert result.exit_code == 1
    assert "referenced in one or more policies: hive-etl" in result.output


def test_delete_role_requires_confirmation(cli_db):
    seed_roles()

    result = CliRunner().invoke(cli, ["delete-role", "auditors"], input="n\n")

    assert result.exit_code == 1
    assert "Aborted" in result.output
