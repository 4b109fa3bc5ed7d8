"""Integration tests for the role audit log written by the role store."""

import pytest
from sqlalchemy import update

from rolestore.core.context import set_current_session
from rolestore.domain.entities import Role, UserSession
from rolestore.domain.entities.user_session import ROLE_SYS_ADMIN
from rolestore.infrastructure.persistence.models import RoleAuditLogModel
from rolestore.infrastructure.persistence.repositories import RoleAuditLogRepository


@pytest.mark.asyncio
async def test_mutations_recorded_in_order(run_store, session_factory):
    """Test create, update and delete each append one entry with the right states."""
    set_current_session(UserSession("admin", {ROLE_SYS_ADMIN}))
    created = await run_store(lambda store: store.create_role(Role(name="analysts")))
    await run_store(
        lambda store: store.update_role(
            Role(id=created.id, name="data-analysts", description="renamed")
        )
    )
    await run_store(lambda store: store.delete_role(created.id))

    async with session_factory() as session:
        entries = await RoleAuditLogRepository(session).list_for_role(created.id)

    assert [entry.operation for entry in entries] == ["CREATE", "UPDATE", "DELETE"]
    assert all(entry.actor == "admin" for entry in entries)

    create, change, delete = entries
    assert create.previous_state is None
    assert create.new_state["name"] == "analysts"
    assert change.previous_state["name"] == "analysts"
    assert change.new_state["name"] == "data-analysts"
    assert change.new_state["description"] == "renamed"
    assert delete.object_name == "data-analysts"
    assert delete.new_state is None


@pytest.mark.asyncio
async def test_rejected_mutation_not_recorded(run_store, session_factory):
    await run_store(lambda store: store.create_role(Role(name="analysts")))

    with pytest.raises(Exception):
        await run_store(lambda store: store.create_role(Role(name="analysts")))

    async with session_factory() as session:
        assert await RoleAuditLogRepository(session).count_all() == 1


@pytest.mark.asyncio
async def test_integrity_chain_valid_and_detects_tampering(run_store, session_factory):
    for name in ("analysts", "auditors", "writers"):
        await run_store(lambda store, name=name: store.create_role(Role(name=name)))

    async with session_factory() as session:
        repo = RoleAuditLogRepository(session)
        is_valid, errors = await repo.verify_integrity_chain()
        assert is_valid is True
        assert errors == []

        await session.execute(
            update(RoleAuditLogModel)
            .where(RoleAuditLogModel.object_name == "auditors")
            .values(actor="intruder")
        )
        await session.commit()

        is_valid, errors = await repo.verify_integrity_chain()
        assert is_valid is False
        assert any("checksum mismatch" in error for error in errors)
