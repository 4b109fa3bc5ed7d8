"""Integration tests for the role version counter and snapshots."""

import pytest

from rolestore.domain.entities import Role, RoleMember
from rolestore.domain.services import RoleStore, get_role_cache
from rolestore.infrastructure.persistence.repositories import GlobalStateRepository
from rolestore.infrastructure.persistence.unit_of_work import UnitOfWork


async def version(run_store, **kwargs):
    return await run_store(lambda store: store.get_role_version(**kwargs))


class TestRoleVersion:
    """Tests for the global role version counter."""

    @pytest.mark.asyncio
    async def test_fresh_store_is_uninitialized(self, run_store):
        assert await version(run_store) is None

    @pytest.mark.asyncio
    async def test_each_committed_mutation_adds_one(self, run_store):
        created = await run_store(lambda store: store.create_role(Role(name="analysts")))
        assert await version(run_store) == 1

        await run_store(
            lambda store: store.update_role(
                Role(id=created.id, name="analysts", description="changed")
            )
        )
        assert await version(run_store) == 2

        await run_store(lambda store: store.delete_role(created.id))
        assert await version(run_store) == 3

    @pytest.mark.asyncio
    async def test_rolled_back_mutation_adds_nothing(self, session_factory, settings, run_store):
        await run_store(lambda store: store.create_role(Role(name="analysts")))

        with pytest.raises(RuntimeError):
            async with UnitOfWork(session_factory) as uow:
                await RoleStore(uow, settings=settings).create_role(Role(name="auditors"))
                raise RuntimeError("abort")

        assert await version(run_store) == 1
        assert await run_store(lambda store: store.role_exists("auditors")) is False

    @pytest.mark.asyncio
    async def test_one_bump_per_unit_of_work(self, session_factory, settings, run_store):
        """Test the counter moves once per committed unit, however many roles changed."""
        async with UnitOfWork(session_factory) as uow:
            store = RoleStore(uow, settings=settings)
            await store.create_role(Role(name="analysts"))
            await store.create_role(Role(name="auditors"))

        assert await version(run_store) == 1

    @pytest.mark.asyncio
    async def test_counter_uses_configured_state_name(self, session_factory, run_store):
        await run_store(lambda store: store.create_role(Role(name="analysts")))

        async with session_factory() as session:
            repo = GlobalStateRepository(session)
            assert await repo.get_app_data_version("RangerRole") == 1
            assert await repo.get_app_data_version("RangerPolicy") is None

    @pytest.mark.asyncio
    async def test_failed_bump_keeps_committed_mutation(self, run_store, monkeypatch):
        """Test a failing version bump does not undo the role change."""
        await run_store(lambda store: store.create_role(Role(name="analysts")))

        async def fail(self, state_name):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(GlobalStateRepository, "on_global_app_data_change", fail)
        created = await run_store(lambda store: store.create_role(Role(name="auditors")))
        monkeypatch.undo()

        assert created.id is not None
        assert await run_store(lambda store: store.role_exists("auditors")) is True
        assert await version(run_store) == 1


class TestServiceRoleVersion:
    """Tests for per-service role versions."""

    @pytest.mark.asyncio
    async def test_service_versions_follow_affected_services(
        self, run_store, seed, service_settings
    ):
        hive = await seed.service("hive1", "hive")
        await seed.service("kafka1", "kafka")
        await seed.service("solr1", "solr")
        await seed.policy_ref(hive, "analysts")

        await run_store(
            lambda store: store.create_role(Role(name="analysts")),
            store_settings=service_settings,
        )

        async def service_version(name):
            return await run_store(
                lambda store: store.get_role_version(name), store_settings=service_settings
            )

        assert await service_version("hive1") == 2
        assert await service_version("solr1") == 2
        assert await service_version("kafka1") == 1
        assert await service_version("unknown") is None
        assert await run_store(
            lambda store: store.get_role_version(), store_settings=service_settings
        ) == 1


class TestRolesSnapshot:
    """Tests for the cache-backed snapshot poll."""

    @pytest.mark.asyncio
    async def test_snapshot_uninitialized(self, run_store, seed):
        await seed.service("solr1", "solr")
        assert await run_store(lambda store: store.get_roles_snapshot("solr1", None)) is None

    @pytest.mark.asyncio
    async def test_snapshot_reused_until_next_mutation(self, run_store, seed):
        await seed.service("solr1", "solr")
        await run_store(lambda store: store.create_role(Role(name="analysts")))

        first = await run_store(lambda store: store.get_roles_snapshot("solr1", None))
        second = await run_store(lambda store: store.get_roles_snapshot("solr1", first.version))

        assert first.version == 1
        assert first.role_names == ["analysts"]
        assert second is first
        assert get_role_cache().hits == 1

        await run_store(lambda store: store.create_role(Role(name="auditors")))
        third = await run_store(lambda store: store.get_roles_snapshot("solr1", first.version))

        assert third is not first
        assert third.version == 2
        assert third.role_names == ["analysts", "auditors"]

    @pytest.mark.asyncio
    async def test_snapshot_only_has_referenced_roles(self, run_store, seed):
        hive = await seed.service("hive1", "hive")
        await seed.policy_ref(hive, "analysts")
        await run_store(lambda store: store.create_role(Role(name="analysts")))
        await run_store(
            lambda store: store.create_role(
                Role(name="auditors", members=[RoleMember.role("analysts")])
            )
        )

        snapshot = await run_store(lambda store: store.get_roles_snapshot("hive1", None))

        assert snapshot.version == 2
        assert snapshot.role_names == ["analysts"]
