"""Unit tests for RoleCache service."""

import threading
from unittest.mock import patch

import pytest

from rolestore.domain.entities import Role
from rolestore.domain.services import RoleCache


def make_loader(*names):
    calls = {"count": 0}

    async def loader():
        calls["count"] += 1
        return [Role(name=name, id=index + 1) for index, name in enumerate(names)]

    return loader, calls


class TestRoleCache:
    """Test suite for RoleCache."""

    def test_cache_initialization(self):
        """Test cache starts empty."""
        cache = RoleCache()
        assert cache.size() == 0
        assert cache.get("hive1") is None

    @pytest.mark.asyncio
    async def test_uninitialized_version_returns_none(self):
        """Test a never-initialized version returns None and caches nothing."""
        cache = RoleCache()
        loader, calls = make_loader("analysts")

        snapshot = await cache.get_latest("hive1", None, None, loader)

        assert snapshot is None
        assert calls["count"] == 0
        assert cache.size() == 0

    @pytest.mark.asyncio
    async def test_first_read_computes_snapshot(self):
        """Test the first read loads roles and stamps the current version."""
        cache = RoleCache()
        loader, calls = make_loader("analysts", "etl-writers")

        snapshot = await cache.get_latest("hive1", None, 4, loader)

        assert snapshot.version == 4
        assert snapshot.service_name == "hive1"
        assert snapshot.role_names == ["analysts", "etl-writers"]
        assert calls["count"] == 1
        assert cache.misses == 1

    @pytest.mark.asyncio
    async def test_same_version_returns_cached_snapshot(self):
        """Test a matching version returns the identical object without loading."""
        cache = RoleCache()
        loader, calls = make_loader("analysts")

        first = await cache.get_latest("hive1", None, 4, loader)
        second = await cache.get_latest("hive1", 4, 4, loader)
        third = await cache.get_latest("hive1", 1, 4, loader)

        assert second is first
        assert third is first
        assert calls["count"] == 1
        assert cache.hits == 2

    @pytest.mark.asyncio
    async def test_new_version_replaces_snapshot(self):
        """Test a version change recomputes and replaces the slot."""
        cache = RoleCache()
        loader, calls = make_loader("analysts")

        first = await cache.get_latest("hive1", None, 4, loader)
        second = await cache.get_latest("hive1", 4, 5, loader)

        assert second is not first
        assert second.version == 5
        assert first.version == 4
        assert cache.get("hive1") is second
        assert calls["count"] == 2

    @pytest.mark.asyncio
    async def test_cached_version_ahead_of_store_is_replaced(self):
        """Test a store version behind the cache recomputes at the store's version."""
        cache = RoleCache()
        loader, calls = make_loader("analysts")
        ahead = await cache.get_latest("hive1", None, 7, loader)

        with patch("rolestore.domain.services.role_cache.logger") as logger:
            behind = await cache.get_latest("hive1", 7, 3, loader)

        logger.warning.assert_called_once()
        assert logger.warning.call_args.kwargs["cached_version"] == 7
        assert logger.warning.call_args.kwargs["current_version"] == 3
        assert behind is not ahead
        assert behind.version == 3
        assert cache.get("hive1") is behind
        assert calls["count"] == 2

    @pytest.mark.asyncio
    async def test_scopes_are_independent(self):
        """Test each service scope has its own slot."""
        cache = RoleCache()
        hive_loader, _ = make_loader("analysts")
        kafka_loader, _ = make_loader("producers", "consumers")

        hive = await cache.get_latest("hive1", None, 2, hive_loader)
        kafka = await cache.get_latest("kafka1", None, 2, kafka_loader)

        assert cache.size() == 2
        assert hive.role_names == ["analysts"]
        assert kafka.role_names == ["producers", "consumers"]

    @pytest.mark.asyncio
    async def test_empty_role_list_is_cached(self):
        """Test an empty snapshot is still a cache entry."""
        cache = RoleCache()
        loader, calls = make_loader()

        first = await cache.get_latest("hive1", None, 1, loader)
        second = await cache.get_latest("hive1", 1, 1, loader)

        assert first is not None
        assert first.roles == ()
        assert second is first
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_invalidate(self):
        """Test invalidating one scope and all scopes."""
        cache = RoleCache()
        loader, _ = make_loader("analysts")
        await cache.get_latest("hive1", None, 1, loader)
        await cache.get_latest("kafka1", None, 1, loader)

        cache.invalidate("hive1")
        assert cache.get("hive1") is None
        assert cache.size() == 1

        cache.invalidate_all()
        assert cache.size() == 0

    def test_thread_safety(self):
        """Test concurrent slot reads and invalidation from threads."""
        cache = RoleCache()
        errors = []

        def worker():
            try:
                for _ in range(100):
                    cache.get("hive1")
                    cache.invalidate("hive1")
                    cache.size()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert not errors
