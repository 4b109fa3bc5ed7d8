"""Version-keyed cache of role snapshots.

Caches the roles applicable to a service scope together with the role
version they were computed at. There is no expiry: every read is checked
against the authoritative version, and a slot is replaced with a new
immutable snapshot whenever that version moves.
Thread-safe implementation for concurrent access.
"""

import threading
from functools import lru_cache
from typing import Awaitable, Callable, Iterable

from rolestore.core.logging import get_logger
from rolestore.domain.entities import Role, RoleSnapshot

logger = get_logger(__name__)

RoleLoader = Callable[[], Awaitable[Iterable[Role]]]


class RoleCache:
    """Thread-safe map of service scope to the latest RoleSnapshot.

    The lock only guards slot reads and replacement. Recomputation runs
    outside it, so two callers seeing the same version change may both
    recompute; the last one to finish owns the slot.
    """

    def __init__(self) -> None:
        self._snapshots: dict[str, RoleSnapshot] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    def get(self, scope: str) -> RoleSnapshot | None:
        """Get the cached snapshot of a scope, whatever its version.

        Args:
            scope: Service name.

        Returns:
            Cached snapshot if present, None otherwise.
        """
        with self._lock:
            return self._snapshots.get(scope)

    async def get_latest(
        self,
        scope: str,
        last_known_version: int | None,
        current_version: int | None,
        loader: RoleLoader,
    ) -> RoleSnapshot | None:
        """Return the snapshot for the current version, recomputing if needed.

        Args:
            scope: Service name.
            last_known_version: Version the caller already has. Reported in
                logs only; callers compare it to the returned version.
            current_version: Authoritative role version read from the store.
            loader: Coroutine function computing the scope's roles.

        Returns:
            Snapshot stamped with current_version, or None if the version
            has never been initialized.
        """
        if current_version is None:
            return None

        cached = self.get(scope)
        if cached is not None and cached.version == current_version:
            with self._lock:
                self.hits += 1
            logger.debug(
                "Role cache hit",
                scope=scope,
                version=current_version,
                last_known_version=last_known_version,
            )
            return cached

        if cached is not None and cached.version > current_version:
            logger.warning(
                "Cached role version is ahead of the store",
                scope=scope,
                cached_version=cached.version,
                current_version=current_version,
            )

        roles = tuple(await loader())
        snapshot = RoleSnapshot(service_name=scope, version=current_version, roles=roles)

        with self._lock:
            self.misses += 1
            self._snapshots[scope] = snapshot

        logger.debug(
            "Role cache refreshed",
            scope=scope,
            previous_version=cached.version if cached else None,
            version=current_version,
            role_count=len(roles),
        )
        return snapshot

    def invalidate(self, scope: str) -> None:
        """Drop the snapshot of one scope."""
        with self._lock:
            self._snapshots.pop(scope, None)

    def invalidate_all(self) -> None:
        """Clear entire cache."""
        with self._lock:
            self._snapshots.clear()

    def size(self) -> int:
        """Get current cache size.

        Returns:
            Number of cached scopes.
        """
        with self._lock:
            return len(self._snapshots)


@lru_cache
def get_role_cache() -> RoleCache:
    """Get the process-wide role cache."""
    return RoleCache()
