"""Role version counter maintenance.

Every committed role mutation advances the role state counter exactly
once. The bump is registered on the unit of work and runs in its own
transaction after the mutation commits, so a rolled-back mutation never
moves the version readers compare against.
"""

from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.core.config import Settings, get_settings
from rolestore.core.logging import get_logger
from rolestore.domain.exceptions import VersionBumpFailedError
from rolestore.infrastructure.persistence.repositories import (
    GlobalStateRepository,
    ServiceRepository,
)
from rolestore.infrastructure.persistence.unit_of_work import UnitOfWork

logger = get_logger(__name__)


class RoleVersionNotifier:
    """Schedules and reads the role version counter."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @property
    def state_name(self) -> str:
        return self.settings.role_state_name

    def schedule_version_bump(self, uow: UnitOfWork, service_ids: Iterable[int] = ()) -> None:
        """Register the version bump to run after the unit of work commits.

        Mutations sharing a unit of work share one bump: later calls only
        add their services to the pending one.

        Args:
            uow: Unit of work of the mutation.
            service_ids: Services whose role_version must also advance when
                roles are versioned per service.
        """
        key = f"version_bump:{self.state_name}"
        affected: set[int] = uow.commit_context.setdefault(key, set())
        affected.update(service_ids)

        async def bump_role_version() -> None:
            await self._bump(uow, sorted(affected))

        scheduled = uow.run_on_commit(bump_role_version, key=key)
        logger.debug(
            "Scheduled role version bump",
            state_name=self.state_name,
            service_ids=sorted(affected),
            merged=not scheduled,
        )

    async def current_version(
        self, session: AsyncSession, service_name: str | None = None
    ) -> int | None:
        """Read the authoritative role version.

        Args:
            session: Session to read with.
            service_name: Service scope. Only used when roles are versioned
                per service.

        Returns:
            The counter value, or None if it was never initialized (or the
            service does not exist).
        """
        if service_name and self.settings.supports_roles_download_by_service:
            version_info = await ServiceRepository(session).get_version_info(service_name)
            return version_info.role_version if version_info else None
        return await GlobalStateRepository(session).get_app_data_version(self.state_name)

    async def _bump(self, uow: UnitOfWork, service_ids: list[int]) -> None:
        try:
            async with uow.session_factory() as session:
                version = await GlobalStateRepository(session).on_global_app_data_change(
                    self.state_name
                )
                if self.settings.supports_roles_download_by_service and service_ids:
                    await ServiceRepository(session).bump_role_versions(service_ids)
                await session.commit()
        except Exception as e:
            error = VersionBumpFailedError(
                f"Failed to advance '{self.state_name}' version: {e}"
            )
            logger.error(
                "Role version bump failed",
                state_name=self.state_name,
                service_ids=service_ids,
                error=error.message,
            )
            return

        logger.info(
            "Role version advanced",
            state_name=self.state_name,
            version=version,
            service_ids=service_ids,
        )
