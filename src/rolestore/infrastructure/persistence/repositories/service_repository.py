"""Service directory repository."""

from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.infrastructure.persistence.models import (
    PolicyRoleRefModel,
    ServiceModel,
    ServiceVersionInfoModel,
)

AUDIT_FILTERS_KEY = "audit_filters"


class ServiceRepository:
    """Repository for services and their version info."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, service: ServiceModel) -> ServiceModel:
        """Create a service together with its version info row."""
        if service.version_info is None:
            service.version_info = ServiceVersionInfoModel()
        self.session.add(service)
        await self.session.flush()
        return service

    async def get_by_id(self, service_id: int) -> ServiceModel | None:
        result = await self.session.execute(
            select(ServiceModel).where(ServiceModel.id == service_id)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> ServiceModel | None:
        result = await self.session.execute(
            select(ServiceModel).where(ServiceModel.name == name)
        )
        return result.scalar_one_or_none()

    async def get_version_info(self, service_name: str) -> ServiceVersionInfoModel | None:
        result = await self.session.execute(
            select(ServiceVersionInfoModel)
            .join(ServiceModel, ServiceModel.id == ServiceVersionInfoModel.service_id)
            .where(ServiceModel.name == service_name)
        )
        return result.scalar_one_or_none()

    async def find_service_ids_referencing_role(self, role_name: str) -> list[int]:
        """List services with at least one policy referencing a role."""
        result = await self.session.execute(
            select(PolicyRoleRefModel.service_id)
            .where(PolicyRoleRefModel.role_name == role_name)
            .distinct()
        )
        return sorted(result.scalars().all())

    async def find_service_ids_by_types(self, service_types: Iterable[str]) -> list[int]:
        """List services whose type is one of the given names (case-insensitive)."""
        lowered = [service_type.lower() for service_type in service_types]
        if not lowered:
            return []
        result = await self.session.execute(
            select(ServiceModel.id).where(func.lower(ServiceModel.type).in_(lowered))
        )
        return sorted(result.scalars().all())

    async def bump_policy_versions(self, service_ids: Iterable[int]) -> None:
        await self._bump(service_ids, "policy_version", "policy_update_time")

    async def bump_role_versions(self, service_ids: Iterable[int]) -> None:
        await self._bump(service_ids, "role_version", "role_update_time")

    async def _bump(self, service_ids: Iterable[int], column: str, time_column: str) -> None:
        service_ids = sorted(set(service_ids))
        if not service_ids:
            return
        version_column = getattr(ServiceVersionInfoModel, column)
        await self.session.execute(
            update(ServiceVersionInfoModel)
            .where(ServiceVersionInfoModel.service_id.in_(service_ids))
            .values({column: version_column + 1, time_column: datetime.now(timezone.utc)})
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()

    async def remove_role_from_audit_filters(self, role_name: str) -> list[str]:
        """Strip a role from every service's audit filter configuration.

        A filter left without any users, groups or roles is dropped.

        Args:
            role_name: Name of the role being deleted.

        Returns:
            Names of the services whose configuration changed.
        """
        result = await self.session.execute(select(ServiceModel))
        changed: list[str] = []
        for service in result.scalars().all():
            configs: dict[str, Any] = dict(service.configs or {})
            filters = configs.get(AUDIT_FILTERS_KEY)
            if not filters:
                continue

            new_filters = []
            modified = False
            for audit_filter in filters:
                roles = audit_filter.get("roles") or []
                if role_name not in roles:
                    new_filters.append(audit_filter)
                    continue
                modified = True
                audit_filter = dict(audit_filter)
                audit_filter["roles"] = [name for name in roles if name != role_name]
                if audit_filter.get("users") or audit_filter.get("groups") or audit_filter["roles"]:
                    new_filters.append(audit_filter)

            if modified:
                configs[AUDIT_FILTERS_KEY] = new_filters
                service.configs = configs
                changed.append(service.name)

        if changed:
            await self.session.flush()
        return changed
