"""Reference-count queries over objects that name a role.

Each question "is role R referenced by any policy / role / zone" is a
count query; the guard only needs to know whether the count is zero.
The *_names helpers fetch a few referencing object names for messages.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.infrastructure.persistence.models import (
    PolicyRoleRefModel,
    RoleModel,
    RoleRefRoleModel,
    ZoneRoleRefModel,
)


class ReferenceCountRepository:
    """Counts policies, roles and security zones that reference a role."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def count_policy_refs(self, role_name: str) -> int:
        result = await self.session.execute(
            select(func.count(PolicyRoleRefModel.id)).where(
                PolicyRoleRefModel.role_name == role_name
            )
        )
        return result.scalar_one() or 0

    async def count_role_refs(self, role_name: str) -> int:
        result = await self.session.execute(
            select(func.count(RoleRefRoleModel.id)).where(
                RoleRefRoleModel.sub_role_name == role_name
            )
        )
        return result.scalar_one() or 0

    async def count_zone_refs(self, role_name: str) -> int:
        result = await self.session.execute(
            select(func.count(ZoneRoleRefModel.id)).where(
                ZoneRoleRefModel.role_name == role_name
            )
        )
        return result.scalar_one() or 0

    async def policy_names(self, role_name: str, limit: int = 5) -> list[str]:
        result = await self.session.execute(
            select(PolicyRoleRefModel.policy_name)
            .where(PolicyRoleRefModel.role_name == role_name)
            .distinct()
            .order_by(PolicyRoleRefModel.policy_name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def role_names(self, role_name: str, limit: int = 5) -> list[str]:
        result = await self.session.execute(
            select(RoleModel.name)
            .join(RoleRefRoleModel, RoleRefRoleModel.role_id == RoleModel.id)
            .where(RoleRefRoleModel.sub_role_name == role_name)
            .distinct()
            .order_by(RoleModel.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def zone_names(self, role_name: str, limit: int = 5) -> list[str]:
        result = await self.session.execute(
            select(ZoneRoleRefModel.zone_name)
            .where(ZoneRoleRefModel.role_name == role_name)
            .distinct()
            .order_by(ZoneRoleRefModel.zone_name)
            .limit(limit)
        )
        return list(result.scalars().all())
