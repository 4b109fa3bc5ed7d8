"""Repository for the role reverse-index tables."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.infrastructure.persistence.models import (
    RoleRefGroupModel,
    RoleRefRoleModel,
    RoleRefUserModel,
)


class RoleRefRepository:
    """Repository for role_ref_users, role_ref_groups and role_ref_roles."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def get_user_refs(self, role_id: int) -> list[RoleRefUserModel]:
        result = await self.session.execute(
            select(RoleRefUserModel).where(RoleRefUserModel.role_id == role_id)
        )
        return list(result.scalars().all())

    async def get_group_refs(self, role_id: int) -> list[RoleRefGroupModel]:
        result = await self.session.execute(
            select(RoleRefGroupModel).where(RoleRefGroupModel.role_id == role_id)
        )
        return list(result.scalars().all())

    async def get_role_refs(self, role_id: int) -> list[RoleRefRoleModel]:
        result = await self.session.execute(
            select(RoleRefRoleModel).where(RoleRefRoleModel.role_id == role_id)
        )
        return list(result.scalars().all())

    async def add(self, rows: list[RoleRefUserModel | RoleRefGroupModel | RoleRefRoleModel]) -> None:
        if not rows:
            return
        self.session.add_all(rows)
        await self.session.flush()

    async def remove(self, rows: list[RoleRefUserModel | RoleRefGroupModel | RoleRefRoleModel]) -> None:
        for row in rows:
            await self.session.delete(row)
        if rows:
            await self.session.flush()

    async def delete_all_for_role(self, role_id: int) -> int:
        """Delete every reverse-index row owned by a role.

        Args:
            role_id: Role ID.

        Returns:
            Number of rows deleted.
        """
        deleted = 0
        for model in (RoleRefUserModel, RoleRefGroupModel, RoleRefRoleModel):
            result = await self.session.execute(delete(model).where(model.role_id == role_id))
            deleted += result.rowcount or 0
        await self.session.flush()
        return deleted

    async def find_role_ids_for_user(self, user_name: str) -> list[int]:
        result = await self.session.execute(
            select(RoleRefUserModel.role_id)
            .where(RoleRefUserModel.user_name == user_name)
            .order_by(RoleRefUserModel.role_id)
        )
        return list(result.scalars().all())

    async def find_role_ids_for_group(self, group_name: str) -> list[int]:
        result = await self.session.execute(
            select(RoleRefGroupModel.role_id)
            .where(RoleRefGroupModel.group_name == group_name)
            .order_by(RoleRefGroupModel.role_id)
        )
        return list(result.scalars().all())
