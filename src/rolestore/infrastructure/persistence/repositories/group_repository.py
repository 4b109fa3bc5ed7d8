"""Repository for group database operations."""

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.infrastructure.persistence.models import GroupModel, UsersGroupsModel


class GroupRepository:
    """Repository for group database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, group: GroupModel) -> GroupModel:
        """Create a new group.

        Args:
            group: Group model to create.

        Returns:
            Created group model.
        """
        self.session.add(group)
        await self.session.flush()
        return group

    async def create_placeholder(self, name: str) -> GroupModel:
        """Create a minimal group record for a name first seen in a role."""
        return await self.create(GroupModel(name=name, is_auto_created=True))

    async def get_by_name(self, name: str) -> GroupModel | None:
        """Get a group by name.

        Args:
            name: Group name.

        Returns:
            Group model if found, None otherwise.
        """
        result = await self.session.execute(
            select(GroupModel).where(GroupModel.name == name)
        )
        return result.scalar_one_or_none()

    async def get_by_names(self, names: Iterable[str]) -> dict[str, GroupModel]:
        """Get groups by name, keyed by name. Unknown names are left out."""
        names = list(set(names))
        if not names:
            return {}
        result = await self.session.execute(
            select(GroupModel).where(GroupModel.name.in_(names))
        )
        return {group.name: group for group in result.scalars().all()}

    async def add_user(self, group_id: int, user_id: int) -> None:
        """Add a user to a group.

        Args:
            group_id: Group ID.
            user_id: User ID.
        """
        self.session.add(UsersGroupsModel(user_id=user_id, group_id=group_id))
        await self.session.flush()
