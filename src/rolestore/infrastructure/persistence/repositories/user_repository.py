"""User repository for principal directory lookups."""

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.infrastructure.persistence.models import GroupModel, UserModel, UsersGroupsModel


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        """Create a new user.

        Args:
            user: User model to create.

        Returns:
            Created user model.
        """
        self.session.add(user)
        await self.session.flush()
        return user

    async def create_placeholder(self, name: str) -> UserModel:
        """Create a minimal user record for a name first seen in a role."""
        return await self.create(UserModel(name=name, is_auto_created=True))

    async def get_by_name(self, name: str) -> UserModel | None:
        """Get a user by login name.

        Args:
            name: Login name.

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel).where(UserModel.name == name)
        )
        return result.scalar_one_or_none()

    async def get_by_names(self, names: Iterable[str]) -> dict[str, UserModel]:
        """Get users by login name, keyed by name. Unknown names are left out."""
        names = list(set(names))
        if not names:
            return {}
        result = await self.session.execute(
            select(UserModel).where(UserModel.name.in_(names))
        )
        return {user.name: user for user in result.scalars().all()}

    async def get_group_names(self, user_name: str) -> list[str]:
        """List the names of the groups a user belongs to.

        Args:
            user_name: Login name.

        Returns:
            Group names, empty if the user is unknown.
        """
        result = await self.session.execute(
            select(GroupModel.name)
            .join(UsersGroupsModel, UsersGroupsModel.group_id == GroupModel.id)
            .join(UserModel, UserModel.id == UsersGroupsModel.user_id)
            .where(UserModel.name == user_name)
            .order_by(GroupModel.name)
        )
        return list(result.scalars().all())
