"""Role repository for database operations."""

from typing import Iterable

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.domain.entities import Role, RoleMember, SearchFilter
from rolestore.domain.entities import search_filter as fp
from rolestore.domain.exceptions import DuplicateNameError
from rolestore.infrastructure.persistence.models import (
    PolicyRoleRefModel,
    RoleModel,
    RoleRefGroupModel,
    RoleRefRoleModel,
    RoleRefUserModel,
)


def role_from_model(model: RoleModel) -> Role:
    """Materialize a Role entity from its row."""
    return Role(
        id=model.id,
        name=model.name,
        description=model.description,
        members=[RoleMember.from_dict(member) for member in (model.members or [])],
        options=dict(model.options or {}),
        created_by=model.created_by,
        updated_by=model.updated_by,
        created_at=model.created_at,
        updated_at=model.updated_at,
        policy_version=model.policy_version or 0,
        role_version=model.role_version or 0,
    )


class RoleRepository:
    """Repository for role database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, role: RoleModel) -> RoleModel:
        """Create a new role.

        Args:
            role: Role model to create.

        Returns:
            Created role model with its generated id.

        Raises:
            DuplicateNameError: If the unique name index rejects the row.
        """
        self.session.add(role)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateNameError(role.name) from e
        await self.session.refresh(role)
        return role

    async def update(self, role: RoleModel) -> RoleModel:
        """Flush changes made to a role.

        Raises:
            DuplicateNameError: If a rename collides with another role.
        """
        if role not in self.session:
            self.session.add(role)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateNameError(role.name) from e
        await self.session.refresh(role)
        return role

    async def delete(self, role: RoleModel) -> None:
        await self.session.delete(role)
        await self.session.flush()

    async def get_by_id(self, role_id: int) -> RoleModel | None:
        """Get a role by ID.

        Args:
            role_id: Role ID.

        Returns:
            Role model if found, None otherwise.
        """
        result = await self.session.execute(
            select(RoleModel).where(RoleModel.id == role_id)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> RoleModel | None:
        """Get a role by name.

        Args:
            name: Role name.

        Returns:
            Role model if found, None otherwise.
        """
        result = await self.session.execute(
            select(RoleModel).where(RoleModel.name == name)
        )
        return result.scalar_one_or_none()

    async def get_by_names(self, names: Iterable[str]) -> dict[str, RoleModel]:
        """Get roles by name, keyed by name. Unknown names are left out."""
        names = list(set(names))
        if not names:
            return {}
        result = await self.session.execute(
            select(RoleModel).where(RoleModel.name.in_(names))
        )
        return {role.name: role for role in result.scalars().all()}

    async def exists_by_id(self, role_id: int) -> bool:
        result = await self.session.execute(
            select(RoleModel.id).where(RoleModel.id == role_id).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def exists_by_name(self, name: str) -> bool:
        result = await self.session.execute(
            select(RoleModel.id).where(RoleModel.name == name).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_all(self) -> list[RoleModel]:
        """List every role ordered by id."""
        result = await self.session.execute(select(RoleModel).order_by(RoleModel.id))
        return list(result.scalars().all())

    async def list_names(self) -> list[str]:
        result = await self.session.execute(select(RoleModel.name).order_by(RoleModel.name))
        return list(result.scalars().all())

    async def get_by_ids(self, role_ids: Iterable[int]) -> list[RoleModel]:
        """Get roles by id, ordered by id. Unknown ids are left out."""
        role_ids = list(set(role_ids))
        if not role_ids:
            return []
        result = await self.session.execute(
            select(RoleModel).where(RoleModel.id.in_(role_ids)).order_by(RoleModel.id)
        )
        return list(result.scalars().all())

    async def find_by_service_id(self, service_id: int) -> list[RoleModel]:
        """List roles referenced by at least one policy of a service."""
        referenced = select(PolicyRoleRefModel.role_name).where(
            PolicyRoleRefModel.service_id == service_id
        )
        result = await self.session.execute(
            select(RoleModel).where(RoleModel.name.in_(referenced)).order_by(RoleModel.id)
        )
        return list(result.scalars().all())

    async def search(self, search_filter: SearchFilter) -> tuple[list[RoleModel], int]:
        """Filter, sort and paginate roles in SQL.

        Args:
            search_filter: Filter parameters, sort field/order and page.

        Returns:
            Tuple of (page of role models, total matching count).
        """
        query = select(RoleModel)

        role_name = search_filter.get(fp.ROLE_NAME)
        if role_name:
            query = query.where(RoleModel.name == role_name)
        role_name_partial = search_filter.get(fp.ROLE_NAME_PARTIAL)
        if role_name_partial:
            query = query.where(RoleModel.name.ilike(f"%{role_name_partial}%"))
        role_id = search_filter.get(fp.ROLE_ID)
        if role_id:
            query = query.where(RoleModel.id == int(role_id))

        user_name = search_filter.get(fp.USER_NAME)
        if user_name:
            query = query.where(
                RoleModel.id.in_(
                    select(RoleRefUserModel.role_id).where(RoleRefUserModel.user_name == user_name)
                )
            )
        user_name_partial = search_filter.get(fp.USER_NAME_PARTIAL)
        if user_name_partial:
            query = query.where(
                RoleModel.id.in_(
                    select(RoleRefUserModel.role_id).where(
                        RoleRefUserModel.user_name.ilike(f"%{user_name_partial}%")
                    )
                )
            )
        group_name = search_filter.get(fp.GROUP_NAME)
        if group_name:
            query = query.where(
                RoleModel.id.in_(
                    select(RoleRefGroupModel.role_id).where(
                        RoleRefGroupModel.group_name == group_name
                    )
                )
            )
        group_name_partial = search_filter.get(fp.GROUP_NAME_PARTIAL)
        if group_name_partial:
            query = query.where(
                RoleModel.id.in_(
                    select(RoleRefGroupModel.role_id).where(
                        RoleRefGroupModel.group_name.ilike(f"%{group_name_partial}%")
                    )
                )
            )
        role_member = search_filter.get(fp.ROLE_MEMBER)
        if role_member:
            query = query.where(
                RoleModel.id.in_(
                    select(RoleRefRoleModel.role_id).where(
                        RoleRefRoleModel.sub_role_name == role_member
                    )
                )
            )

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.session.execute(count_query)).scalar_one()

        sort_column = getattr(RoleModel, search_filter.sort_by, RoleModel.id)
        if search_filter.sort_type == "desc":
            query = query.order_by(sort_column.desc(), RoleModel.id.desc())
        else:
            query = query.order_by(sort_column.asc(), RoleModel.id.asc())

        query = query.offset(max(search_filter.start_index, 0)).limit(search_filter.max_rows)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def bump_versions(
        self, role_id: int, policy_version: bool = True, role_version: bool = False
    ) -> None:
        """Advance the per-role version fields.

        Args:
            role_id: Role ID.
            policy_version: Increment policy_version.
            role_version: Increment role_version.
        """
        values = {}
        if policy_version:
            values["policy_version"] = RoleModel.policy_version + 1
        if role_version:
            values["role_version"] = RoleModel.role_version + 1
        if not values:
            return
        await self.session.execute(
            update(RoleModel).where(RoleModel.id == role_id).values(**values)
        )
        await self.session.flush()
