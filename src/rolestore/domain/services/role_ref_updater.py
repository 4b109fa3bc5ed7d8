"""Maintains the role reverse-index tables.

The member list on the role row is authoritative. After every create or
update the role_ref_users, role_ref_groups and role_ref_roles rows of the
role are brought in line with it, so "which roles name principal X" is an
indexed query instead of a scan of role bodies.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.core.logging import get_logger
from rolestore.domain.entities import MemberKind, Role, RoleMember
from rolestore.domain.exceptions import UnknownPrincipalError
from rolestore.infrastructure.persistence.models import (
    RoleRefGroupModel,
    RoleRefRoleModel,
    RoleRefUserModel,
)
from rolestore.infrastructure.persistence.repositories import (
    GroupRepository,
    RoleRefRepository,
    RoleRepository,
    UserRepository,
)

logger = get_logger(__name__)


@dataclass
class RefChanges:
    """Counts of reverse-index rows touched by a rebuild."""

    added: int = 0
    removed: int = 0
    updated: int = 0
    principals_created: int = 0


@dataclass
class ResolvedMembers:
    """Principal ids for the member names of a role, keyed by name."""

    users: dict[str, int] = field(default_factory=dict)
    groups: dict[str, int] = field(default_factory=dict)
    roles: dict[str, int] = field(default_factory=dict)
    principals_created: int = 0


class RoleRefUpdater:
    """Resolves role members and keeps the reverse-index rows in line."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the updater.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session
        self.ref_repo = RoleRefRepository(session)
        self.user_repo = UserRepository(session)
        self.group_repo = GroupRepository(session)
        self.role_repo = RoleRepository(session)

    async def resolve_members(
        self, role: Role, create_missing_principals: bool = False
    ) -> ResolvedMembers:
        """Resolve every member of a role to a principal id.

        All lookups happen first. Placeholders are created only once every
        member is known to be resolvable, so a rejected member list writes
        nothing.

        Args:
            role: Role whose members to resolve; it need not be persisted.
            create_missing_principals: Create placeholder users and groups
                for names that do not exist yet. Roles are never created.

        Returns:
            The resolved principal ids.

        Raises:
            UnknownPrincipalError: If a member does not exist and cannot be
                created.
        """
        user_names = [member.name for member in role.members_of(MemberKind.USER)]
        group_names = [member.name for member in role.members_of(MemberKind.GROUP)]
        role_names = [member.name for member in role.members_of(MemberKind.ROLE)]

        users = await self.user_repo.get_by_names(user_names)
        groups = await self.group_repo.get_by_names(group_names)
        roles = await self.role_repo.get_by_names(role_names)
        resolved = ResolvedMembers(
            users={name: user.id for name, user in users.items()},
            groups={name: group.id for name, group in groups.items()},
            roles={name: model.id for name, model in roles.items()},
        )

        missing_roles = [name for name in role_names if name not in resolved.roles]
        if missing_roles:
            raise UnknownPrincipalError(MemberKind.ROLE.value, missing_roles[0])

        missing_users = [name for name in user_names if name not in resolved.users]
        missing_groups = [name for name in group_names if name not in resolved.groups]
        if not create_missing_principals:
            if missing_users:
                raise UnknownPrincipalError(MemberKind.USER.value, missing_users[0])
            if missing_groups:
                raise UnknownPrincipalError(MemberKind.GROUP.value, missing_groups[0])

        for name in missing_users:
            user = await self.user_repo.create_placeholder(name)
            logger.info("Created placeholder user for role member", user_name=name)
            resolved.users[name] = user.id
            resolved.principals_created += 1
        for name in missing_groups:
            group = await self.group_repo.create_placeholder(name)
            logger.info("Created placeholder group for role member", group_name=name)
            resolved.groups[name] = group.id
            resolved.principals_created += 1

        return resolved

    async def rebuild_reference_rows(
        self,
        role: Role,
        create_missing_principals: bool = False,
        resolved: ResolvedMembers | None = None,
    ) -> RefChanges:
        """Sync the reverse-index rows of a persisted role with its members.

        Args:
            role: Persisted role (id set).
            create_missing_principals: Create placeholder users and groups
                for names that do not exist yet. Roles are never created.
            resolved: Members already resolved by resolve_members(); they
                are resolved here when omitted.

        Returns:
            Counts of the rows touched.

        Raises:
            UnknownPrincipalError: If a member does not exist and cannot be
                created.
        """
        if role.id is None:
            raise ValueError("Role must be persisted before its references are rebuilt")

        if resolved is None:
            resolved = await self.resolve_members(role, create_missing_principals)
        changes = RefChanges(principals_created=resolved.principals_created)

        await self._sync(
            existing=await self.ref_repo.get_user_refs(role.id),
            desired=role.members_of(MemberKind.USER),
            name_of=lambda row: row.user_name,
            make_row=lambda member: RoleRefUserModel(
                role_id=role.id,
                user_id=resolved.users[member.name],
                user_name=member.name,
                is_admin=member.is_admin,
            ),
            changes=changes,
        )
        await self._sync(
            existing=await self.ref_repo.get_group_refs(role.id),
            desired=role.members_of(MemberKind.GROUP),
            name_of=lambda row: row.group_name,
            make_row=lambda member: RoleRefGroupModel(
                role_id=role.id,
                group_id=resolved.groups[member.name],
                group_name=member.name,
                is_admin=member.is_admin,
            ),
            changes=changes,
        )
        await self._sync(
            existing=await self.ref_repo.get_role_refs(role.id),
            desired=role.members_of(MemberKind.ROLE),
            name_of=lambda row: row.sub_role_name,
            make_row=lambda member: RoleRefRoleModel(
                role_id=role.id,
                sub_role_id=resolved.roles[member.name],
                sub_role_name=member.name,
                is_admin=member.is_admin,
            ),
            changes=changes,
        )

        logger.debug(
            "Rebuilt role reference rows",
            role_id=role.id,
            role_name=role.name,
            added=changes.added,
            removed=changes.removed,
            updated=changes.updated,
            principals_created=changes.principals_created,
        )
        return changes

    async def cleanup_ref_tables(self, role_id: int) -> int:
        """Remove every reverse-index row of a role being deleted.

        Returns:
            Number of rows deleted.
        """
        deleted = await self.ref_repo.delete_all_for_role(role_id)
        logger.debug("Cleaned up role reference rows", role_id=role_id, deleted=deleted)
        return deleted

    async def find_role_ids_for_user(self, user_name: str) -> list[int]:
        return await self.ref_repo.find_role_ids_for_user(user_name)

    async def find_role_ids_for_group(self, group_name: str) -> list[int]:
        return await self.ref_repo.find_role_ids_for_group(group_name)

    async def _sync(
        self,
        existing: list[Any],
        desired: list[RoleMember],
        name_of: Callable[[Any], str],
        make_row: Callable[[RoleMember], Any],
        changes: RefChanges,
    ) -> None:
        wanted = {member.name: member for member in desired}

        stale = [row for row in existing if name_of(row) not in wanted]
        await self.ref_repo.remove(stale)
        changes.removed += len(stale)

        kept = {name_of(row): row for row in existing if name_of(row) in wanted}
        for name, row in kept.items():
            if row.is_admin != wanted[name].is_admin:
                row.is_admin = wanted[name].is_admin
                changes.updated += 1

        new_rows = [make_row(member) for name, member in wanted.items() if name not in kept]
        await self.ref_repo.add(new_rows)
        changes.added += len(new_rows)

        if changes.updated:
            await self.session.flush()
