"""Role store: the entry point for role mutations and queries.

Mutations run inside the caller's UnitOfWork. Each one checks existence
and references before writing, keeps the reverse index in step with the
member list, records an audit entry and registers exactly one role
version bump for the commit.
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable

from rolestore.core.config import Settings, get_settings
from rolestore.core.context import get_current_actor, get_current_session
from rolestore.core.logging import get_logger
from rolestore.domain.entities import Role, RoleList, RoleSnapshot, SearchFilter
from rolestore.domain.exceptions import DuplicateNameError, NotFoundError
from rolestore.domain.services.role_cache import RoleCache, get_role_cache
from rolestore.domain.services.role_predicate import apply_filter
from rolestore.domain.services.role_ref_updater import RoleRefUpdater
from rolestore.domain.services.role_reference_guard import RoleReferenceGuard
from rolestore.domain.services.role_version_notifier import RoleVersionNotifier
from rolestore.infrastructure.persistence.models import RoleAuditLogModel, RoleModel
from rolestore.infrastructure.persistence.repositories import (
    GrantMappingRepository,
    RoleAuditLogRepository,
    RoleRepository,
    ServiceRepository,
    UserRepository,
    role_from_model,
)
from rolestore.infrastructure.persistence.unit_of_work import UnitOfWork

logger = get_logger(__name__)

GRANT_PRINCIPAL_ROLE = "ROLE"


class RoleStore:
    """Facade over role persistence, reference integrity and versioning.

    Example:
        async with UnitOfWork(db.session_factory) as uow:
            role = await RoleStore(uow).create_role(Role(name="etl-writers"))
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: Settings | None = None,
        cache: RoleCache | None = None,
        notifier: RoleVersionNotifier | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            uow: Unit of work that owns the session and the commit.
            settings: Settings override (defaults to get_settings()).
            cache: Snapshot cache override (defaults to the process cache).
            notifier: Version notifier override.
        """
        self.uow = uow
        self.settings = settings or get_settings()
        self.cache = cache or get_role_cache()
        self.notifier = notifier or RoleVersionNotifier(self.settings)

    @property
    def session(self):
        return self.uow.session

    @property
    def roles(self) -> RoleRepository:
        return RoleRepository(self.session)

    @property
    def services(self) -> ServiceRepository:
        return ServiceRepository(self.session)

    # Mutations

    async def create_role(self, role: Role, create_missing_principals: bool = False) -> Role:
        """Create a role.

        Args:
            role: Role to create; its id is ignored.
            create_missing_principals: Create placeholder users and groups
                for member names that do not exist yet.

        Returns:
            The stored role with its generated id and timestamps.

        Raises:
            DuplicateNameError: If a role with the same name exists.
            UnknownPrincipalError: If a member does not exist.
        """
        logger.debug("Creating role", role_name=role.name)
        roles = self.roles
        if await roles.exists_by_name(role.name):
            raise DuplicateNameError(role.name)

        updater = RoleRefUpdater(self.session)
        resolved = await updater.resolve_members(role, create_missing_principals)

        actor = get_current_actor()
        now = datetime.now(timezone.utc)
        model = await roles.create(
            RoleModel(
                name=role.name,
                description=role.description,
                members=[member.to_dict() for member in role.members],
                options=dict(role.options),
                created_by=actor,
                updated_by=actor,
                created_at=now,
                updated_at=now,
            )
        )
        created = role_from_model(model)
        await updater.rebuild_reference_rows(created, resolved=resolved)

        await self._audit("CREATE", created, previous=None, new=created)
        self.notifier.schedule_version_bump(
            self.uow, await self._affected_service_ids(created.name)
        )

        logger.info("Role created", role_id=created.id, role_name=created.name, actor=actor)
        return created

    async def update_role(self, role: Role, create_missing_principals: bool = False) -> Role:
        """Replace the name, description, members and options of a role.

        Args:
            role: New state; role.id selects the role to update.
            create_missing_principals: Create placeholder users and groups
                for member names that do not exist yet.

        Returns:
            The stored role after the update.

        Raises:
            NotFoundError: If the id does not resolve to a role.
            RoleReferencedError: If a rename is blocked by a reference to
                the current name.
            DuplicateNameError: If the new name is taken by another role.
            UnknownPrincipalError: If a member does not exist.
        """
        logger.debug("Updating role", role_id=role.id, role_name=role.name)
        roles = self.roles
        model = await roles.get_by_id(role.id) if role.id is not None else None
        if model is None:
            raise NotFoundError(f"Role with id: {role.id} does not exist")

        previous = role_from_model(model)
        if role.name != previous.name:
            await RoleReferenceGuard(self.session).ensure_rename_allowed(previous.name)
            if await roles.exists_by_name(role.name):
                raise DuplicateNameError(role.name)

        updater = RoleRefUpdater(self.session)
        resolved = await updater.resolve_members(role, create_missing_principals)

        actor = get_current_actor()
        model.name = role.name
        model.description = role.description
        model.members = [member.to_dict() for member in role.members]
        model.options = dict(role.options)
        model.updated_by = actor
        model.updated_at = datetime.now(timezone.utc)
        await roles.update(model)

        await updater.rebuild_reference_rows(role_from_model(model), resolved=resolved)

        services = self.services
        await services.bump_policy_versions(
            await services.find_service_ids_referencing_role(model.name)
        )
        await roles.bump_versions(
            model.id,
            policy_version=True,
            role_version=self.settings.supports_roles_download_by_service,
        )
        await self.session.refresh(model)
        updated = role_from_model(model)

        await self._audit("UPDATE", updated, previous=previous, new=updated)
        self.notifier.schedule_version_bump(
            self.uow, await self._affected_service_ids(updated.name)
        )

        logger.info(
            "Role updated",
            role_id=updated.id,
            role_name=updated.name,
            previous_name=previous.name,
            actor=actor,
        )
        return updated

    async def delete_role(self, role_id: int) -> None:
        """Delete a role by id.

        Raises:
            NotFoundError: If the role does not exist.
            RoleReferencedError: If a policy, role or zone refers to it.
        """
        model = await self.roles.get_by_id(role_id)
        if model is None:
            raise NotFoundError(f"Role with id: {role_id} does not exist")
        await self._delete(model)

    async def delete_role_by_name(self, name: str) -> None:
        """Delete a role by name.

        Raises:
            NotFoundError: If the role does not exist.
            RoleReferencedError: If a policy, role or zone refers to it.
        """
        model = await self.roles.get_by_name(name)
        if model is None:
            raise NotFoundError(f"Role with name: {name} does not exist")
        await self._delete(model)

    async def _delete(self, model: RoleModel) -> None:
        logger.debug("Deleting role", role_id=model.id, role_name=model.name)
        await RoleReferenceGuard(self.session).ensure_delete_allowed(model.name)

        deleted = role_from_model(model)
        service_ids = await self._affected_service_ids(deleted.name)

        await RoleRefUpdater(self.session).cleanup_ref_tables(deleted.id)
        changed_services = await self.services.remove_role_from_audit_filters(deleted.name)
        grants = await GrantMappingRepository(self.session).delete_for_principal(
            GRANT_PRINCIPAL_ROLE, deleted.name
        )
        await self.roles.delete(model)

        await self._audit("DELETE", deleted, previous=deleted, new=None)
        self.notifier.schedule_version_bump(self.uow, service_ids)

        logger.info(
            "Role deleted",
            role_id=deleted.id,
            role_name=deleted.name,
            audit_filters_updated=changed_services,
            grant_mappings_removed=grants,
            actor=get_current_actor(),
        )

    # Lookups

    async def get_role(self, role_id: int) -> Role | None:
        """Get a role by id, or None if it does not exist."""
        model = await self.roles.get_by_id(role_id)
        return role_from_model(model) if model else None

    async def get_role_by_name(self, name: str) -> Role:
        """Get a role by name.

        Raises:
            NotFoundError: If no role has this name.
        """
        model = await self.roles.get_by_name(name)
        if model is None:
            raise NotFoundError(f"Role with name: {name} does not exist")
        return role_from_model(model)

    async def role_exists(self, id_or_name: int | str) -> bool:
        if isinstance(id_or_name, int):
            return await self.roles.exists_by_id(id_or_name)
        return await self.roles.exists_by_name(id_or_name)

    async def get_roles(self, search_filter: SearchFilter | None = None) -> list[Role]:
        """List every role, predicate-filtered when the filter has parameters."""
        models = await self.roles.list_all()
        return apply_filter((role_from_model(model) for model in models), search_filter)

    async def get_role_names(self) -> list[str]:
        return await self.roles.list_names()

    async def get_roles_for_service(self, service_name_or_id: str | int) -> list[Role]:
        """List the roles an enforcement agent of a service needs.

        Services of a type listed in service_types_for_all_roles get every
        role; other services get the roles their policies refer to.

        Args:
            service_name_or_id: Service name or id.

        Returns:
            Roles ordered by id; empty for an unknown service.
        """
        services = self.services
        if isinstance(service_name_or_id, int):
            service = await services.get_by_id(service_name_or_id)
        else:
            service = await services.get_by_name(service_name_or_id)
        if service is None:
            logger.debug("Unknown service", service=service_name_or_id)
            return []

        if self.settings.receives_all_roles(service.type):
            models = await self.roles.list_all()
        else:
            models = await self.roles.find_by_service_id(service.id)
        return [role_from_model(model) for model in models]

    async def get_roles_for_principal(self, search_filter: SearchFilter) -> RoleList:
        """List roles visible to the current session.

        A plain end user sees only the roles naming them directly, filtered
        in memory and paged by slicing. Other sessions get search_roles().
        """
        search_filter = self._with_page_size(search_filter)
        session = get_current_session()
        if session is None or not session.login_id or not session.is_plain_user:
            return await self.search_roles(search_filter)

        role_ids = await RoleRefUpdater(self.session).find_role_ids_for_user(session.login_id)
        models = await self.roles.get_by_ids(role_ids)
        matching = apply_filter((role_from_model(model) for model in models), search_filter)

        total = len(matching)
        start = min(max(search_filter.start_index, 0), total)
        end = min(start + search_filter.max_rows, total)
        page = matching[start:end]

        return RoleList(
            roles=page,
            start_index=start,
            page_size=search_filter.max_rows,
            total_count=total,
            result_size=len(page),
            sort_by=search_filter.sort_by,
            sort_type=search_filter.sort_type,
        )

    async def search_roles(self, search_filter: SearchFilter) -> RoleList:
        """Filter, sort and page roles in the database."""
        search_filter = self._with_page_size(search_filter)
        models, total = await self.roles.search(search_filter)
        page = [role_from_model(model) for model in models]
        return RoleList(
            roles=page,
            start_index=search_filter.start_index,
            page_size=search_filter.max_rows,
            total_count=total,
            result_size=len(page),
            sort_by=search_filter.sort_by,
            sort_type=search_filter.sort_type,
        )

    async def get_roles_for_user_and_groups(
        self, user_name: str, groups: Iterable[str] | None = None
    ) -> list[Role]:
        """List roles naming the user, or any of the groups, directly.

        Args:
            user_name: Login name.
            groups: Group names to include. When omitted, the groups the
                user belongs to in the principal directory are used.

        Returns:
            Matching roles ordered by id.
        """
        if groups is None:
            groups = await UserRepository(self.session).get_group_names(user_name)

        updater = RoleRefUpdater(self.session)
        role_ids = set(await updater.find_role_ids_for_user(user_name))
        for group_name in set(groups):
            role_ids.update(await updater.find_role_ids_for_group(group_name))
        return [role_from_model(model) for model in await self.roles.get_by_ids(role_ids)]

    # Versioning

    async def get_role_version(self, service_name: str | None = None) -> int | None:
        """Current role version, None if no role change was ever committed."""
        return await self.notifier.current_version(self.session, service_name)

    async def get_roles_snapshot(
        self, service_name: str, last_known_version: int | None = None
    ) -> RoleSnapshot | None:
        """Get the roles of a service stamped with the current role version.

        Repeated calls with no committed change in between return the same
        cached snapshot.

        Args:
            service_name: Service the enforcement agent serves.
            last_known_version: Version the agent already holds.

        Returns:
            Snapshot, or None if the role version was never initialized.
        """
        current = await self.get_role_version(service_name)
        snapshot = await self.cache.get_latest(
            service_name,
            last_known_version,
            current,
            loader=lambda: self.get_roles_for_service(service_name),
        )
        if snapshot is not None and snapshot.version == last_known_version:
            logger.debug("Roles unchanged for service", service=service_name, version=current)
        return snapshot

    def _with_page_size(self, search_filter: SearchFilter) -> SearchFilter:
        """Resolve a zero page size to the default and cap it at the maximum."""
        page_size = search_filter.max_rows or self.settings.default_page_size
        page_size = min(page_size, self.settings.max_page_size)
        if page_size == search_filter.max_rows:
            return search_filter
        return replace(search_filter, max_rows=page_size)

    async def _affected_service_ids(self, role_name: str) -> list[int]:
        if not self.settings.supports_roles_download_by_service:
            return []
        services = self.services
        referencing = await services.find_service_ids_referencing_role(role_name)
        all_roles = await services.find_service_ids_by_types(
            self.settings.service_types_for_all_roles
        )
        return sorted(set(referencing) | set(all_roles))

    async def _audit(
        self,
        operation: str,
        role: Role,
        previous: Role | None,
        new: Role | None,
    ) -> None:
        await RoleAuditLogRepository(self.session).create(
            RoleAuditLogModel(
                operation=operation,
                object_id=role.id,
                object_name=role.name,
                actor=get_current_actor(),
                previous_state=previous.to_dict() if previous else None,
                new_state=new.to_dict() if new else None,
                occurred_at=datetime.now(timezone.utc),
            )
        )
