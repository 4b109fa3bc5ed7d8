"""Rename and delete eligibility checks for roles.

A role may only be renamed or deleted when no policy, no other role and
no security zone refers to it by name. The checks run in the fixed order
policy, role, zone so the reported blocker is deterministic.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.core.logging import get_logger
from rolestore.domain.exceptions import (
    ReferencedInPolicyError,
    ReferencedInRoleError,
    ReferencedInZoneError,
    RoleReferencedError,
)
from rolestore.infrastructure.persistence.repositories import ReferenceCountRepository

logger = get_logger(__name__)

RENAME = "rename"
DELETE = "delete"


class RoleReferenceGuard:
    """Blocks renames and deletes of roles that are still referenced."""

    def __init__(
        self,
        session: AsyncSession,
        reference_counts: ReferenceCountRepository | None = None,
    ) -> None:
        """Initialize the guard.

        Args:
            session: SQLAlchemy async session.
            reference_counts: Optional repository override (used in tests).
        """
        self.reference_counts = reference_counts or ReferenceCountRepository(session)

    async def ensure_rename_allowed(self, role_name: str) -> None:
        """Raise if the current name of a role is still referenced.

        Raises:
            ReferencedInPolicyError, ReferencedInRoleError, ReferencedInZoneError
        """
        await self._ensure_not_referenced(role_name, RENAME)

    async def ensure_delete_allowed(self, role_name: str) -> None:
        """Raise if a role is still referenced.

        Raises:
            ReferencedInPolicyError, ReferencedInRoleError, ReferencedInZoneError
        """
        await self._ensure_not_referenced(role_name, DELETE)

    async def is_referenced(self, role_name: str) -> bool:
        try:
            await self._ensure_not_referenced(role_name, DELETE)
        except RoleReferencedError:
            return True
        return False

    async def _ensure_not_referenced(self, role_name: str, operation: str) -> None:
        counts = self.reference_counts

        if await counts.count_policy_refs(role_name) > 0:
            names = await counts.policy_names(role_name)
            logger.info("Role referenced by policies", role_name=role_name, operation=operation)
            raise ReferencedInPolicyError(role_name, operation, names)

        if await counts.count_role_refs(role_name) > 0:
            names = await counts.role_names(role_name)
            logger.info("Role referenced by other roles", role_name=role_name, operation=operation)
            raise ReferencedInRoleError(role_name, operation, names)

        if await counts.count_zone_refs(role_name) > 0:
            names = await counts.zone_names(role_name)
            logger.info("Role referenced by security zones", role_name=role_name, operation=operation)
            raise ReferencedInZoneError(role_name, operation, names)
