"""Repository for grant mappings that name principals."""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.infrastructure.persistence.models import GrantMappingModel


class GrantMappingRepository:
    """Repository for grant_mappings rows."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def delete_for_principal(self, principal_type: str, principal_name: str) -> int:
        """Delete every grant made to a principal.

        Args:
            principal_type: USER, GROUP or ROLE.
            principal_name: Name of the principal.

        Returns:
            Number of grants removed.
        """
        result = await self.session.execute(
            delete(GrantMappingModel).where(
                GrantMappingModel.principal_type == principal_type,
                GrantMappingModel.principal_name == principal_name,
            )
        )
        await self.session.flush()
        return result.rowcount or 0
