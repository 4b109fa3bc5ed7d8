"""Role audit log repository for the write-only transaction log.

Entries are chained: each stores the checksum of the previous entry, and
its own SHA-256 checksum covers that link, so editing or removing a row
breaks the chain.
"""

import hashlib
import json

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.infrastructure.persistence.models import RoleAuditLogModel


class RoleAuditLogRepository:
    """Repository for role audit log entries.

    Only creation and reads are provided; entries are never updated or
    deleted.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, entry: RoleAuditLogModel) -> RoleAuditLogModel:
        """Append an entry to the audit chain.

        Args:
            entry: Audit entry without checksum/previous_hash.

        Returns:
            The stored entry with checksum and previous_hash set.
        """
        entry.previous_hash = await self._get_latest_checksum()
        entry.checksum = self._calculate_checksum(entry)

        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_for_role(self, role_id: int) -> list[RoleAuditLogModel]:
        """List the audit entries of a role, oldest first."""
        result = await self.session.execute(
            select(RoleAuditLogModel)
            .where(RoleAuditLogModel.object_id == role_id)
            .order_by(RoleAuditLogModel.id.asc())
        )
        return list(result.scalars().all())

    async def count_all(self) -> int:
        result = await self.session.execute(select(func.count(RoleAuditLogModel.id)))
        return result.scalar_one() or 0

    async def verify_integrity_chain(self) -> tuple[bool, list[str]]:
        """Verify checksums and links of the whole chain.

        Returns:
            Tuple of (is_valid, list_of_errors).
        """
        result = await self.session.execute(
            select(RoleAuditLogModel).order_by(RoleAuditLogModel.id.asc())
        )
        errors: list[str] = []
        previous_checksum = None
        for entry in result.scalars().all():
            if entry.previous_hash != previous_checksum:
                errors.append(f"Entry {entry.id}: previous_hash does not match entry before it")
            if entry.checksum != self._calculate_checksum(entry):
                errors.append(f"Entry {entry.id}: checksum mismatch")
            previous_checksum = entry.checksum
        return not errors, errors

    async def _get_latest_checksum(self) -> str | None:
        result = await self.session.execute(
            select(RoleAuditLogModel.checksum)
            .order_by(RoleAuditLogModel.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    def _calculate_checksum(self, entry: RoleAuditLogModel) -> str:
        """Calculate the SHA-256 checksum of an entry.

        Datetimes are normalized to naive ISO strings since SQLite stores
        them without timezone.
        """
        occurred_at = entry.occurred_at
        if occurred_at is not None and occurred_at.tzinfo is not None:
            occurred_at = occurred_at.replace(tzinfo=None)

        data = {
            "operation": entry.operation,
            "object_id": entry.object_id,
            "object_name": entry.object_name,
            "actor": entry.actor,
            "previous_state": entry.previous_state,
            "new_state": entry.new_state,
            "occurred_at": occurred_at.isoformat() if occurred_at else None,
            "previous_hash": entry.previous_hash,
        }
        json_str = json.dumps(data, sort_keys=True, default=str)
        return hashlib.sha256(json_str.encode("utf-8")).hexdigest()
