"""SQLAlchemy model for the role_audit_log table.

One immutable row per committed role create, update or delete, holding
the role state before and after the change. Rows are chained by
checksum so tampering is detectable.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from rolestore.infrastructure.persistence.database import Base


class RoleAuditLogModel(Base):
    """Transaction log entry for a role change.

    Attributes:
        id: Primary key (auto-incrementing, serves as sequence number).
        operation: CREATE, UPDATE or DELETE.
        object_id: Id of the affected role.
        object_name: Name of the affected role after the change
            (before it, for deletes).
        actor: Login id of the user who made the change.
        previous_state: Serialized role before the change (NULL for CREATE).
        new_state: Serialized role after the change (NULL for DELETE).
        occurred_at: Timestamp when the change occurred (UTC).
        checksum: SHA-256 hash of this entry.
        previous_hash: Checksum of the previous entry.
    """

    __tablename__ = "role_audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    operation: Mapped[str] = mapped_column(String(10), nullable=False)
    object_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    object_name: Mapped[str] = mapped_column(String(255), nullable=False)
    actor: Mapped[str] = mapped_column(String(255), nullable=False)
    previous_state: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    new_state: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Timestamp when the change occurred (UTC)",
    )
    checksum: Mapped[str | None] = mapped_column(String(64), nullable=True)
    previous_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        Index("ix_role_audit_log_occurred_at_desc", occurred_at.desc()),
        CheckConstraint(
            "operation IN ('CREATE', 'UPDATE', 'DELETE')",
            name="ck_role_audit_log_operation",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<RoleAuditLog(id={self.id}, operation={self.operation}, "
            f"role={self.object_name})>"
        )
