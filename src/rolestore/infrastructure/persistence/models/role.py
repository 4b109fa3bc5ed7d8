"""SQLAlchemy model for the roles table.

The member list and options are stored as JSON on the role row; they are
the authoritative membership data. The role_ref_* tables are derived from
them for indexed principal lookups.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from rolestore.infrastructure.persistence.database import Base


class RoleModel(Base):
    """SQLAlchemy model for the roles table.

    Attributes:
        id: Auto-incrementing primary key.
        name: Unique role name.
        description: Optional description of the role's purpose.
        members: JSON list of {kind, name, is_admin} entries.
        options: JSON object of free-form options.
        created_by: Login id of the creator.
        updated_by: Login id of the last updater.
        created_at: Timestamp when the role was created.
        updated_at: Timestamp when the role was last updated.
        policy_version: Bumped on every update of the role.
        role_version: Bumped on update when roles are versioned per service.
    """

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Role name",
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Description of the role's purpose",
    )
    members: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Role members as [{kind, name, is_admin}]",
    )
    options: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    policy_version: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )
    role_version: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"
