"""SQLAlchemy model for the groups table."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolestore.infrastructure.persistence.database import Base


class GroupModel(Base):
    """SQLAlchemy model for the groups table.

    Attributes:
        id: Auto-incrementing primary key.
        name: Unique group name.
        is_auto_created: True for placeholders created while saving a role.
        created_at: Timestamp when the group was created.
    """

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Group name",
    )
    is_auto_created: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    users: Mapped[list["UserModel"]] = relationship(  # noqa: F821
        "UserModel",
        secondary="users_groups",
        back_populates="groups",
    )

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, name={self.name})>"
