"""SQLAlchemy model for the users table.

The role store only needs enough of the user directory to resolve member
names and to provision placeholder users for roles that name unknown ones.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolestore.infrastructure.persistence.database import Base


class UserModel(Base):
    """SQLAlchemy model for the users table.

    Attributes:
        id: Auto-incrementing primary key.
        name: Unique login name.
        is_auto_created: True for placeholders created while saving a role.
        created_at: Timestamp when the user was created.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Login name",
    )
    is_auto_created: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Created as a placeholder while saving a role",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    groups: Mapped[list["GroupModel"]] = relationship(  # noqa: F821
        "GroupModel",
        secondary="users_groups",
        back_populates="users",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name})>"
