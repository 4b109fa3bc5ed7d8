"""SQLAlchemy models for the role reverse-index tables.

One row per (role, principal) pair, rebuilt from the role's member list
whenever the role is created or updated and removed when it is deleted.
"""

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rolestore.infrastructure.persistence.database import Base


class RoleRefUserModel(Base):
    """Role to user reverse-index row."""

    __tablename__ = "role_ref_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("role_id", "user_id", name="uq_role_ref_users_role_user"),
        Index("ix_role_ref_users_user_name", "user_name"),
        Index("ix_role_ref_users_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<RoleRefUser(role_id={self.role_id}, user_name={self.user_name})>"


class RoleRefGroupModel(Base):
    """Role to group reverse-index row."""

    __tablename__ = "role_ref_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    group_id: Mapped[int] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
    )
    group_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("role_id", "group_id", name="uq_role_ref_groups_role_group"),
        Index("ix_role_ref_groups_group_name", "group_name"),
    )

    def __repr__(self) -> str:
        return f"<RoleRefGroup(role_id={self.role_id}, group_name={self.group_name})>"


class RoleRefRoleModel(Base):
    """Role to nested role reverse-index row.

    Counting rows by sub_role_name answers "is this role a member of
    another role".
    """

    __tablename__ = "role_ref_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sub_role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id"),
        nullable=False,
    )
    sub_role_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("role_id", "sub_role_id", name="uq_role_ref_roles_role_sub_role"),
        Index("ix_role_ref_roles_sub_role_name", "sub_role_name"),
    )

    def __repr__(self) -> str:
        return f"<RoleRefRole(role_id={self.role_id}, sub_role_name={self.sub_role_name})>"
