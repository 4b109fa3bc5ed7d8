"""SQLAlchemy models for objects that refer to roles by name.

These rows are written by the policy store, the security zone store and
the grant store. The role store counts them to guard renames and
deletes, and removes grant mappings of deleted roles.
"""

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from rolestore.infrastructure.persistence.database import Base


class PolicyRoleRefModel(Base):
    """A policy item that grants access to a role."""

    __tablename__ = "policy_role_refs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    policy_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    policy_name: Mapped[str] = mapped_column(String(255), nullable=False)
    service_id: Mapped[int] = mapped_column(
        ForeignKey("services.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_name: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (Index("ix_policy_role_refs_role_name", "role_name"),)


class ZoneRoleRefModel(Base):
    """A security zone that lists a role as administrator or auditor."""

    __tablename__ = "zone_role_refs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    zone_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role_name: Mapped[str] = mapped_column(String(255), nullable=False)
    ref_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="admin",
        comment="admin or auditor",
    )

    __table_args__ = (Index("ix_zone_role_refs_role_name", "role_name"),)


class GrantMappingModel(Base):
    """Access granted to a principal on an externally managed object."""

    __tablename__ = "grant_mappings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    object_type: Mapped[str] = mapped_column(String(50), nullable=False)
    object_name: Mapped[str] = mapped_column(String(255), nullable=False)
    principal_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="USER, GROUP or ROLE",
    )
    principal_name: Mapped[str] = mapped_column(String(255), nullable=False)
    access: Mapped[str] = mapped_column(String(50), nullable=False, default="read")

    __table_args__ = (
        Index("ix_grant_mappings_principal", "principal_type", "principal_name"),
    )
