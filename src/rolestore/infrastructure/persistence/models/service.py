"""SQLAlchemy models for the service directory.

Services are owned by the service store; the role store reads their type,
strips deleted roles from their audit filter configuration and advances
their per-service versions.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolestore.infrastructure.persistence.database import Base


class ServiceModel(Base):
    """A managed service (e.g., one Solr or HDFS cluster).

    Attributes:
        id: Auto-incrementing primary key.
        name: Unique service name.
        type: Declared service type name (e.g., 'solr').
        configs: Service configuration; the 'audit_filters' key holds a
            list of filter objects, each with optional 'users', 'groups'
            and 'roles' lists.
    """

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    type: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    configs: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    version_info: Mapped["ServiceVersionInfoModel | None"] = relationship(
        "ServiceVersionInfoModel",
        back_populates="service",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, name={self.name}, type={self.type})>"


class ServiceVersionInfoModel(Base):
    """Per-service policy and role versions polled by enforcement agents."""

    __tablename__ = "service_version_info"

    service_id: Mapped[int] = mapped_column(
        ForeignKey("services.id", ondelete="CASCADE"),
        primary_key=True,
    )
    policy_version: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)
    policy_update_time: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    role_version: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)
    role_update_time: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    service: Mapped[ServiceModel] = relationship(
        "ServiceModel",
        back_populates="version_info",
    )

    def __repr__(self) -> str:
        return (
            f"<ServiceVersionInfo(service_id={self.service_id}, "
            f"policy_version={self.policy_version}, role_version={self.role_version})>"
        )
