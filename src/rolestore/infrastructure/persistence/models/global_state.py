"""SQLAlchemy model for the global_state table.

Each row is a named, monotonically increasing version counter. The role
store owns the row named by Settings.role_state_name.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from rolestore.infrastructure.persistence.database import Base


class GlobalStateModel(Base):
    """Named version counter.

    Attributes:
        id: Auto-incrementing primary key.
        state_name: Unique name of the logical state (e.g., 'RangerRole').
        app_data_version: Counter value; never decreases.
        updated_at: When the counter was last advanced.
    """

    __tablename__ = "global_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    state_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )
    app_data_version: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=1,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<GlobalState(state_name={self.state_name}, version={self.app_data_version})>"
