"""Repository for named version counters."""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rolestore.infrastructure.persistence.models import GlobalStateModel


class GlobalStateRepository:
    """Repository for the global_state table."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def get_app_data_version(self, state_name: str) -> int | None:
        """Get the current value of a counter.

        Args:
            state_name: Name of the logical state.

        Returns:
            The counter value, or None if the state was never initialized.
        """
        result = await self.session.execute(
            select(GlobalStateModel.app_data_version).where(
                GlobalStateModel.state_name == state_name
            )
        )
        return result.scalar_one_or_none()

    async def on_global_app_data_change(self, state_name: str) -> int:
        """Advance a counter by one, creating it at 1 on first use.

        The increment is a single UPDATE so concurrent writers serialize on
        the counter row.

        Args:
            state_name: Name of the logical state.

        Returns:
            The new counter value (as seen by this transaction).
        """
        now = datetime.now(timezone.utc)
        result = await self.session.execute(
            update(GlobalStateModel)
            .where(GlobalStateModel.state_name == state_name)
            .values(
                app_data_version=GlobalStateModel.app_data_version + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            self.session.add(
                GlobalStateModel(state_name=state_name, app_data_version=1, updated_at=now)
            )
        await self.session.flush()
        version = await self.get_app_data_version(state_name)
        return int(version or 0)
