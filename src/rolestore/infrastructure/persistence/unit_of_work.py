"""Transaction boundary with post-commit actions.

A UnitOfWork owns one AsyncSession for the duration of a top-level
operation. Callers register zero-argument actions with run_on_commit();
they run after, and only after, the session commits successfully. On
rollback the pending actions are discarded. Actions registered under the
same key run once per commit; commit_context lets them share state with
later registrations.
"""

import inspect
from typing import Any, Awaitable, Callable, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rolestore.core.logging import get_logger

logger = get_logger(__name__)

PostCommitAction = Callable[[], Union[Awaitable[None], None]]


class UnitOfWork:
    """Transactional scope for a role store mutation.

    Example:
        async with UnitOfWork(db.session_factory) as uow:
            store = RoleStore(uow)
            await store.create_role(role)
        # committed here, then the role version is bumped
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the unit of work.

        Args:
            session_factory: Factory used for this unit's session and by
                post-commit actions that need their own transaction.
        """
        self.session_factory = session_factory
        self._session: AsyncSession | None = None
        self._post_commit: list[PostCommitAction] = []
        self._post_commit_keys: set[str] = set()
        self.commit_context: dict[str, Any] = {}

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork has not been entered")
        return self._session

    @property
    def pending_actions(self) -> int:
        """Number of actions waiting for the commit."""
        return len(self._post_commit)

    async def __aenter__(self) -> "UnitOfWork":
        self._session = self.session_factory()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            await self.session.close()
            self._session = None

    def run_on_commit(self, action: PostCommitAction, key: str | None = None) -> bool:
        """Register an action to run once the enclosing transaction commits.

        Args:
            action: Zero-argument callable; may return an awaitable.
            key: Optional deduplication key. Only the first action
                registered under a key runs.

        Returns:
            True if the action was registered, False if the key was taken.
        """
        if key is not None:
            if key in self._post_commit_keys:
                return False
            self._post_commit_keys.add(key)
        self._post_commit.append(action)
        return True

    async def commit(self) -> None:
        """Commit the session, then run the registered post-commit actions."""
        actions, self._post_commit = self._post_commit, []
        self._reset_commit_state()
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            logger.debug("Commit failed, discarding post-commit actions", count=len(actions))
            raise

        for action in actions:
            try:
                result = action()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "Post-commit action failed",
                    action=getattr(action, "__name__", type(action).__name__),
                    error=str(e),
                )

    async def rollback(self) -> None:
        """Roll back the session and discard pending post-commit actions."""
        discarded = len(self._post_commit)
        self._post_commit.clear()
        self._reset_commit_state()
        await self.session.rollback()
        if discarded:
            logger.debug("Rolled back, discarded post-commit actions", count=discarded)

    def _reset_commit_state(self) -> None:
        self._post_commit_keys.clear()
        self.commit_context = {}
