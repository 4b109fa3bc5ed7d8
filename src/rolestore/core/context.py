"""Request context management using ContextVars.

This module provides a thread-safe way to store and retrieve the user
session of the current request, accessible from anywhere in the
application (the role store, the audit writer, log processors) without
explicit parameter passing.
"""

from contextvars import ContextVar
from typing import Optional

from rolestore.domain.entities.user_session import UserSession

_current_session: ContextVar[Optional[UserSession]] = ContextVar(
    "current_user_session", default=None
)


def get_current_session() -> Optional[UserSession]:
    """Get the current user session.

    Returns:
        The current UserSession or None if not set.
    """
    return _current_session.get()


def set_current_session(session: UserSession) -> None:
    """Set the current user session.

    Args:
        session: The UserSession to set.
    """
    _current_session.set(session)


def clear_current_session() -> None:
    """Clear the current user session."""
    _current_session.set(None)


def get_current_actor() -> str:
    """Get the login id to record as the actor of a change.

    Returns:
        The session's login id, or 'system' outside of a user session.
    """
    session = _current_session.get()
    if session is None or not session.login_id:
        return "system"
    return session.login_id
