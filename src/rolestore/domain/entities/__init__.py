"""Domain entities for RoleStore."""

from rolestore.domain.entities.role import (
    MAX_ROLE_NAME_LENGTH,
    MemberKind,
    Role,
    RoleMember,
)
from rolestore.domain.entities.role_snapshot import RoleSnapshot
from rolestore.domain.entities.search_filter import RoleList, SearchFilter
from rolestore.domain.entities.user_session import UserSession

__all__ = [
    "MAX_ROLE_NAME_LENGTH",
    "MemberKind",
    "Role",
    "RoleList",
    "RoleMember",
    "RoleSnapshot",
    "SearchFilter",
    "UserSession",
]
