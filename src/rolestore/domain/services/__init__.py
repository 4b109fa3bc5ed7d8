"""Domain services for the role store.

Services hold the logic spanning several repositories: reference checks,
reverse-index maintenance, version bumps and the snapshot cache, tied
together by the RoleStore facade.
"""

from rolestore.domain.services.role_cache import RoleCache, get_role_cache
from rolestore.domain.services.role_predicate import apply_filter, build_predicates
from rolestore.domain.services.role_ref_updater import (
    RefChanges,
    ResolvedMembers,
    RoleRefUpdater,
)
from rolestore.domain.services.role_reference_guard import RoleReferenceGuard
from rolestore.domain.services.role_store import RoleStore
from rolestore.domain.services.role_version_notifier import RoleVersionNotifier

__all__ = [
    "RefChanges",
    "ResolvedMembers",
    "RoleCache",
    "RoleRefUpdater",
    "RoleReferenceGuard",
    "RoleStore",
    "RoleVersionNotifier",
    "apply_filter",
    "build_predicates",
    "get_role_cache",
]
