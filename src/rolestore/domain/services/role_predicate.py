"""In-memory predicate filtering of role lists.

Used where roles are already materialized (the full listing and the end
user fast path). Matches the semantics of RoleRepository.search: exact
matches are case-sensitive, *_partial matches are case-insensitive
substrings. Every non-blank parameter must match.
"""

from typing import Callable, Iterable

from rolestore.domain.entities import MemberKind, Role, SearchFilter
from rolestore.domain.entities import search_filter as fp

RolePredicate = Callable[[Role], bool]


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def _member_names(role: Role, kind: MemberKind) -> list[str]:
    return [member.name for member in role.members_of(kind)]


def build_predicates(search_filter: SearchFilter) -> list[RolePredicate]:
    """Translate filter parameters into role predicates.

    Args:
        search_filter: Filter whose non-blank parameters are applied.

    Returns:
        One predicate per non-blank parameter.
    """
    predicates: list[RolePredicate] = []

    role_name = search_filter.get(fp.ROLE_NAME)
    if role_name:
        predicates.append(lambda role: role.name == role_name)

    role_name_partial = search_filter.get(fp.ROLE_NAME_PARTIAL)
    if role_name_partial:
        predicates.append(lambda role: _contains(role.name, role_name_partial))

    role_id = search_filter.get(fp.ROLE_ID)
    if role_id:
        predicates.append(lambda role: str(role.id) == role_id)

    user_name = search_filter.get(fp.USER_NAME)
    if user_name:
        predicates.append(lambda role: user_name in _member_names(role, MemberKind.USER))

    user_name_partial = search_filter.get(fp.USER_NAME_PARTIAL)
    if user_name_partial:
        predicates.append(
            lambda role: any(
                _contains(name, user_name_partial)
                for name in _member_names(role, MemberKind.USER)
            )
        )

    group_name = search_filter.get(fp.GROUP_NAME)
    if group_name:
        predicates.append(lambda role: group_name in _member_names(role, MemberKind.GROUP))

    group_name_partial = search_filter.get(fp.GROUP_NAME_PARTIAL)
    if group_name_partial:
        predicates.append(
            lambda role: any(
                _contains(name, group_name_partial)
                for name in _member_names(role, MemberKind.GROUP)
            )
        )

    role_member = search_filter.get(fp.ROLE_MEMBER)
    if role_member:
        predicates.append(lambda role: role_member in _member_names(role, MemberKind.ROLE))

    return predicates


def apply_filter(roles: Iterable[Role], search_filter: SearchFilter | None) -> list[Role]:
    """Keep the roles matching every parameter of the filter.

    Args:
        roles: Roles to filter; order is preserved.
        search_filter: Filter to apply. None or an empty filter keeps all.

    Returns:
        Matching roles.
    """
    roles = list(roles)
    if search_filter is None or search_filter.is_empty():
        return roles
    predicates = build_predicates(search_filter)
    return [role for role in roles if all(predicate(role) for predicate in predicates)]
