"""Search filter and paged result types for role listings."""

from dataclasses import dataclass, field

from rolestore.domain.entities.role import Role

# Filter parameter names understood by predicate filtering and SQL search.
ROLE_NAME = "role_name"
ROLE_NAME_PARTIAL = "role_name_partial"
ROLE_ID = "role_id"
USER_NAME = "user_name"
USER_NAME_PARTIAL = "user_name_partial"
GROUP_NAME = "group_name"
GROUP_NAME_PARTIAL = "group_name_partial"
ROLE_MEMBER = "role_member"

FILTER_PARAMS = frozenset(
    {
        ROLE_NAME,
        ROLE_NAME_PARTIAL,
        ROLE_ID,
        USER_NAME,
        USER_NAME_PARTIAL,
        GROUP_NAME,
        GROUP_NAME_PARTIAL,
        ROLE_MEMBER,
    }
)

SORT_FIELDS = ("id", "name", "created_at", "updated_at")


@dataclass
class SearchFilter:
    """Filter, sort and page parameters for listing roles.

    Attributes:
        params: Filter parameters keyed by the names in FILTER_PARAMS.
            Blank values are ignored.
        start_index: Zero-based index of the first row to return.
        max_rows: Page size.
        sort_by: One of SORT_FIELDS.
        sort_type: 'asc' or 'desc'.
    """

    params: dict[str, str] = field(default_factory=dict)
    start_index: int = 0
    max_rows: int = 200
    sort_by: str = "id"
    sort_type: str = "asc"

    def __post_init__(self) -> None:
        unknown = set(self.params) - FILTER_PARAMS
        if unknown:
            raise ValueError(f"Unknown filter parameter(s): {', '.join(sorted(unknown))}")
        if self.sort_by not in SORT_FIELDS:
            raise ValueError(f"Cannot sort roles by '{self.sort_by}'")
        if self.sort_type not in ("asc", "desc"):
            raise ValueError("sort_type must be 'asc' or 'desc'")
        if self.max_rows < 0:
            raise ValueError("max_rows cannot be negative")

    def get(self, name: str) -> str | None:
        value = self.params.get(name)
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    def is_empty(self) -> bool:
        return all(self.get(name) is None for name in self.params)


@dataclass
class RoleList:
    """One page of roles plus the paging metadata the caller asked for."""

    roles: list[Role] = field(default_factory=list)
    start_index: int = 0
    page_size: int = 0
    total_count: int = 0
    result_size: int = 0
    sort_by: str = "id"
    sort_type: str = "asc"
