"""Versioned snapshot of the roles applicable to a service."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from rolestore.domain.entities.role import Role


@dataclass(frozen=True)
class RoleSnapshot:
    """Immutable, version-stamped list of roles served to enforcement agents.

    The embedded version is the role version observed when the list was
    computed. A cache slot holding a snapshot is replaced, never mutated.

    Attributes:
        service_name: Service scope the roles were computed for.
        version: Role version the snapshot was computed at.
        roles: Roles applicable to the service, ordered by id.
        computed_at: When the snapshot was built.
    """

    service_name: str
    version: int
    roles: tuple[Role, ...] = ()
    computed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def role_names(self) -> list[str]:
        return [role.name for role in self.roles]
