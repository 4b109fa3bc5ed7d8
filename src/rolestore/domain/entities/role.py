"""Role entity for delegated access.

A role is a named collection of principals (users, groups and other
roles). Policies, other roles and security zones refer to a role by
name, so granting or revoking access for many principals only requires
editing the role.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

MAX_ROLE_NAME_LENGTH = 255


class MemberKind(str, Enum):
    """Kind of principal a role member refers to."""

    USER = "USER"
    GROUP = "GROUP"
    ROLE = "ROLE"


@dataclass(frozen=True)
class RoleMember:
    """A single principal listed in a role.

    Attributes:
        kind: Whether the member is a user, a group or a nested role.
        name: Name of the principal.
        is_admin: Delegated-admin flag; admins may edit the role's membership.
    """

    kind: MemberKind
    name: str
    is_admin: bool = False

    def __post_init__(self) -> None:
        """Validate member data after initialization."""
        if not isinstance(self.kind, MemberKind):
            object.__setattr__(self, "kind", MemberKind(self.kind))
        if not self.name or not self.name.strip():
            raise ValueError(f"{self.kind.value} member name is required")

    @classmethod
    def user(cls, name: str, is_admin: bool = False) -> "RoleMember":
        return cls(MemberKind.USER, name, is_admin)

    @classmethod
    def group(cls, name: str, is_admin: bool = False) -> "RoleMember":
        return cls(MemberKind.GROUP, name, is_admin)

    @classmethod
    def role(cls, name: str, is_admin: bool = False) -> "RoleMember":
        return cls(MemberKind.ROLE, name, is_admin)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "name": self.name, "is_admin": self.is_admin}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoleMember":
        return cls(
            kind=MemberKind(data["kind"]),
            name=data["name"],
            is_admin=bool(data.get("is_admin", False)),
        )


@dataclass
class Role:
    """Role entity.

    Attributes:
        id: Generated identifier, None until the role is persisted.
        name: Unique role name.
        description: Optional description of the role's purpose.
        members: Users, groups and nested roles granted this role.
        options: Free-form options map.
        created_by: Login id of the creator.
        updated_by: Login id of the last updater.
        created_at: Timestamp when the role was created.
        updated_at: Timestamp when the role was last updated.
        policy_version: Bumped whenever the role changes, for consumers
            caching policies that reference it.
        role_version: Bumped on change when roles are versioned per service.
    """

    name: str
    id: int | None = None
    description: str | None = None
    members: list[RoleMember] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    policy_version: int = 0
    role_version: int = 0

    def __post_init__(self) -> None:
        """Validate role data after initialization."""
        if not self.name or not self.name.strip():
            raise ValueError("Role name is required")
        if len(self.name) > MAX_ROLE_NAME_LENGTH:
            raise ValueError(
                f"Role name cannot exceed {MAX_ROLE_NAME_LENGTH} characters"
            )

        seen: set[tuple[MemberKind, str]] = set()
        for member in self.members:
            if member.kind is MemberKind.ROLE and member.name == self.name:
                raise ValueError(f"Role '{self.name}' cannot be a member of itself")
            key = (member.kind, member.name)
            if key in seen:
                raise ValueError(
                    f"Duplicate {member.kind.value} member '{member.name}' in role '{self.name}'"
                )
            seen.add(key)

    def members_of(self, kind: MemberKind) -> list[RoleMember]:
        return [member for member in self.members if member.kind is kind]

    @property
    def users(self) -> list[str]:
        return [member.name for member in self.members_of(MemberKind.USER)]

    @property
    def groups(self) -> list[str]:
        return [member.name for member in self.members_of(MemberKind.GROUP)]

    @property
    def roles(self) -> list[str]:
        return [member.name for member in self.members_of(MemberKind.ROLE)]

    def to_dict(self) -> dict[str, Any]:
        """Serialize the role to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "members": [member.to_dict() for member in self.members],
            "options": dict(self.options),
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "policy_version": self.policy_version,
            "role_version": self.role_version,
        }
