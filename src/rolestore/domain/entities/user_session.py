"""User session entity.

A UserSession describes who is calling the role store. It is produced by
the authentication layer and only read here.
"""

from dataclasses import dataclass, field

ROLE_USER = "ROLE_USER"
ROLE_SYS_ADMIN = "ROLE_SYS_ADMIN"
ROLE_ADMIN_AUDITOR = "ROLE_ADMIN_AUDITOR"
ROLE_KEY_ADMIN = "ROLE_KEY_ADMIN"


@dataclass(frozen=True)
class UserSession:
    """Identity and console roles of the calling principal.

    Attributes:
        login_id: Login name of the user, None for anonymous/system callers.
        user_roles: Console roles granted to the user (e.g., 'ROLE_USER').
    """

    login_id: str | None
    user_roles: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Normalize user_roles to a frozenset."""
        if not isinstance(self.user_roles, frozenset):
            object.__setattr__(self, "user_roles", frozenset(self.user_roles))

    @property
    def is_plain_user(self) -> bool:
        """Check if the session belongs to an end user with no admin role."""
        return self.user_roles == frozenset({ROLE_USER})
