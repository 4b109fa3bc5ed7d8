"""Exceptions raised by the role store."""


class RoleStoreError(Exception):
    """Base class for all role store errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DuplicateNameError(RoleStoreError):
    """Raised when a role with the same name already exists."""

    def __init__(self, role_name: str) -> None:
        self.role_name = role_name
        super().__init__(f"role with name: {role_name} already exists")


class NotFoundError(RoleStoreError):
    """Raised when the target of an operation does not exist."""


class RoleReferencedError(RoleStoreError):
    """Raised when a rename or delete is blocked by a live reference.

    Attributes:
        role_name: Name of the role being renamed or deleted.
        dependency: 'policy', 'role' or 'zone'.
        operation: 'rename' or 'delete'.
        referenced_by: Names of (some of) the referencing objects.
    """

    dependency = ""
    dependency_label = ""

    def __init__(
        self,
        role_name: str,
        operation: str,
        referenced_by: list[str] | None = None,
    ) -> None:
        self.role_name = role_name
        self.operation = operation
        self.referenced_by = list(referenced_by or [])

        if operation == "rename":
            message = (
                f"Rolename for '{role_name}' can not be updated as it is "
                f"referenced in one or more {self.dependency_label}"
            )
        else:
            message = (
                f"Role '{role_name}' can not be deleted as it is "
                f"referenced in one or more {self.dependency_label}"
            )
        if self.referenced_by:
            message += f": {', '.join(self.referenced_by)}"
        super().__init__(message)


class ReferencedInPolicyError(RoleReferencedError):
    dependency = "policy"
    dependency_label = "policies"


class ReferencedInRoleError(RoleReferencedError):
    dependency = "role"
    dependency_label = "other roles"


class ReferencedInZoneError(RoleReferencedError):
    dependency = "zone"
    dependency_label = "security zones"


class UnknownPrincipalError(RoleStoreError):
    """Raised when a role member names a user, group or role that does not exist."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.lower()} with name: {name} does not exist")


class VersionBumpFailedError(RoleStoreError):
    """A committed change could not advance the role version.

    Never raised to callers; built and logged by the version notifier.
    """
