"""Persistence repositories for database operations."""

from rolestore.infrastructure.persistence.repositories.global_state_repository import (
    GlobalStateRepository,
)
from rolestore.infrastructure.persistence.repositories.grant_mapping_repository import (
    GrantMappingRepository,
)
from rolestore.infrastructure.persistence.repositories.group_repository import (
    GroupRepository,
)
from rolestore.infrastructure.persistence.repositories.reference_count_repository import (
    ReferenceCountRepository,
)
from rolestore.infrastructure.persistence.repositories.role_audit_log_repository import (
    RoleAuditLogRepository,
)
from rolestore.infrastructure.persistence.repositories.role_ref_repository import (
    RoleRefRepository,
)
from rolestore.infrastructure.persistence.repositories.role_repository import (
    RoleRepository,
    role_from_model,
)
from rolestore.infrastructure.persistence.repositories.service_repository import (
    ServiceRepository,
)
from rolestore.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = [
    "GlobalStateRepository",
    "GrantMappingRepository",
    "GroupRepository",
    "ReferenceCountRepository",
    "RoleAuditLogRepository",
    "RoleRefRepository",
    "RoleRepository",
    "ServiceRepository",
    "UserRepository",
    "role_from_model",
]
