"""SQLAlchemy models for RoleStore tables.

All models inherit from the Base class defined in database.py. Importing
this package registers every table on Base.metadata.
"""

from rolestore.infrastructure.persistence.models.global_state import GlobalStateModel
from rolestore.infrastructure.persistence.models.group import GroupModel
from rolestore.infrastructure.persistence.models.references import (
    GrantMappingModel,
    PolicyRoleRefModel,
    ZoneRoleRefModel,
)
from rolestore.infrastructure.persistence.models.role import RoleModel
from rolestore.infrastructure.persistence.models.role_audit_log import RoleAuditLogModel
from rolestore.infrastructure.persistence.models.role_refs import (
    RoleRefGroupModel,
    RoleRefRoleModel,
    RoleRefUserModel,
)
from rolestore.infrastructure.persistence.models.service import (
    ServiceModel,
    ServiceVersionInfoModel,
)
from rolestore.infrastructure.persistence.models.user import UserModel
from rolestore.infrastructure.persistence.models.users_groups import UsersGroupsModel

__all__ = [
    "GlobalStateModel",
    "GrantMappingModel",
    "GroupModel",
    "PolicyRoleRefModel",
    "RoleAuditLogModel",
    "RoleModel",
    "RoleRefGroupModel",
    "RoleRefRoleModel",
    "RoleRefUserModel",
    "ServiceModel",
    "ServiceVersionInfoModel",
    "UserModel",
    "UsersGroupsModel",
    "ZoneRoleRefModel",
]
