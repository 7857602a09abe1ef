from ..domain.entities import AccessLevelData, RoleData
from ..domain.permissions import PermissionSet
from ..models.access_level import AccessLevel
from ..models.role import Role


def access_level_to_data(row: AccessLevel) -> AccessLevelData:
    return AccessLevelData(
        id=row.id,
        level=row.level,
        name=row.name,
        description=row.description or "",
        component_permissions=PermissionSet.from_dicts(row.component_permissions),
        feature_permissions=PermissionSet.from_dicts(row.feature_permissions),
        cascade_enabled=row.cascade_enabled,
        is_system_level=row.is_system_level,
        is_active=row.is_active,
    )


def apply_access_level(row: AccessLevel, data: AccessLevelData) -> None:
    row.level = data.level
    row.name = data.name
    row.description = data.description
    row.component_permissions = data.component_permissions.to_dicts()
    row.feature_permissions = data.feature_permissions.to_dicts()
    row.cascade_enabled = data.cascade_enabled
    row.is_system_level = data.is_system_level
    row.is_active = data.is_active


def role_to_data(row: Role) -> RoleData:
    return RoleData(
        id=row.id,
        role_id=row.role_id,
        display_name=row.display_name,
        description=row.description or "",
        hierarchy_level=row.hierarchy_level,
        component_permissions=PermissionSet.from_dicts(row.component_permissions),
        feature_permissions=PermissionSet.from_dicts(row.feature_permissions),
        is_system_role=row.is_system_role,
        is_active=row.is_active,
    )


def apply_role(row: Role, data: RoleData) -> None:
    row.role_id = data.role_id
    row.display_name = data.display_name
    row.description = data.description
    row.hierarchy_level = data.hierarchy_level
    row.component_permissions = data.component_permissions.to_dicts()
    row.feature_permissions = data.feature_permissions.to_dicts()
    row.is_system_role = data.is_system_role
    row.is_active = data.is_active
