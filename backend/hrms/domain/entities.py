from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from .permissions import EffectivePermissions, PermissionSet, PermissionType


class WriteOrigin(str, Enum):
    """Who is writing a role record.

    Only administrative edits may trigger the hierarchy-change resync; writes
    produced by a level sync or by bootstrap never re-enter it.
    """

    ADMIN_EDIT = "admin_edit"
    LEVEL_SYNC = "level_sync"
    BOOTSTRAP = "bootstrap"

    @property
    def triggers_resync(self) -> bool:
        return self is WriteOrigin.ADMIN_EDIT


@dataclass
class AccessLevelData:
    level: int
    name: str
    description: str = ""
    component_permissions: PermissionSet = field(default_factory=PermissionSet)
    feature_permissions: PermissionSet = field(default_factory=PermissionSet)
    cascade_enabled: bool = True
    is_system_level: bool = False
    is_active: bool = True
    id: int | None = None

    def permissions(self, permission_type: PermissionType) -> PermissionSet:
        if permission_type is PermissionType.COMPONENT:
            return self.component_permissions
        return self.feature_permissions

    def with_permissions(
        self, permission_type: PermissionType, permissions: PermissionSet
    ) -> "AccessLevelData":
        if permission_type is PermissionType.COMPONENT:
            return replace(self, component_permissions=permissions)
        return replace(self, feature_permissions=permissions)


@dataclass
class RoleData:
    role_id: str
    display_name: str
    hierarchy_level: int
    description: str = ""
    component_permissions: PermissionSet = field(default_factory=PermissionSet)
    feature_permissions: PermissionSet = field(default_factory=PermissionSet)
    is_system_role: bool = False
    is_active: bool = True
    id: int | None = None

    def permissions(self, permission_type: PermissionType) -> PermissionSet:
        if permission_type is PermissionType.COMPONENT:
            return self.component_permissions
        return self.feature_permissions

    def with_permissions(
        self, permission_type: PermissionType, permissions: PermissionSet
    ) -> "RoleData":
        if permission_type is PermissionType.COMPONENT:
            return replace(self, component_permissions=permissions)
        return replace(self, feature_permissions=permissions)

    def effective_permissions(self) -> EffectivePermissions:
        return EffectivePermissions(
            components=self.component_permissions.effective(),
            features=self.feature_permissions.effective(),
        )

    def has_overrides(self) -> bool:
        return (
            self.component_permissions.has_overrides()
            or self.feature_permissions.has_overrides()
        )
