from __future__ import annotations

from pydantic import BaseModel, Field

from ..domain.entities import RoleData
from ..domain.permissions import PermissionType
from .permission import PermissionEntryInput, PermissionEntryRead, read_entries


class RoleCreate(BaseModel):
    role_id: str = Field(..., min_length=1, max_length=100)
    display_name: str = Field(..., min_length=1, max_length=255)
    hierarchy_level: int
    description: str = ""
    component_permissions: list[PermissionEntryInput] = Field(default_factory=list)
    feature_permissions: list[PermissionEntryInput] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    display_name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    hierarchy_level: int | None = None


class PermissionOverride(BaseModel):
    type: PermissionType
    capability_id: str = Field(..., min_length=1, max_length=100)
    has_access: bool


class RoleSummary(BaseModel):
    role_id: str
    display_name: str
    hierarchy_level: int

    @classmethod
    def from_data(cls, role: RoleData) -> "RoleSummary":
        return cls(
            role_id=role.role_id,
            display_name=role.display_name,
            hierarchy_level=role.hierarchy_level,
        )


class RoleRead(RoleSummary):
    description: str
    component_permissions: list[PermissionEntryRead]
    feature_permissions: list[PermissionEntryRead]
    is_system_role: bool
    is_active: bool
    has_overrides: bool

    @classmethod
    def from_data(cls, role: RoleData) -> "RoleRead":
        return cls(
            role_id=role.role_id,
            display_name=role.display_name,
            hierarchy_level=role.hierarchy_level,
            description=role.description,
            component_permissions=read_entries(role.component_permissions),
            feature_permissions=read_entries(role.feature_permissions),
            is_system_role=role.is_system_role,
            is_active=role.is_active,
            has_overrides=role.has_overrides(),
        )


class EffectivePermissionsRead(BaseModel):
    role_id: str
    components: list[str]
    features: list[str]
