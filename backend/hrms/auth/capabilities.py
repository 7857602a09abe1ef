"""
Application capability catalog and default access-level layout.

The catalog is owned by the surrounding application. The access-control
engine only reads it: to name capabilities that a role override adds, to
seed the default levels and roles, and to answer degraded-mode decisions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..domain.entities import AccessLevelData, RoleData
from ..domain.permissions import PermissionEntry, PermissionSet, PermissionType


@dataclass(frozen=True)
class Capability:
    capability_id: str
    display_name: str


COMPONENT_CAPABILITIES: Final[tuple[Capability, ...]] = (
    Capability("dashboard", "Dashboard"),
    Capability("employees", "Employee Management"),
    Capability("attendance", "Attendance"),
    Capability("leave", "Leave Management"),
    Capability("salary", "Salary"),
    Capability("peer-rating", "Peer Rating"),
    Capability("variable-remuneration", "Variable Remuneration"),
    Capability("remuneration", "Remuneration"),
    Capability("calendar", "Calendar"),
    Capability("efiling", "E-Filing"),
    Capability("settings", "Settings"),
    Capability("profile", "Profile"),
    Capability("admin", "Admin Panel"),
)

FEATURE_CAPABILITIES: Final[tuple[Capability, ...]] = (
    Capability("employee.create", "Create Employee"),
    Capability("employee.edit", "Edit Employee"),
    Capability("employee.delete", "Delete Employee"),
    Capability("employee.viewAll", "View All Employees"),
    Capability("leave.approve", "Approve Leave"),
    Capability("leave.apply", "Apply Leave"),
    Capability("attendance.mark", "Mark Attendance"),
    Capability("attendance.viewReports", "View Attendance Reports"),
    Capability("remuneration.view", "View Remuneration"),
    Capability("roles.manage", "Manage Roles & Permissions"),
    Capability("levels.manage", "Manage Access Levels"),
)


class CapabilityCatalog:
    def __init__(
        self,
        components: tuple[Capability, ...] = COMPONENT_CAPABILITIES,
        features: tuple[Capability, ...] = FEATURE_CAPABILITIES,
    ) -> None:
        self._by_type: dict[PermissionType, dict[str, Capability]] = {
            PermissionType.COMPONENT: {c.capability_id: c for c in components},
            PermissionType.FEATURE: {c.capability_id: c for c in features},
        }

    def get(self, permission_type: PermissionType, capability_id: str) -> Capability | None:
        return self._by_type[permission_type].get(capability_id)


DEFAULT_CATALOG = CapabilityCatalog()


@dataclass(frozen=True)
class LevelDefinition:
    level: int
    name: str
    description: str
    denied_components: frozenset[str]
    granted_features: tuple[str, ...]


# Every level lists all components; features appear only where granted
DEFAULT_LEVEL_DEFINITIONS: Final[tuple[LevelDefinition, ...]] = (
    LevelDefinition(
        level=0,
        name="Super Admin",
        description="Highest level with complete system access including admin panel",
        denied_components=frozenset({"salary", "variable-remuneration"}),
        granted_features=tuple(c.capability_id for c in FEATURE_CAPABILITIES),
    ),
    LevelDefinition(
        level=1,
        name="Senior Management",
        description="Senior management with high-level access to operations",
        denied_components=frozenset({"salary", "variable-remuneration", "admin"}),
        granted_features=(
            "employee.edit",
            "employee.viewAll",
            "leave.approve",
            "leave.apply",
            "attendance.mark",
            "attendance.viewReports",
            "remuneration.view",
        ),
    ),
    LevelDefinition(
        level=2,
        name="Middle Management",
        description="Middle management with operational access",
        denied_components=frozenset({"salary", "variable-remuneration", "admin"}),
        granted_features=(
            "employee.create",
            "employee.edit",
            "employee.delete",
            "employee.viewAll",
            "leave.approve",
            "leave.apply",
            "attendance.mark",
            "attendance.viewReports",
            "remuneration.view",
        ),
    ),
    LevelDefinition(
        level=3,
        name="Department Management",
        description="Department-level management with limited administrative access",
        denied_components=frozenset(
            {"salary", "peer-rating", "variable-remuneration", "remuneration", "admin"}
        ),
        granted_features=(
            "employee.viewAll",
            "leave.apply",
            "attendance.mark",
            "attendance.viewReports",
        ),
    ),
    LevelDefinition(
        level=4,
        name="Staff",
        description="General staff with basic access to personal features",
        denied_components=frozenset(
            {
                "employees",
                "salary",
                "peer-rating",
                "variable-remuneration",
                "remuneration",
                "settings",
                "admin",
            }
        ),
        granted_features=("leave.apply", "attendance.mark"),
    ),
)

LEVEL_NAMES: Final[dict[int, str]] = {
    definition.level: definition.name for definition in DEFAULT_LEVEL_DEFINITIONS
}


@dataclass(frozen=True)
class RoleDefinition:
    role_id: str
    display_name: str
    hierarchy_level: int


DEFAULT_ROLE_DEFINITIONS: Final[tuple[RoleDefinition, ...]] = (
    RoleDefinition("ADMIN", "Admin", 0),
    RoleDefinition("OFFICER_IN_CHARGE", "Officer in Charge", 1),
    RoleDefinition("FACULTY_IN_CHARGE", "Faculty in Charge", 1),
    RoleDefinition("CEO", "CEO", 2),
    RoleDefinition("INCUBATION_MANAGER", "Incubation Manager", 3),
    RoleDefinition("ACCOUNTANT", "Accountant", 3),
    RoleDefinition("EMPLOYEE", "Employee", 4),
)

SYSTEM_ROLE_IDS: Final[tuple[str, ...]] = tuple(
    definition.role_id for definition in DEFAULT_ROLE_DEFINITIONS
)


def level_definition(level: int) -> LevelDefinition | None:
    return next((d for d in DEFAULT_LEVEL_DEFINITIONS if d.level == level), None)


def default_component_permissions(definition: LevelDefinition) -> PermissionSet:
    return PermissionSet(
        PermissionEntry(
            capability_id=capability.capability_id,
            display_name=capability.display_name,
            has_access=capability.capability_id not in definition.denied_components,
        )
        for capability in COMPONENT_CAPABILITIES
    )


def default_feature_permissions(definition: LevelDefinition) -> PermissionSet:
    names = {c.capability_id: c.display_name for c in FEATURE_CAPABILITIES}
    return PermissionSet(
        PermissionEntry(capability_id=feature_id, display_name=names[feature_id], has_access=True)
        for feature_id in definition.granted_features
    )


def build_default_level(definition: LevelDefinition) -> AccessLevelData:
    return AccessLevelData(
        level=definition.level,
        name=definition.name,
        description=definition.description,
        component_permissions=default_component_permissions(definition),
        feature_permissions=default_feature_permissions(definition),
        cascade_enabled=True,
        is_system_level=True,
    )


def build_default_role(definition: RoleDefinition, level: AccessLevelData) -> RoleData:
    return RoleData(
        role_id=definition.role_id,
        display_name=definition.display_name,
        hierarchy_level=definition.hierarchy_level,
        description=f"{definition.display_name} role",
        component_permissions=level.component_permissions.as_inherited(),
        feature_permissions=level.feature_permissions.as_inherited(),
        is_system_role=True,
    )
