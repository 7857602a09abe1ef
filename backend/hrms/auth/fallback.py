"""
Static role table used when the permission registry cannot be read.

This is a degraded mode: it knows fewer roles than a healthy registry and a
fixed hierarchy. Permissions come from the default layout of the role's
level. Roles missing from the table get nothing.
"""
from __future__ import annotations

from typing import Final

from ..domain.permissions import EffectivePermissions
from .capabilities import (
    default_component_permissions,
    default_feature_permissions,
    level_definition,
)

FALLBACK_ROLE_IDS: Final[tuple[str, ...]] = ("ADMIN", "CEO", "EMPLOYEE")

FALLBACK_HIERARCHY: Final[dict[str, int]] = {
    "ADMIN": 0,
    "CEO": 2,
    "EMPLOYEE": 4,
}


class StaticRoleTable:
    def __init__(
        self,
        role_ids: tuple[str, ...] = FALLBACK_ROLE_IDS,
        hierarchy: dict[str, int] | None = None,
    ) -> None:
        self.role_ids = role_ids
        self.hierarchy = dict(hierarchy if hierarchy is not None else FALLBACK_HIERARCHY)

    def knows(self, role: str) -> bool:
        return role in self.hierarchy

    def effective_permissions(self, role: str) -> EffectivePermissions:
        level = self.hierarchy.get(role)
        definition = level_definition(level) if level is not None else None
        if definition is None:
            return EffectivePermissions.empty()
        return EffectivePermissions(
            components=default_component_permissions(definition).effective(),
            features=default_feature_permissions(definition).effective(),
        )


DEFAULT_FALLBACK = StaticRoleTable()
