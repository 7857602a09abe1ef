"""
Level/role permission merge.

`merge_permissions` is a total function over two permission sets. For every
capability id in the union of both sides:

- present on both sides with different values: the role value wins and is
  tagged as a role-specific override;
- present on both sides with equal values: the level entry is used and tagged
  as inherited, collapsing any earlier override marker;
- role side only: the role entry is kept as a role-specific override;
- level side only: the level entry is tagged as inherited.

Output order is level order followed by role-only ids. Callers must not rely
on it.

Two call modes exist and must stay distinct. A cascade triggered by a level
edit merges against the role's override entries only, so values the role
merely inherited earlier cannot resurface as overrides. An explicit apply,
a hierarchy change resync and bulk import merge against the role's full set.
"""
from __future__ import annotations

from enum import Enum

from .entities import AccessLevelData, RoleData
from .invariants import validate_merged_provenance
from .permissions import PermissionEntry, PermissionSet, PermissionType


class MergeMode(str, Enum):
    CASCADE = "cascade"
    FULL = "full"


def merge_permissions(
    level_permissions: PermissionSet, role_permissions: PermissionSet
) -> PermissionSet:
    merged: list[PermissionEntry] = []

    for level_entry in level_permissions:
        role_entry = role_permissions.get(level_entry.capability_id)
        if role_entry is not None and role_entry.has_access != level_entry.has_access:
            merged.append(role_entry.as_override())
        else:
            merged.append(level_entry.as_inherited())

    for role_entry in role_permissions:
        if role_entry.capability_id not in level_permissions:
            merged.append(role_entry.as_override())

    return PermissionSet(merged)


def merge_role_with_level(
    level: AccessLevelData, role: RoleData, mode: MergeMode
) -> RoleData:
    """Return a copy of `role` with both permission sets merged against `level`."""
    merged = role
    for permission_type in PermissionType:
        role_side = role.permissions(permission_type)
        if mode is MergeMode.CASCADE:
            role_side = role_side.role_specific_only()
        merged_set = merge_permissions(level.permissions(permission_type), role_side)
        validate_merged_provenance(merged_set, owner=role.role_id)
        merged = merged.with_permissions(permission_type, merged_set)
    return merged
