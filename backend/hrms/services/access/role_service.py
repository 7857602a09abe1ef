"""
Role registry use cases.

Every role write goes through `RoleService.save_role`, which receives the
write origin explicitly. Only administrative edits that move a role to a
different hierarchy level trigger a resync against the new level.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from ...auth.capabilities import DEFAULT_CATALOG, CapabilityCatalog
from ...domain.entities import RoleData, WriteOrigin
from ...domain.invariants import normalize_role_id, validate_level_number
from ...domain.merge import MergeMode, merge_role_with_level
from ...domain.permissions import EffectivePermissions, PermissionType
from ...domain.ports.access import AccessLevelRepository, RoleRepository
from ...errors import (
    CapabilityNotFoundError,
    DuplicateRoleError,
    RoleNotFoundError,
    SystemRoleProtectedError,
)

logger = logging.getLogger("hrms.access.roles")


@dataclass(frozen=True)
class RoleChanges:
    display_name: str | None = None
    description: str | None = None
    hierarchy_level: int | None = None


class RoleService:
    def __init__(
        self,
        roles: RoleRepository,
        levels: AccessLevelRepository,
        catalog: CapabilityCatalog = DEFAULT_CATALOG,
    ) -> None:
        self.roles = roles
        self.levels = levels
        self.catalog = catalog

    async def get_role(self, role_id: str) -> RoleData:
        normalized = normalize_role_id(role_id)
        role = await self.roles.get(normalized)
        if role is None:
            raise RoleNotFoundError(normalized)
        return role

    async def get_active_role(self, role_id: str) -> RoleData:
        """Like `get_role`, but a deactivated role counts as missing."""
        role = await self.get_role(role_id)
        if not role.is_active:
            raise RoleNotFoundError(role.role_id)
        return role

    async def list_active(self) -> list[RoleData]:
        return await self.roles.list_active()

    async def list_by_level(self, level: int) -> list[RoleData]:
        return await self.roles.list_by_level(level)

    async def create_role(self, role: RoleData) -> RoleData:
        """Create a role, merging any supplied permissions against its level.

        A role created without permissions starts as an inherited copy of its
        level. When the level does not exist yet, the supplied permissions are
        stored as given.
        """
        role = replace(role, role_id=normalize_role_id(role.role_id), id=None)
        validate_level_number(role.hierarchy_level)

        if await self.roles.get(role.role_id) is not None:
            raise DuplicateRoleError(role.role_id)

        level = await self.levels.get(role.hierarchy_level)
        if level is not None:
            role = merge_role_with_level(level, role, MergeMode.FULL)

        try:
            created = await self.roles.add(role)
            await self.roles.commit()
        except Exception:
            await self.roles.rollback()
            raise

        logger.info(
            "role_created role_id=%s hierarchy_level=%s level_found=%s",
            created.role_id,
            created.hierarchy_level,
            level is not None,
        )
        return created

    async def update_role(self, role_id: str, changes: RoleChanges) -> RoleData:
        current = await self.get_active_role(role_id)
        updated = current
        if changes.display_name is not None:
            updated = replace(updated, display_name=changes.display_name)
        if changes.description is not None:
            updated = replace(updated, description=changes.description)
        if changes.hierarchy_level is not None:
            validate_level_number(changes.hierarchy_level)
            updated = replace(updated, hierarchy_level=changes.hierarchy_level)

        return await self.save_role(
            updated,
            origin=WriteOrigin.ADMIN_EDIT,
            previous_hierarchy_level=current.hierarchy_level,
        )

    async def save_role(
        self,
        role: RoleData,
        *,
        origin: WriteOrigin,
        previous_hierarchy_level: int | None = None,
    ) -> RoleData:
        """Persist a role write.

        The hierarchy-change resync runs only for administrative writes that
        actually moved the role. Level sync and bootstrap writes never
        trigger it.
        """
        if (
            origin.triggers_resync
            and previous_hierarchy_level is not None
            and previous_hierarchy_level != role.hierarchy_level
        ):
            role = await self._resync_with_level(role)

        try:
            saved = await self.roles.save(role)
            await self.roles.commit()
        except Exception:
            await self.roles.rollback()
            raise
        return saved

    async def _resync_with_level(self, role: RoleData) -> RoleData:
        level = await self.levels.get(role.hierarchy_level)
        if level is None:
            logger.info(
                "role_resync_skipped role_id=%s hierarchy_level=%s reason=level_not_found",
                role.role_id,
                role.hierarchy_level,
            )
            return role
        logger.info(
            "role_resync role_id=%s hierarchy_level=%s", role.role_id, role.hierarchy_level
        )
        return merge_role_with_level(level, role, MergeMode.FULL)

    async def override_permission(
        self,
        role_id: str,
        permission_type: PermissionType,
        capability_id: str,
        has_access: bool,
    ) -> RoleData:
        """Force one capability on a role to a role-specific value.

        This bypasses the merge entirely. A capability the role does not carry
        yet is added when the application catalog knows it.
        """
        role = await self.get_active_role(role_id)
        permissions = role.permissions(permission_type)

        display_name = None
        if capability_id not in permissions:
            capability = self.catalog.get(permission_type, capability_id)
            if capability is None:
                raise CapabilityNotFoundError(permission_type.value, capability_id)
            display_name = capability.display_name

        updated = role.with_permissions(
            permission_type,
            permissions.override(capability_id, has_access, display_name=display_name),
        )
        saved = await self.save_role(updated, origin=WriteOrigin.ADMIN_EDIT)
        logger.info(
            "role_override role_id=%s type=%s capability_id=%s has_access=%s",
            saved.role_id,
            permission_type.value,
            capability_id,
            has_access,
        )
        return saved

    async def get_effective_permissions(self, role_id: str) -> EffectivePermissions:
        role = await self.get_role(role_id)
        return role.effective_permissions()

    async def deactivate_role(self, role_id: str) -> RoleData:
        role = await self.get_active_role(role_id)
        if role.is_system_role:
            raise SystemRoleProtectedError()
        return await self.save_role(replace(role, is_active=False), origin=WriteOrigin.ADMIN_EDIT)
