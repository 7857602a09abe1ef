"""
Access level registry use cases.

Permission edits on a level with cascade enabled run the cascade
synchronously, after the level itself has been committed. The caller gets
the cascade report back; cascade failures never undo the level edit.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from ...domain.entities import AccessLevelData, RoleData, WriteOrigin
from ...domain.invariants import validate_level_number
from ...domain.merge import MergeMode, merge_role_with_level
from ...domain.permissions import PermissionSet, PermissionType
from ...domain.ports.access import AccessLevelRepository, RoleRepository
from ...errors import (
    CapabilityNotFoundError,
    DuplicateLevelError,
    LevelInUseError,
    LevelNotFoundError,
    SystemLevelProtectedError,
)
from .cascade import CascadeCoordinator, CascadeReport
from .role_service import RoleService

logger = logging.getLogger("hrms.access.levels")


@dataclass(frozen=True)
class LevelChanges:
    level: int | None = None
    name: str | None = None
    description: str | None = None
    component_permissions: PermissionSet | None = None
    feature_permissions: PermissionSet | None = None
    cascade_enabled: bool | None = None


@dataclass(frozen=True)
class LevelSummary:
    level: AccessLevelData
    role_count: int


@dataclass(frozen=True)
class LevelUpdateResult:
    level: AccessLevelData
    cascaded: bool
    affected_roles: list[RoleData]
    cascade_report: CascadeReport | None = None


class LevelService:
    def __init__(
        self,
        levels: AccessLevelRepository,
        roles: RoleRepository,
        role_service: RoleService | None = None,
        cascade: CascadeCoordinator | None = None,
    ) -> None:
        self.levels = levels
        self.roles = roles
        self.role_service = role_service or RoleService(roles, levels)
        self.cascade = cascade or CascadeCoordinator(self.role_service)

    async def create_level(self, level: AccessLevelData) -> AccessLevelData:
        validate_level_number(level.level)
        if await self.levels.get(level.level) is not None:
            raise DuplicateLevelError(level.level)

        try:
            created = await self.levels.add(replace(level, id=None, is_active=True))
            await self.levels.commit()
        except Exception:
            await self.levels.rollback()
            raise

        logger.info("level_created level=%s name=%s", created.level, created.name)
        return created

    async def get_level(self, level: int) -> AccessLevelData:
        found = await self.levels.get(level)
        if found is None:
            raise LevelNotFoundError(level)
        return found

    async def list_levels(self) -> list[LevelSummary]:
        levels = await self.levels.list_active()
        return [
            LevelSummary(level=item, role_count=await self.roles.count_by_level(item.level))
            for item in levels
        ]

    async def get_affected_roles(self, level: int) -> list[RoleData]:
        await self.get_level(level)
        return await self.roles.list_by_level(level)

    async def update_level(self, level: int, changes: LevelChanges) -> LevelUpdateResult:
        current = await self.get_level(level)

        if changes.level is not None and changes.level != current.level:
            await self._check_renumber(current, changes.level)

        affected_roles = await self.roles.list_by_level(current.level)

        permissions_changed = (
            changes.component_permissions is not None
            and changes.component_permissions != current.component_permissions
        ) or (
            changes.feature_permissions is not None
            and changes.feature_permissions != current.feature_permissions
        )

        updated = replace(
            current,
            level=changes.level if changes.level is not None else current.level,
            name=changes.name if changes.name is not None else current.name,
            description=(
                changes.description if changes.description is not None else current.description
            ),
            component_permissions=(
                changes.component_permissions
                if changes.component_permissions is not None
                else current.component_permissions
            ),
            feature_permissions=(
                changes.feature_permissions
                if changes.feature_permissions is not None
                else current.feature_permissions
            ),
            cascade_enabled=(
                changes.cascade_enabled
                if changes.cascade_enabled is not None
                else current.cascade_enabled
            ),
        )

        try:
            saved = await self.levels.save(updated)
            await self.levels.commit()
        except Exception:
            await self.levels.rollback()
            raise

        report = None
        if permissions_changed and saved.cascade_enabled:
            report = await self.cascade.cascade(saved)

        logger.info(
            "level_updated level=%s permissions_changed=%s cascaded=%s affected_roles=%s",
            saved.level,
            permissions_changed,
            report is not None,
            len(affected_roles),
        )
        return LevelUpdateResult(
            level=saved,
            cascaded=report is not None,
            affected_roles=affected_roles,
            cascade_report=report,
        )

    async def _check_renumber(self, current: AccessLevelData, new_level: int) -> None:
        if current.is_system_level:
            raise SystemLevelProtectedError("Cannot change level number for system levels")
        validate_level_number(new_level)
        if await self.levels.get(new_level) is not None:
            raise DuplicateLevelError(new_level)
        # Roles reference levels by number, so renumbering would orphan them
        in_use = await self.roles.count_by_level(current.level)
        if in_use:
            raise LevelInUseError(current.level, in_use)

    async def set_capability_access(
        self,
        level: int,
        permission_type: PermissionType,
        capability_id: str,
        has_access: bool,
    ) -> LevelUpdateResult:
        current = await self.get_level(level)
        permissions = current.permissions(permission_type)
        if capability_id not in permissions:
            raise CapabilityNotFoundError(permission_type.value, capability_id)

        updated = permissions.with_access(capability_id, has_access)
        if permission_type is PermissionType.COMPONENT:
            changes = LevelChanges(component_permissions=updated)
        else:
            changes = LevelChanges(feature_permissions=updated)
        return await self.update_level(level, changes)

    async def set_component_access(
        self, level: int, capability_id: str, has_access: bool
    ) -> LevelUpdateResult:
        return await self.set_capability_access(
            level, PermissionType.COMPONENT, capability_id, has_access
        )

    async def set_feature_access(
        self, level: int, capability_id: str, has_access: bool
    ) -> LevelUpdateResult:
        return await self.set_capability_access(
            level, PermissionType.FEATURE, capability_id, has_access
        )

    async def toggle_cascade(self, level: int) -> AccessLevelData:
        current = await self.get_level(level)
        try:
            saved = await self.levels.save(
                replace(current, cascade_enabled=not current.cascade_enabled)
            )
            await self.levels.commit()
        except Exception:
            await self.levels.rollback()
            raise
        logger.info("level_cascade_toggled level=%s cascade_enabled=%s", level, saved.cascade_enabled)
        return saved

    async def delete_level(self, level: int) -> AccessLevelData:
        current = await self.get_level(level)
        if current.is_system_level:
            raise SystemLevelProtectedError("Cannot delete system access levels")

        in_use = await self.roles.count_by_level(current.level)
        if in_use:
            raise LevelInUseError(current.level, in_use)

        try:
            saved = await self.levels.save(replace(current, is_active=False))
            await self.levels.commit()
        except Exception:
            await self.levels.rollback()
            raise
        logger.info("level_deleted level=%s", level)
        return saved

    async def apply_level_to_role(self, level: int, role_id: str) -> RoleData:
        """Merge a level into one role using the role's full current set."""
        access_level = await self.get_level(level)
        role = await self.role_service.get_active_role(role_id)
        merged = merge_role_with_level(access_level, role, MergeMode.FULL)
        saved = await self.role_service.save_role(merged, origin=WriteOrigin.LEVEL_SYNC)
        logger.info("level_applied_to_role level=%s role_id=%s", level, saved.role_id)
        return saved
