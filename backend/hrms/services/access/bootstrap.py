"""
Seeding and legacy migration for access levels and roles.

Bootstrap writes never cascade and never trigger a role resync. Seeding
skips records that already exist and import re-merges them, so the whole
run can be repeated.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

from ...auth.capabilities import (
    DEFAULT_LEVEL_DEFINITIONS,
    DEFAULT_ROLE_DEFINITIONS,
    build_default_level,
    build_default_role,
)
from ...domain.entities import RoleData, WriteOrigin
from ...domain.invariants import InvariantViolation, normalize_role_id
from ...domain.merge import MergeMode, merge_role_with_level
from ...domain.ports.access import AccessLevelRepository, RoleRepository
from ...schemas.legacy import LegacyRoleRecord
from .role_service import RoleService

logger = logging.getLogger("hrms.bootstrap")


@dataclass
class BootstrapResult:
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BootstrapSummary:
    level_count: int
    role_count: int
    roles_per_level: dict[int, int]
    roles_with_overrides: int


def _is_migrated(role: RoleData) -> bool:
    return any(
        entry.role_specific or entry.inherited_from_level
        for entry in (*role.component_permissions, *role.feature_permissions)
    )


class BootstrapService:
    def __init__(self, levels: AccessLevelRepository, roles: RoleRepository) -> None:
        self.levels = levels
        self.roles = roles
        self.role_service = RoleService(roles, levels)

    async def seed_levels(self) -> BootstrapResult:
        result = BootstrapResult()
        for definition in DEFAULT_LEVEL_DEFINITIONS:
            key = str(definition.level)
            if await self.levels.get(definition.level) is not None:
                logger.info("seed_level_skipped level=%s reason=exists", definition.level)
                result.skipped.append(key)
                continue
            try:
                await self.levels.add(build_default_level(definition))
                await self.levels.commit()
            except SQLAlchemyError:
                await self.levels.rollback()
                logger.exception("seed_level_failed level=%s", definition.level)
                result.failed.append(key)
                continue
            logger.info("seed_level_created level=%s name=%s", definition.level, definition.name)
            result.created.append(key)
        return result

    async def seed_default_roles(self) -> BootstrapResult:
        result = BootstrapResult()
        for definition in DEFAULT_ROLE_DEFINITIONS:
            if await self.roles.get(definition.role_id) is not None:
                logger.info("seed_role_skipped role_id=%s reason=exists", definition.role_id)
                result.skipped.append(definition.role_id)
                continue
            level = await self.levels.get(definition.hierarchy_level)
            if level is None:
                logger.warning(
                    "seed_role_skipped role_id=%s reason=level_not_found level=%s",
                    definition.role_id,
                    definition.hierarchy_level,
                )
                result.skipped.append(definition.role_id)
                continue
            try:
                await self.roles.add(build_default_role(definition, level))
                await self.roles.commit()
            except SQLAlchemyError:
                await self.roles.rollback()
                logger.exception("seed_role_failed role_id=%s", definition.role_id)
                result.failed.append(definition.role_id)
                continue
            logger.info("seed_role_created role_id=%s", definition.role_id)
            result.created.append(definition.role_id)
        return result

    async def import_legacy_roles(self, records: Iterable[LegacyRoleRecord]) -> BootstrapResult:
        """Merge legacy role records into the level model.

        Roles that already carry provenance markers keep their stored sets
        as the role side of the merge, so re-running an import after
        administrators added overrides leaves those overrides intact.
        """
        result = BootstrapResult()
        for record in records:
            try:
                role_id = normalize_role_id(record.role_id)
            except InvariantViolation:
                result.failed.append(record.role_id)
                continue

            try:
                existing = await self.roles.get(role_id)
                if existing is not None and _is_migrated(existing):
                    candidate = existing
                else:
                    candidate = RoleData(
                        role_id=role_id,
                        display_name=record.display_name,
                        hierarchy_level=record.hierarchy_level,
                        description=record.description,
                        component_permissions=record.component_permissions(),
                        feature_permissions=record.feature_permissions(),
                        is_system_role=record.is_system_role,
                        is_active=record.is_active,
                        id=existing.id if existing is not None else None,
                    )

                level = await self.levels.get(candidate.hierarchy_level)
                if level is not None:
                    candidate = merge_role_with_level(level, candidate, MergeMode.FULL)
                else:
                    logger.warning(
                        "legacy_role_unmerged role_id=%s reason=level_not_found level=%s",
                        role_id,
                        candidate.hierarchy_level,
                    )

                if existing is None:
                    await self.roles.add(candidate)
                    await self.roles.commit()
                    result.created.append(role_id)
                else:
                    await self.role_service.save_role(candidate, origin=WriteOrigin.BOOTSTRAP)
                    result.updated.append(role_id)
            except (SQLAlchemyError, InvariantViolation):
                await self.roles.rollback()
                logger.exception("legacy_role_import_failed role_id=%s", role_id)
                result.failed.append(role_id)
                continue
            logger.info("legacy_role_imported role_id=%s", role_id)
        return result

    async def resync_existing_roles(self) -> BootstrapResult:
        """Full-set merge of every active role against its current level."""
        result = BootstrapResult()
        for role in await self.roles.list_active():
            level = await self.levels.get(role.hierarchy_level)
            if level is None:
                result.skipped.append(role.role_id)
                continue
            try:
                await self.role_service.save_role(
                    merge_role_with_level(level, role, MergeMode.FULL),
                    origin=WriteOrigin.BOOTSTRAP,
                )
            except (SQLAlchemyError, InvariantViolation):
                logger.exception("role_resync_failed role_id=%s", role.role_id)
                result.failed.append(role.role_id)
                continue
            result.updated.append(role.role_id)
        return result

    async def summarize(self) -> BootstrapSummary:
        levels = await self.levels.list_active()
        roles = await self.roles.list_active()
        roles_per_level = {level.level: 0 for level in levels}
        for role in roles:
            roles_per_level[role.hierarchy_level] = roles_per_level.get(role.hierarchy_level, 0) + 1
        return BootstrapSummary(
            level_count=len(levels),
            role_count=len(roles),
            roles_per_level=roles_per_level,
            roles_with_overrides=sum(1 for role in roles if role.has_overrides()),
        )
