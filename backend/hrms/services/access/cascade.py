"""
Level to role permission cascade.

The cascade walks the active roles of one level sequentially. Each role is
merged in cascade mode and persisted on its own; a failure is recorded and
logged and the loop moves on. Nothing is rolled back across roles, so an
interrupted cascade leaves a mix of updated and untouched roles. An
administrator repairs individual roles with "apply level to role".
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ...domain.entities import AccessLevelData, WriteOrigin
from ...domain.merge import MergeMode, merge_role_with_level
from .role_service import RoleService

logger = logging.getLogger("hrms.access.cascade")


@dataclass(frozen=True)
class CascadeFailure:
    role_id: str
    cause: str


@dataclass
class CascadeReport:
    level: int
    updated_role_ids: list[str] = field(default_factory=list)
    failures: list[CascadeFailure] = field(default_factory=list)
    load_error: str | None = None

    @property
    def updated_count(self) -> int:
        return len(self.updated_role_ids)

    @property
    def failed_count(self) -> int:
        return len(self.failures)


class CascadeCoordinator:
    def __init__(self, role_service: RoleService) -> None:
        self.role_service = role_service

    async def cascade(self, level: AccessLevelData) -> CascadeReport:
        report = CascadeReport(level=level.level)

        try:
            roles = await self.role_service.list_by_level(level.level)
        except Exception as exc:
            logger.exception("cascade_load_failed level=%s", level.level)
            report.load_error = str(exc) or exc.__class__.__name__
            return report

        for role in roles:
            try:
                merged = merge_role_with_level(level, role, MergeMode.CASCADE)
                await self.role_service.save_role(merged, origin=WriteOrigin.LEVEL_SYNC)
            except Exception as exc:
                cause = str(exc) or exc.__class__.__name__
                logger.exception(
                    "cascade_role_persist_failure level=%s role_id=%s cause=%s",
                    level.level,
                    role.role_id,
                    cause,
                )
                report.failures.append(CascadeFailure(role_id=role.role_id, cause=cause))
                continue
            report.updated_role_ids.append(role.role_id)

        logger.info(
            "cascade_complete level=%s updated=%s failed=%s",
            level.level,
            report.updated_count,
            report.failed_count,
        )
        return report
