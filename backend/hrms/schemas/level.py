from __future__ import annotations

from pydantic import BaseModel, Field

from ..domain.entities import AccessLevelData
from ..services.access.cascade import CascadeReport
from ..services.access.level_service import LevelUpdateResult
from .permission import PermissionEntryInput, PermissionEntryRead, read_entries
from .role import RoleSummary


class AccessLevelCreate(BaseModel):
    # Range is checked by the domain so callers get the same 400 as the service
    level: int
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    component_permissions: list[PermissionEntryInput] = Field(default_factory=list)
    feature_permissions: list[PermissionEntryInput] = Field(default_factory=list)
    cascade_enabled: bool = True


class AccessLevelUpdate(BaseModel):
    level: int | None = None
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    component_permissions: list[PermissionEntryInput] | None = None
    feature_permissions: list[PermissionEntryInput] | None = None
    cascade_enabled: bool | None = None


class CapabilityAccessUpdate(BaseModel):
    has_access: bool


class AccessLevelRead(BaseModel):
    level: int
    name: str
    description: str
    component_permissions: list[PermissionEntryRead]
    feature_permissions: list[PermissionEntryRead]
    cascade_enabled: bool
    is_system_level: bool
    is_active: bool

    @classmethod
    def from_data(cls, level: AccessLevelData) -> "AccessLevelRead":
        return cls(
            level=level.level,
            name=level.name,
            description=level.description,
            component_permissions=read_entries(level.component_permissions),
            feature_permissions=read_entries(level.feature_permissions),
            cascade_enabled=level.cascade_enabled,
            is_system_level=level.is_system_level,
            is_active=level.is_active,
        )


class AccessLevelListItem(AccessLevelRead):
    role_count: int


class AccessLevelDetail(AccessLevelRead):
    roles: list[RoleSummary]


class CascadeFailureRead(BaseModel):
    role_id: str
    cause: str


class CascadeReportRead(BaseModel):
    updated_count: int
    failed_count: int
    updated_role_ids: list[str]
    failures: list[CascadeFailureRead]
    load_error: str | None = None

    @classmethod
    def from_report(cls, report: CascadeReport) -> "CascadeReportRead":
        return cls(
            updated_count=report.updated_count,
            failed_count=report.failed_count,
            updated_role_ids=list(report.updated_role_ids),
            failures=[
                CascadeFailureRead(role_id=failure.role_id, cause=failure.cause)
                for failure in report.failures
            ],
            load_error=report.load_error,
        )


class LevelUpdateResponse(BaseModel):
    level: AccessLevelRead
    cascaded: bool
    affected_roles: int
    cascade: CascadeReportRead | None = None

    @classmethod
    def from_result(cls, result: LevelUpdateResult) -> "LevelUpdateResponse":
        return cls(
            level=AccessLevelRead.from_data(result.level),
            cascaded=result.cascaded,
            affected_roles=len(result.affected_roles),
            cascade=(
                CascadeReportRead.from_report(result.cascade_report)
                if result.cascade_report is not None
                else None
            ),
        )
