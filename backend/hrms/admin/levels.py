"""
Admin API for access levels.

Level CRUD, per-capability toggles, the cascade switch, the manual
"apply level to role" repair path and the affected-roles lookup. Every
route requires the admin role and records successful writes in the audit
trail.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from hrms.admin.dependencies import require_admin_role
from hrms.auth.actor import CurrentActor
from hrms.dependencies import get_audit_service, get_level_service
from hrms.domain.entities import AccessLevelData
from hrms.schemas.level import (
    AccessLevelCreate,
    AccessLevelDetail,
    AccessLevelListItem,
    AccessLevelRead,
    AccessLevelUpdate,
    CapabilityAccessUpdate,
    LevelUpdateResponse,
)
from hrms.schemas.permission import to_permission_set
from hrms.schemas.role import RoleRead, RoleSummary
from hrms.services.access import LevelChanges, LevelService, LevelUpdateResult
from hrms.services.audit.audit_service import AuditService

router = APIRouter(prefix="/admin/levels", tags=["admin-levels"])


@router.get("", response_model=list[AccessLevelListItem])
async def list_levels(
    _: CurrentActor = Depends(require_admin_role),
    service: LevelService = Depends(get_level_service),
) -> list[AccessLevelListItem]:
    summaries = await service.list_levels()
    return [
        AccessLevelListItem(
            **AccessLevelRead.from_data(summary.level).model_dump(),
            role_count=summary.role_count,
        )
        for summary in summaries
    ]


@router.post("", response_model=AccessLevelRead, status_code=status.HTTP_201_CREATED)
async def create_level(
    payload: AccessLevelCreate,
    actor: CurrentActor = Depends(require_admin_role),
    service: LevelService = Depends(get_level_service),
    audit: AuditService = Depends(get_audit_service),
) -> AccessLevelRead:
    created = await service.create_level(
        AccessLevelData(
            level=payload.level,
            name=payload.name,
            description=payload.description,
            component_permissions=to_permission_set(payload.component_permissions),
            feature_permissions=to_permission_set(payload.feature_permissions),
            cascade_enabled=payload.cascade_enabled,
        )
    )
    response = AccessLevelRead.from_data(created)
    await audit.log_level_change(
        actor, "create", created.level, after=response.model_dump(mode="json")
    )
    return response


@router.get("/{level}", response_model=AccessLevelDetail)
async def get_level(
    level: int,
    _: CurrentActor = Depends(require_admin_role),
    service: LevelService = Depends(get_level_service),
) -> AccessLevelDetail:
    found = await service.get_level(level)
    roles = await service.get_affected_roles(level)
    return AccessLevelDetail(
        **AccessLevelRead.from_data(found).model_dump(),
        roles=[RoleSummary.from_data(role) for role in roles],
    )


@router.get("/{level}/affected-roles", response_model=list[RoleSummary])
async def get_affected_roles(
    level: int,
    _: CurrentActor = Depends(require_admin_role),
    service: LevelService = Depends(get_level_service),
) -> list[RoleSummary]:
    roles = await service.get_affected_roles(level)
    return [RoleSummary.from_data(role) for role in roles]


async def _audited_update(
    actor: CurrentActor,
    audit: AuditService,
    action: str,
    before: AccessLevelData,
    result: LevelUpdateResult,
) -> LevelUpdateResponse:
    response = LevelUpdateResponse.from_result(result)
    await audit.log_level_change(
        actor,
        action,
        before.level,
        before=AccessLevelRead.from_data(before).model_dump(mode="json"),
        after=response.model_dump(mode="json"),
    )
    return response


@router.put("/{level}", response_model=LevelUpdateResponse)
async def update_level(
    level: int,
    payload: AccessLevelUpdate,
    actor: CurrentActor = Depends(require_admin_role),
    service: LevelService = Depends(get_level_service),
    audit: AuditService = Depends(get_audit_service),
) -> LevelUpdateResponse:
    before = await service.get_level(level)
    changes = LevelChanges(
        level=payload.level,
        name=payload.name,
        description=payload.description,
        component_permissions=(
            to_permission_set(payload.component_permissions)
            if payload.component_permissions is not None
            else None
        ),
        feature_permissions=(
            to_permission_set(payload.feature_permissions)
            if payload.feature_permissions is not None
            else None
        ),
        cascade_enabled=payload.cascade_enabled,
    )
    result = await service.update_level(level, changes)
    return await _audited_update(actor, audit, "update", before, result)


@router.put("/{level}/components/{capability_id}", response_model=LevelUpdateResponse)
async def set_component_access(
    level: int,
    capability_id: str,
    payload: CapabilityAccessUpdate,
    actor: CurrentActor = Depends(require_admin_role),
    service: LevelService = Depends(get_level_service),
    audit: AuditService = Depends(get_audit_service),
) -> LevelUpdateResponse:
    before = await service.get_level(level)
    result = await service.set_component_access(level, capability_id, payload.has_access)
    return await _audited_update(actor, audit, "component_access", before, result)


@router.put("/{level}/features/{capability_id}", response_model=LevelUpdateResponse)
async def set_feature_access(
    level: int,
    capability_id: str,
    payload: CapabilityAccessUpdate,
    actor: CurrentActor = Depends(require_admin_role),
    service: LevelService = Depends(get_level_service),
    audit: AuditService = Depends(get_audit_service),
) -> LevelUpdateResponse:
    before = await service.get_level(level)
    result = await service.set_feature_access(level, capability_id, payload.has_access)
    return await _audited_update(actor, audit, "feature_access", before, result)


@router.put("/{level}/toggle-cascade", response_model=AccessLevelRead)
async def toggle_cascade(
    level: int,
    actor: CurrentActor = Depends(require_admin_role),
    service: LevelService = Depends(get_level_service),
    audit: AuditService = Depends(get_audit_service),
) -> AccessLevelRead:
    saved = await service.toggle_cascade(level)
    await audit.log_level_change(
        actor,
        "toggle_cascade",
        saved.level,
        before={"cascade_enabled": not saved.cascade_enabled},
        after={"cascade_enabled": saved.cascade_enabled},
    )
    return AccessLevelRead.from_data(saved)


@router.put("/{level}/apply-to-role/{role_id}", response_model=RoleRead)
async def apply_level_to_role(
    level: int,
    role_id: str,
    actor: CurrentActor = Depends(require_admin_role),
    service: LevelService = Depends(get_level_service),
    audit: AuditService = Depends(get_audit_service),
) -> RoleRead:
    role = await service.apply_level_to_role(level, role_id)
    response = RoleRead.from_data(role)
    await audit.log_role_change(
        actor, "apply_level", role.role_id, after=response.model_dump(mode="json")
    )
    return response


@router.delete("/{level}", response_model=AccessLevelRead)
async def delete_level(
    level: int,
    actor: CurrentActor = Depends(require_admin_role),
    service: LevelService = Depends(get_level_service),
    audit: AuditService = Depends(get_audit_service),
) -> AccessLevelRead:
    deleted = await service.delete_level(level)
    response = AccessLevelRead.from_data(deleted)
    await audit.log_level_change(actor, "delete", deleted.level, before=response.model_dump(mode="json"))
    return response
