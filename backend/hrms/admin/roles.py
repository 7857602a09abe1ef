"""Admin API for roles: create, edit, per-capability overrides, deactivate."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from hrms.admin.dependencies import require_admin_role
from hrms.auth.actor import CurrentActor
from hrms.dependencies import get_audit_service, get_role_service
from hrms.domain.entities import RoleData
from hrms.schemas.permission import to_permission_set
from hrms.schemas.role import (
    EffectivePermissionsRead,
    PermissionOverride,
    RoleCreate,
    RoleRead,
    RoleUpdate,
)
from hrms.services.access import RoleChanges, RoleService
from hrms.services.audit.audit_service import AuditService

router = APIRouter(prefix="/admin/roles", tags=["admin-roles"])


@router.get("", response_model=list[RoleRead])
async def list_roles(
    _: CurrentActor = Depends(require_admin_role),
    service: RoleService = Depends(get_role_service),
) -> list[RoleRead]:
    return [RoleRead.from_data(role) for role in await service.list_active()]


@router.post("", response_model=RoleRead, status_code=status.HTTP_201_CREATED)
async def create_role(
    payload: RoleCreate,
    actor: CurrentActor = Depends(require_admin_role),
    service: RoleService = Depends(get_role_service),
    audit: AuditService = Depends(get_audit_service),
) -> RoleRead:
    created = await service.create_role(
        RoleData(
            role_id=payload.role_id,
            display_name=payload.display_name,
            hierarchy_level=payload.hierarchy_level,
            description=payload.description,
            component_permissions=to_permission_set(payload.component_permissions),
            feature_permissions=to_permission_set(payload.feature_permissions),
        )
    )
    response = RoleRead.from_data(created)
    await audit.log_role_change(
        actor, "create", created.role_id, after=response.model_dump(mode="json")
    )
    return response


@router.get("/{role_id}", response_model=RoleRead)
async def get_role(
    role_id: str,
    _: CurrentActor = Depends(require_admin_role),
    service: RoleService = Depends(get_role_service),
) -> RoleRead:
    return RoleRead.from_data(await service.get_role(role_id))


@router.get("/{role_id}/effective", response_model=EffectivePermissionsRead)
async def get_effective_permissions(
    role_id: str,
    _: CurrentActor = Depends(require_admin_role),
    service: RoleService = Depends(get_role_service),
) -> EffectivePermissionsRead:
    role = await service.get_role(role_id)
    effective = role.effective_permissions()
    return EffectivePermissionsRead(
        role_id=role.role_id,
        components=effective.components.granted_ids(),
        features=effective.features.granted_ids(),
    )


@router.patch("/{role_id}", response_model=RoleRead)
async def update_role(
    role_id: str,
    payload: RoleUpdate,
    actor: CurrentActor = Depends(require_admin_role),
    service: RoleService = Depends(get_role_service),
    audit: AuditService = Depends(get_audit_service),
) -> RoleRead:
    before = RoleRead.from_data(await service.get_role(role_id))
    updated = await service.update_role(
        role_id,
        RoleChanges(
            display_name=payload.display_name,
            description=payload.description,
            hierarchy_level=payload.hierarchy_level,
        ),
    )
    response = RoleRead.from_data(updated)
    await audit.log_role_change(
        actor,
        "update",
        updated.role_id,
        before=before.model_dump(mode="json"),
        after=response.model_dump(mode="json"),
    )
    return response


@router.put("/{role_id}/overrides", response_model=RoleRead)
async def override_permission(
    role_id: str,
    payload: PermissionOverride,
    actor: CurrentActor = Depends(require_admin_role),
    service: RoleService = Depends(get_role_service),
    audit: AuditService = Depends(get_audit_service),
) -> RoleRead:
    updated = await service.override_permission(
        role_id, payload.type, payload.capability_id, payload.has_access
    )
    await audit.log_role_change(
        actor, "override", updated.role_id, after=payload.model_dump(mode="json")
    )
    return RoleRead.from_data(updated)


@router.delete("/{role_id}", response_model=RoleRead)
async def deactivate_role(
    role_id: str,
    actor: CurrentActor = Depends(require_admin_role),
    service: RoleService = Depends(get_role_service),
    audit: AuditService = Depends(get_audit_service),
) -> RoleRead:
    deactivated = await service.deactivate_role(role_id)
    await audit.log_role_change(actor, "deactivate", deactivated.role_id)
    return RoleRead.from_data(deactivated)
