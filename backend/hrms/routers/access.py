"""
Access queries for the signed-in caller.

The permission snapshot is what a client stores at login or role change. It
is not refreshed when an administrator edits levels or roles; clients
re-fetch to pick up changes.
"""
from fastapi import APIRouter, Depends

from ..auth.actor import CurrentActor
from ..auth.capabilities import LEVEL_NAMES
from ..dependencies import get_access_decision_service, get_current_actor
from ..domain.permissions import PermissionType
from ..schemas.access import AccessDecisionRead, PermissionSnapshotRead, RoleHierarchyRead
from ..services.access import AccessDecisionService

router = APIRouter(prefix="/access", tags=["access"])


@router.get("/permissions", response_model=PermissionSnapshotRead)
async def get_my_permissions(
    actor: CurrentActor = Depends(get_current_actor),
    service: AccessDecisionService = Depends(get_access_decision_service),
) -> PermissionSnapshotRead:
    snapshot = await service.get_permission_snapshot(actor.role)
    return PermissionSnapshotRead(
        role=snapshot.role,
        hierarchy_level=snapshot.hierarchy_level,
        components=snapshot.components,
        features=snapshot.features,
        degraded=snapshot.degraded,
        fetched_at=snapshot.fetched_at,
    )


@router.get("/roles", response_model=RoleHierarchyRead)
async def get_roles(
    _: CurrentActor = Depends(get_current_actor),
    service: AccessDecisionService = Depends(get_access_decision_service),
) -> RoleHierarchyRead:
    return RoleHierarchyRead(
        roles=await service.list_valid_roles(),
        hierarchy=await service.get_role_hierarchy(),
        level_names=LEVEL_NAMES,
    )


async def _decide(
    permission_type: PermissionType,
    capability_id: str,
    actor: CurrentActor,
    service: AccessDecisionService,
) -> AccessDecisionRead:
    return AccessDecisionRead(
        role=actor.role,
        type=permission_type,
        capability_id=capability_id,
        allowed=await service.can_access(permission_type, capability_id, actor.role),
    )


@router.get("/components/{capability_id}", response_model=AccessDecisionRead)
async def can_access_component(
    capability_id: str,
    actor: CurrentActor = Depends(get_current_actor),
    service: AccessDecisionService = Depends(get_access_decision_service),
) -> AccessDecisionRead:
    return await _decide(PermissionType.COMPONENT, capability_id, actor, service)


@router.get("/features/{capability_id}", response_model=AccessDecisionRead)
async def can_access_feature(
    capability_id: str,
    actor: CurrentActor = Depends(get_current_actor),
    service: AccessDecisionService = Depends(get_access_decision_service),
) -> AccessDecisionRead:
    return await _decide(PermissionType.FEATURE, capability_id, actor, service)
