"""
Access decisions for the API and UI layers.

Every decision re-reads the role registry; nothing is cached server side.
Clients fetch a permission snapshot at login or role change and keep using
it until they fetch again. Administrative edits made in between are not
pushed to them. That staleness is the accepted consistency boundary; the
snapshot's `fetched_at` tells the client how old its view is.

When the registry cannot be read the service switches to a static role
table. That mode is logged as a warning and flagged on every snapshot.
Roles the static table does not know are denied.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from ...auth.capabilities import SYSTEM_ROLE_IDS
from ...auth.fallback import DEFAULT_FALLBACK, StaticRoleTable
from ...domain.invariants import InvariantViolation, normalize_role_id
from ...domain.permissions import EffectivePermissions, PermissionType
from ...domain.ports.access import RoleRepository
from ...errors import PermissionsSourceUnavailable

logger = logging.getLogger("hrms.access.decision")

REGISTRY_FAILURES = (SQLAlchemyError, OSError, PermissionsSourceUnavailable)


def _role_key(role: str) -> str | None:
    """Normalize a role name the way the registry stores it; None if malformed."""
    try:
        return normalize_role_id(role)
    except InvariantViolation:
        return None


@dataclass(frozen=True)
class PermissionSnapshot:
    role: str
    hierarchy_level: int | None
    components: list[str]
    features: list[str]
    degraded: bool
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AccessDecisionService:
    def __init__(
        self,
        roles: RoleRepository,
        fallback: StaticRoleTable = DEFAULT_FALLBACK,
    ) -> None:
        self.roles = roles
        self.fallback = fallback

    def _warn_degraded(self, operation: str, exc: Exception) -> None:
        logger.warning(
            "permissions_source_unavailable operation=%s error=%s mode=degraded_fallback",
            operation,
            exc,
        )

    async def _resolve(self, role: str) -> tuple[EffectivePermissions, int | None, bool]:
        role_id = _role_key(role)
        if role_id is None:
            return EffectivePermissions.empty(), None, False
        try:
            record = await self.roles.get(role_id)
        except REGISTRY_FAILURES as exc:
            self._warn_degraded("resolve_role", exc)
            if not self.fallback.knows(role_id):
                logger.warning("fallback_denied role=%s reason=unknown_role", role_id)
            return (
                self.fallback.effective_permissions(role_id),
                self.fallback.hierarchy.get(role_id),
                True,
            )

        if record is None or not record.is_active:
            return EffectivePermissions.empty(), None, False
        return record.effective_permissions(), record.hierarchy_level, False

    async def can_access(
        self, permission_type: PermissionType, capability_id: str, role: str
    ) -> bool:
        effective, _, _ = await self._resolve(role)
        return effective.allows(permission_type, capability_id)

    async def can_access_component(self, capability_id: str, role: str) -> bool:
        return await self.can_access(PermissionType.COMPONENT, capability_id, role)

    async def can_access_feature(self, capability_id: str, role: str) -> bool:
        return await self.can_access(PermissionType.FEATURE, capability_id, role)

    async def get_permission_snapshot(self, role: str) -> PermissionSnapshot:
        effective, hierarchy_level, degraded = await self._resolve(role)
        return PermissionSnapshot(
            role=_role_key(role) or (role or "").strip().upper(),
            hierarchy_level=hierarchy_level,
            components=effective.components.granted_ids(),
            features=effective.features.granted_ids(),
            degraded=degraded,
        )

    async def list_valid_roles(self) -> list[str]:
        try:
            active = await self.roles.list_active()
        except REGISTRY_FAILURES as exc:
            self._warn_degraded("list_valid_roles", exc)
            return list(self.fallback.role_ids)

        valid = list(SYSTEM_ROLE_IDS)
        valid.extend(role.role_id for role in active if role.role_id not in valid)
        return valid

    async def get_role_hierarchy(self) -> dict[str, int]:
        try:
            active = await self.roles.list_active()
        except REGISTRY_FAILURES as exc:
            self._warn_degraded("get_role_hierarchy", exc)
            return dict(self.fallback.hierarchy)
        return {role.role_id: role.hierarchy_level for role in active}

    async def has_level_access(self, role: str, required_level: int) -> bool:
        hierarchy = await self.get_role_hierarchy()
        level = hierarchy.get(_role_key(role))
        return level is not None and level <= required_level

    async def can_manage_role(self, actor_role: str, target_role: str) -> bool:
        hierarchy = await self.get_role_hierarchy()
        actor_level = hierarchy.get(_role_key(actor_role))
        target_level = hierarchy.get(_role_key(target_role))
        if actor_level is None or target_level is None:
            return False
        return actor_level < target_level

    async def subordinate_roles(self, role: str) -> list[str]:
        hierarchy = await self.get_role_hierarchy()
        level = hierarchy.get(_role_key(role))
        if level is None:
            return []
        return sorted(
            (role_id for role_id, role_level in hierarchy.items() if role_level > level),
            key=lambda role_id: (hierarchy[role_id], role_id),
        )
