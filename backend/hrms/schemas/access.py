from datetime import datetime

from pydantic import BaseModel

from ..domain.permissions import PermissionType


class PermissionSnapshotRead(BaseModel):
    role: str
    hierarchy_level: int | None
    components: list[str]
    features: list[str]
    degraded: bool
    fetched_at: datetime


class AccessDecisionRead(BaseModel):
    role: str
    type: PermissionType
    capability_id: str
    allowed: bool


class RoleHierarchyRead(BaseModel):
    roles: list[str]
    hierarchy: dict[str, int]
    level_names: dict[int, str]
