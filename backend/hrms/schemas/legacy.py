"""Parsing models for the legacy flat role-permission export."""
from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..domain.permissions import PermissionEntry, PermissionSet

logger = logging.getLogger("hrms.bootstrap")


class LegacyComponentEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    capability_id: str = Field(..., alias="componentId", min_length=1)
    display_name: str | None = Field(None, alias="componentName")
    has_access: bool = Field(..., alias="hasAccess")
    role_specific: bool = Field(False, alias="roleSpecific")
    inherited_from_level: bool = Field(False, alias="inheritedFromLevel")


class LegacyFeatureEntry(LegacyComponentEntry):
    capability_id: str = Field(..., alias="featureId", min_length=1)
    display_name: str | None = Field(None, alias="featureName")


class LegacyRoleRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    role_id: str = Field(..., alias="roleId", min_length=1)
    display_name: str = Field(..., alias="displayName", min_length=1)
    hierarchy_level: int = Field(..., alias="hierarchyLevel")
    description: str = ""
    is_active: bool = Field(True, alias="isActive")
    is_system_role: bool = Field(False, alias="isSystemRole")
    component_access: list[Any] = Field(default_factory=list, alias="componentAccess")
    feature_access: list[Any] = Field(default_factory=list, alias="featureAccess")

    def component_permissions(self) -> PermissionSet:
        return _parse_entries(self.component_access, LegacyComponentEntry, self.role_id)

    def feature_permissions(self) -> PermissionSet:
        return _parse_entries(self.feature_access, LegacyFeatureEntry, self.role_id)


def _parse_entries(
    raw_entries: list[Any],
    model: type[LegacyComponentEntry],
    role_id: str,
) -> PermissionSet:
    entries: dict[str, PermissionEntry] = {}
    for raw in raw_entries:
        try:
            parsed = model.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "legacy_entry_skipped role_id=%s errors=%s", role_id, exc.error_count()
            )
            continue
        if parsed.capability_id in entries:
            continue
        entries[parsed.capability_id] = PermissionEntry(
            capability_id=parsed.capability_id,
            display_name=parsed.display_name or parsed.capability_id,
            has_access=parsed.has_access,
            role_specific=parsed.role_specific,
            inherited_from_level=parsed.inherited_from_level,
        )
    return PermissionSet(entries.values())


def parse_legacy_roles(raw_records: list[Any]) -> list[LegacyRoleRecord]:
    records: list[LegacyRoleRecord] = []
    for raw in raw_records:
        try:
            records.append(LegacyRoleRecord.model_validate(raw))
        except ValidationError as exc:
            logger.warning("legacy_role_skipped errors=%s", exc.error_count())
    return records
