from __future__ import annotations

from pydantic import BaseModel, Field

from ..domain.permissions import PermissionEntry, PermissionSet


class PermissionEntryRead(BaseModel):
    capability_id: str
    display_name: str
    has_access: bool
    role_specific: bool
    inherited_from_level: bool

    @classmethod
    def from_entry(cls, entry: PermissionEntry) -> "PermissionEntryRead":
        return cls(**entry.to_dict())


class PermissionEntryInput(BaseModel):
    capability_id: str = Field(..., min_length=1, max_length=100)
    display_name: str | None = Field(None, max_length=255)
    has_access: bool


def read_entries(permissions: PermissionSet) -> list[PermissionEntryRead]:
    return [PermissionEntryRead.from_entry(entry) for entry in permissions]


def to_permission_set(entries: list[PermissionEntryInput]) -> PermissionSet:
    """Build a set of plain entries; raises ValueError on a repeated id."""
    return PermissionSet(
        PermissionEntry(
            capability_id=entry.capability_id,
            display_name=entry.display_name or entry.capability_id,
            has_access=entry.has_access,
        )
        for entry in entries
    )
