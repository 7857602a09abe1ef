"""
Permission value types shared by levels and roles.

A PermissionSet is an ordered collection of PermissionEntry records, unique by
capability id. Every entry always carries all four access/provenance fields.
Sets are immutable: every mutation helper returns a new set.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping

logger = logging.getLogger(__name__)


class PermissionType(str, Enum):
    COMPONENT = "component"
    FEATURE = "feature"


@dataclass(frozen=True)
class PermissionEntry:
    capability_id: str
    display_name: str
    has_access: bool
    role_specific: bool = False
    inherited_from_level: bool = False

    def as_inherited(self) -> "PermissionEntry":
        return replace(self, role_specific=False, inherited_from_level=True)

    def as_override(self) -> "PermissionEntry":
        return replace(self, role_specific=True, inherited_from_level=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "capability_id": self.capability_id,
            "display_name": self.display_name,
            "has_access": self.has_access,
            "role_specific": self.role_specific,
            "inherited_from_level": self.inherited_from_level,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "PermissionEntry | None":
        capability_id = raw.get("capability_id")
        has_access = raw.get("has_access")
        if not isinstance(capability_id, str) or not capability_id.strip():
            return None
        if not isinstance(has_access, bool):
            return None
        display_name = raw.get("display_name")
        return cls(
            capability_id=capability_id.strip(),
            display_name=display_name if isinstance(display_name, str) else capability_id,
            has_access=has_access,
            role_specific=bool(raw.get("role_specific", False)),
            inherited_from_level=bool(raw.get("inherited_from_level", False)),
        )


class PermissionSet:
    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[PermissionEntry] = ()) -> None:
        collected: dict[str, PermissionEntry] = {}
        for entry in entries:
            if entry.capability_id in collected:
                raise ValueError(f"Duplicate capability id in permission set: {entry.capability_id}")
            collected[entry.capability_id] = entry
        self._entries = collected

    @classmethod
    def from_dicts(cls, raw_entries: Iterable[Mapping[str, Any]] | None) -> "PermissionSet":
        """Build a set from stored rows, skipping malformed or repeated entries."""
        entries: dict[str, PermissionEntry] = {}
        for raw in raw_entries or ():
            entry = PermissionEntry.from_dict(raw) if isinstance(raw, Mapping) else None
            if entry is None:
                logger.warning("permission_entry_skipped reason=malformed raw=%r", raw)
                continue
            if entry.capability_id in entries:
                logger.warning(
                    "permission_entry_skipped reason=duplicate capability_id=%s",
                    entry.capability_id,
                )
                continue
            entries[entry.capability_id] = entry
        return cls(entries.values())

    def to_dicts(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self]

    def __iter__(self) -> Iterator[PermissionEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, capability_id: object) -> bool:
        return capability_id in self._entries

    def __eq__(self, other: object) -> bool:
        # Entry order is not part of a set's identity
        if not isinstance(other, PermissionSet):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"PermissionSet({list(self._entries.values())!r})"

    def get(self, capability_id: str) -> PermissionEntry | None:
        return self._entries.get(capability_id)

    def ids(self) -> list[str]:
        return list(self._entries)

    def granted_ids(self) -> list[str]:
        return [entry.capability_id for entry in self if entry.has_access]

    def role_specific_only(self) -> "PermissionSet":
        return PermissionSet(entry for entry in self if entry.role_specific)

    def effective(self) -> "PermissionSet":
        return PermissionSet(entry for entry in self if entry.has_access)

    def has_overrides(self) -> bool:
        return any(entry.role_specific for entry in self)

    def as_inherited(self) -> "PermissionSet":
        return PermissionSet(entry.as_inherited() for entry in self)

    def with_access(self, capability_id: str, has_access: bool) -> "PermissionSet":
        """Return a copy with one existing entry's value replaced, provenance kept."""
        if capability_id not in self._entries:
            raise KeyError(capability_id)
        return PermissionSet(
            replace(entry, has_access=has_access) if entry.capability_id == capability_id else entry
            for entry in self
        )

    def override(
        self,
        capability_id: str,
        has_access: bool,
        *,
        display_name: str | None = None,
    ) -> "PermissionSet":
        """Force one entry to a role-specific value, appending it when absent."""
        current = self._entries.get(capability_id)
        if current is None:
            if display_name is None:
                raise KeyError(capability_id)
            forced = PermissionEntry(
                capability_id=capability_id,
                display_name=display_name,
                has_access=has_access,
                role_specific=True,
                inherited_from_level=False,
            )
            return PermissionSet([*self, forced])

        forced = replace(current, has_access=has_access).as_override()
        return PermissionSet(
            forced if entry.capability_id == capability_id else entry for entry in self
        )


@dataclass(frozen=True)
class EffectivePermissions:
    components: PermissionSet
    features: PermissionSet

    def for_type(self, permission_type: PermissionType) -> PermissionSet:
        if permission_type is PermissionType.COMPONENT:
            return self.components
        return self.features

    def allows(self, permission_type: PermissionType, capability_id: str) -> bool:
        entry = self.for_type(permission_type).get(capability_id)
        return entry is not None and entry.has_access

    @classmethod
    def empty(cls) -> "EffectivePermissions":
        return cls(components=PermissionSet(), features=PermissionSet())
