from __future__ import annotations

from typing import Protocol

from ..entities import AccessLevelData, RoleData


class AccessLevelRepository(Protocol):
    async def get(self, level: int) -> AccessLevelData | None:
        """Return the active level with this number, if any."""
        ...

    async def list_active(self) -> list[AccessLevelData]:
        ...

    async def add(self, level: AccessLevelData) -> AccessLevelData:
        ...

    async def save(self, level: AccessLevelData) -> AccessLevelData:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...


class RoleRepository(Protocol):
    async def get(self, role_id: str) -> RoleData | None:
        """Return the role with this id whether active or not."""
        ...

    async def list_active(self) -> list[RoleData]:
        ...

    async def list_by_level(self, level: int) -> list[RoleData]:
        """Return active roles whose hierarchy level equals `level`."""
        ...

    async def count_by_level(self, level: int) -> int:
        ...

    async def add(self, role: RoleData) -> RoleData:
        ...

    async def save(self, role: RoleData) -> RoleData:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...

