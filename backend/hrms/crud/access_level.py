from sqlalchemy import select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.entities import AccessLevelData
from ..models.access_level import AccessLevel
from ._mapping import access_level_to_data, apply_access_level


class AccessLevelRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, level: int) -> AccessLevelData | None:
        result = await self.session.execute(
            select(AccessLevel).where(AccessLevel.level == level, AccessLevel.is_active)
        )
        row = result.scalar_one_or_none()
        return access_level_to_data(row) if row is not None else None

    async def list_active(self) -> list[AccessLevelData]:
        result = await self.session.execute(
            select(AccessLevel).where(AccessLevel.is_active).order_by(AccessLevel.level)
        )
        return [access_level_to_data(row) for row in result.scalars().all()]

    async def add(self, level: AccessLevelData) -> AccessLevelData:
        row = AccessLevel()
        apply_access_level(row, level)
        self.session.add(row)
        await self.session.flush()
        return access_level_to_data(row)

    async def save(self, level: AccessLevelData) -> AccessLevelData:
        if level.id is None:
            raise NoResultFound(f"Access level {level.level} has not been persisted")
        row = await self.session.get(AccessLevel, level.id)
        if row is None:
            raise NoResultFound(f"Access level row {level.id} not found")
        apply_access_level(row, level)
        await self.session.flush()
        return access_level_to_data(row)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
