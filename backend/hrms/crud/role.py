from sqlalchemy import func, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.entities import RoleData
from ..models.role import Role
from ._mapping import apply_role, role_to_data


class RoleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, role_id: str) -> RoleData | None:
        result = await self.session.execute(select(Role).where(Role.role_id == role_id))
        row = result.scalar_one_or_none()
        return role_to_data(row) if row is not None else None

    async def list_active(self) -> list[RoleData]:
        result = await self.session.execute(
            select(Role).where(Role.is_active).order_by(Role.hierarchy_level, Role.role_id)
        )
        return [role_to_data(row) for row in result.scalars().all()]

    async def list_by_level(self, level: int) -> list[RoleData]:
        result = await self.session.execute(
            select(Role)
            .where(Role.hierarchy_level == level, Role.is_active)
            .order_by(Role.role_id)
        )
        return [role_to_data(row) for row in result.scalars().all()]

    async def count_by_level(self, level: int) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(Role)
            .where(Role.hierarchy_level == level, Role.is_active)
        )
        return int(result.scalar_one())

    async def add(self, role: RoleData) -> RoleData:
        row = Role()
        apply_role(row, role)
        self.session.add(row)
        await self.session.flush()
        return role_to_data(row)

    async def save(self, role: RoleData) -> RoleData:
        if role.id is None:
            raise NoResultFound(f"Role {role.role_id} has not been persisted")
        row = await self.session.get(Role, role.id)
        if row is None:
            raise NoResultFound(f"Role row {role.id} not found")
        apply_role(row, role)
        await self.session.flush()
        return role_to_data(row)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
