"""SQLAlchemy repositories against an in-memory SQLite database."""
from dataclasses import replace

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm import Session

from hrms.crud.access_level import AccessLevelRepository
from hrms.crud.role import RoleRepository
from hrms.domain.entities import AccessLevelData, RoleData
from hrms.domain.permissions import PermissionSet
from hrms.models import AccessLevel, Base, Role
from tests.access_helpers import AsyncSessionAdapter, entry, permission_set


@pytest.fixture()
def db_session():
    engine = sa.create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=sa.pool.StaticPool,
    )
    Base.metadata.create_all(engine, tables=[AccessLevel.__table__, Role.__table__])
    session = Session(engine)
    adapter = AsyncSessionAdapter(session, engine)
    yield adapter, session
    session.close()
    engine.dispose()


def _level(number: int, **overrides) -> AccessLevelData:
    values = dict(
        level=number,
        name=f"Level {number}",
        component_permissions=permission_set(dashboard=True, salary=False),
    )
    values.update(overrides)
    return AccessLevelData(**values)


@pytest.mark.anyio
async def test_level_round_trip_keeps_permission_flags(db_session) -> None:
    adapter, _ = db_session
    repo = AccessLevelRepository(adapter)
    permissions = PermissionSet([entry("dashboard", True, inherited_from_level=True)])

    created = await repo.add(_level(2, component_permissions=permissions, is_system_level=True))
    await repo.commit()
    loaded = await repo.get(2)

    assert created.id is not None
    assert loaded.component_permissions == permissions
    assert loaded.is_system_level is True
    assert loaded.cascade_enabled is True


@pytest.mark.anyio
async def test_level_get_ignores_inactive_rows(db_session) -> None:
    adapter, _ = db_session
    repo = AccessLevelRepository(adapter)
    created = await repo.add(_level(5))
    await repo.save(replace(created, is_active=False))
    await repo.commit()

    assert await repo.get(5) is None
    assert await repo.list_active() == []


@pytest.mark.anyio
async def test_active_level_numbers_are_unique(db_session) -> None:
    adapter, _ = db_session
    repo = AccessLevelRepository(adapter)
    await repo.add(_level(3))

    with pytest.raises(IntegrityError):
        await repo.add(_level(3, name="Duplicate"))


@pytest.mark.anyio
async def test_inactive_level_number_can_be_reused(db_session) -> None:
    adapter, _ = db_session
    repo = AccessLevelRepository(adapter)
    old = await repo.add(_level(3))
    await repo.save(replace(old, is_active=False))

    fresh = await repo.add(_level(3, name="Replacement"))
    await repo.commit()

    assert (await repo.get(3)).id == fresh.id


@pytest.mark.anyio
async def test_level_save_requires_persisted_row(db_session) -> None:
    adapter, _ = db_session
    repo = AccessLevelRepository(adapter)

    with pytest.raises(NoResultFound):
        await repo.save(_level(1))
    with pytest.raises(NoResultFound):
        await repo.save(_level(1, id=404))


@pytest.mark.anyio
async def test_list_active_levels_is_ordered(db_session) -> None:
    adapter, _ = db_session
    repo = AccessLevelRepository(adapter)
    for number in (4, 0, 2):
        await repo.add(_level(number))
    await repo.commit()

    assert [level.level for level in await repo.list_active()] == [0, 2, 4]


def _role(role_id: str, level: int, **overrides) -> RoleData:
    values = dict(role_id=role_id, display_name=role_id.title(), hierarchy_level=level)
    values.update(overrides)
    return RoleData(**values)


@pytest.mark.anyio
async def test_role_queries_by_level(db_session) -> None:
    adapter, _ = db_session
    repo = RoleRepository(adapter)
    await repo.add(_role("EMPLOYEE", 4))
    await repo.add(_role("INTERN", 4))
    await repo.add(_role("RETIRED", 4, is_active=False))
    await repo.add(_role("CEO", 2))
    await repo.commit()

    assert [role.role_id for role in await repo.list_by_level(4)] == ["EMPLOYEE", "INTERN"]
    assert await repo.count_by_level(4) == 2
    assert await repo.count_by_level(7) == 0
    assert [role.role_id for role in await repo.list_active()] == ["CEO", "EMPLOYEE", "INTERN"]
    assert (await repo.get("RETIRED")).is_active is False


@pytest.mark.anyio
async def test_role_ids_are_unique(db_session) -> None:
    adapter, _ = db_session
    repo = RoleRepository(adapter)
    await repo.add(_role("CEO", 2))

    with pytest.raises(IntegrityError):
        await repo.add(_role("CEO", 3))


@pytest.mark.anyio
async def test_role_save_updates_permissions(db_session) -> None:
    adapter, _ = db_session
    repo = RoleRepository(adapter)
    created = await repo.add(_role("CEO", 2, component_permissions=permission_set(salary=False)))

    saved = await repo.save(
        replace(
            created,
            component_permissions=created.component_permissions.override("salary", True),
        )
    )
    await repo.commit()

    salary = (await repo.get("CEO")).component_permissions.get("salary")
    assert saved.id == created.id
    assert (salary.has_access, salary.role_specific) == (True, True)


@pytest.mark.anyio
async def test_stored_rows_with_bad_entries_still_load(db_session) -> None:
    adapter, session = db_session
    session.add(
        Role(
            role_id="LEGACY",
            display_name="Legacy",
            description="",
            hierarchy_level=4,
            component_permissions=[
                {"capability_id": "dashboard", "has_access": True},
                {"capability_id": "dashboard", "has_access": False},
                {"has_access": True},
            ],
            feature_permissions=[],
            is_system_role=False,
            is_active=True,
        )
    )
    session.commit()

    loaded = await RoleRepository(adapter).get("LEGACY")

    assert loaded.component_permissions.ids() == ["dashboard"]
    assert loaded.component_permissions.get("dashboard").has_access is True
