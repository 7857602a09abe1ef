from dataclasses import replace

import pytest

from hrms.domain.entities import AccessLevelData, RoleData, WriteOrigin
from hrms.domain.permissions import PermissionEntry, PermissionSet, PermissionType
from hrms.services.access import CascadeCoordinator, LevelChanges, LevelService, RoleService
from tests.access_helpers import (
    FakeLevelRepository,
    FakeRoleRepository,
    default_levels,
    default_roles,
    registry_down,
)


def _services() -> tuple[LevelService, RoleService, FakeRoleRepository]:
    levels = default_levels()
    level_repo = FakeLevelRepository(levels)
    role_repo = FakeRoleRepository(default_roles(levels))
    role_service = RoleService(role_repo, level_repo)
    return LevelService(level_repo, role_repo, role_service=role_service), role_service, role_repo


@pytest.mark.anyio
async def test_cascade_preserves_role_overrides() -> None:
    level_service, role_service, role_repo = _services()
    await role_service.override_permission(
        "ACCOUNTANT", PermissionType.COMPONENT, "salary", True
    )

    result = await level_service.set_component_access(3, "dashboard", False)

    assert sorted(result.cascade_report.updated_role_ids) == ["ACCOUNTANT", "INCUBATION_MANAGER"]
    accountant = role_repo.stored("ACCOUNTANT")
    salary = accountant.component_permissions.get("salary")
    assert (salary.has_access, salary.role_specific) == (True, True)
    dashboard = accountant.component_permissions.get("dashboard")
    assert (dashboard.has_access, dashboard.inherited_from_level) == (False, True)


@pytest.mark.anyio
async def test_cascade_propagates_new_capability() -> None:
    level_service, _, role_repo = _services()
    current = await level_service.get_level(4)
    extended = PermissionSet(
        [
            *current.feature_permissions,
            PermissionEntry(capability_id="leave.approve", display_name="Approve Leave", has_access=True),
        ]
    )

    result = await level_service.update_level(4, LevelChanges(feature_permissions=extended))

    assert result.cascaded is True
    approve = role_repo.stored("EMPLOYEE").feature_permissions.get("leave.approve")
    assert approve.has_access is True
    assert approve.inherited_from_level is True


@pytest.mark.anyio
async def test_cascade_revoke_reaches_inherited_values() -> None:
    level_service, _, role_repo = _services()

    await level_service.set_feature_access(4, "attendance.mark", False)

    employee = role_repo.stored("EMPLOYEE")
    assert "attendance.mark" not in employee.effective_permissions().features


@pytest.mark.anyio
async def test_cascade_only_touches_roles_of_the_edited_level() -> None:
    level_service, _, role_repo = _services()

    await level_service.set_component_access(1, "salary", True)

    assert sorted(role_repo.saves) == ["FACULTY_IN_CHARGE", "OFFICER_IN_CHARGE"]


@pytest.mark.anyio
async def test_cascade_partial_failure_is_reported(caplog: pytest.LogCaptureFixture) -> None:
    level_service, _, role_repo = _services()
    role_repo.failing_role_ids.add("FACULTY_IN_CHARGE")

    with caplog.at_level("ERROR", logger="hrms.access.cascade"):
        result = await level_service.set_component_access(1, "salary", True)

    report = result.cascade_report
    assert report.updated_role_ids == ["OFFICER_IN_CHARGE"]
    assert [failure.role_id for failure in report.failures] == ["FACULTY_IN_CHARGE"]
    assert report.failed_count == 1
    # The level edit itself is committed regardless
    assert (await level_service.get_level(1)).component_permissions.get("salary").has_access
    officer = role_repo.stored("OFFICER_IN_CHARGE")
    faculty = role_repo.stored("FACULTY_IN_CHARGE")
    assert officer.component_permissions.get("salary").has_access is True
    assert faculty.component_permissions.get("salary").has_access is False
    assert any(
        "cascade_role_persist_failure" in record.getMessage()
        and "FACULTY_IN_CHARGE" in record.getMessage()
        for record in caplog.records
    )


@pytest.mark.anyio
async def test_cascade_load_failure_leaves_level_committed() -> None:
    level_service, _, role_repo = _services()
    original_list = role_repo.list_by_level
    calls = {"count": 0}

    async def fail_after_first(level: int) -> list[RoleData]:
        calls["count"] += 1
        if calls["count"] > 1:
            raise registry_down()
        return await original_list(level)

    role_repo.list_by_level = fail_after_first

    result = await level_service.set_component_access(4, "settings", True)

    assert result.cascaded is True
    assert result.cascade_report.load_error
    assert result.cascade_report.updated_role_ids == []
    assert role_repo.saves == []


@pytest.mark.anyio
async def test_cascade_writes_never_trigger_role_resync() -> None:
    _, role_service, role_repo = _services()
    origins: list[WriteOrigin] = []
    original_save_role = role_service.save_role

    async def recording_save_role(role: RoleData, *, origin: WriteOrigin, **kwargs) -> RoleData:
        origins.append(origin)
        return await original_save_role(role, origin=origin, **kwargs)

    role_service.save_role = recording_save_role
    levels = FakeLevelRepository(default_levels())
    coordinator = CascadeCoordinator(role_service)
    level = await levels.get(3)

    report = await coordinator.cascade(level)

    assert report.updated_count == 2
    assert origins == [WriteOrigin.LEVEL_SYNC, WriteOrigin.LEVEL_SYNC]
    assert sorted(role_repo.saves) == ["ACCOUNTANT", "INCUBATION_MANAGER"]


@pytest.mark.anyio
async def test_cascade_on_level_without_roles_is_empty() -> None:
    _, role_service, _ = _services()
    coordinator = CascadeCoordinator(role_service)

    report = await coordinator.cascade(AccessLevelData(level=9, name="Empty"))

    assert report.updated_count == 0
    assert report.failed_count == 0
    assert report.load_error is None


@pytest.mark.anyio
async def test_concurrent_override_during_cascade_is_last_write_wins() -> None:
    """An override landing between the cascade's read and write is lost.

    Writes carry no version check; this pins the known behaviour.
    """
    level_service, _, role_repo = _services()
    injected = {"done": False}

    def concurrent_override(role: RoleData) -> None:
        if injected["done"] or role.role_id != "EMPLOYEE":
            return
        injected["done"] = True
        stored = role_repo.stored("EMPLOYEE")
        role_repo._store(
            replace(
                stored,
                component_permissions=stored.component_permissions.override("salary", True),
            )
        )

    role_repo.before_save = concurrent_override

    await level_service.set_component_access(4, "settings", True)

    employee = role_repo.stored("EMPLOYEE")
    assert employee.component_permissions.get("settings").has_access is True
    assert employee.component_permissions.get("salary").has_access is False


@pytest.mark.anyio
async def test_override_collapses_when_level_catches_up() -> None:
    level_service, role_service, role_repo = _services()
    await role_service.override_permission(
        "ACCOUNTANT", PermissionType.COMPONENT, "salary", True
    )

    await level_service.set_component_access(3, "salary", True)

    salary = role_repo.stored("ACCOUNTANT").component_permissions.get("salary")
    assert (salary.has_access, salary.role_specific, salary.inherited_from_level) == (
        True,
        False,
        True,
    )
    assert role_repo.stored("ACCOUNTANT").has_overrides() is False
