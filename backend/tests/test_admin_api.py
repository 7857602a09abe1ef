from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from hrms.config import settings
from hrms.dependencies import get_audit_service, get_level_port, get_role_port
from hrms.main import app
from tests.access_helpers import (
    FakeLevelRepository,
    FakeRoleRepository,
    default_levels,
    default_roles,
)


class FakeAuditService:
    def __init__(self) -> None:
        self.records: list[dict] = []

    async def log(self, actor, action, entity_type, entity_id, before=None, after=None, reason=None) -> bool:
        self.records.append(
            {
                "subject": actor.subject,
                "role": actor.role,
                "action": action,
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "before": before,
                "after": after,
            }
        )
        return True

    async def log_level_change(self, actor, action, level, before=None, after=None) -> bool:
        return await self.log(actor, f"access_level.{action}", "access_level", level, before, after)

    async def log_role_change(self, actor, action, role_id, before=None, after=None) -> bool:
        return await self.log(actor, f"role.{action}", "role", role_id, before, after)


def make_token(role: str, *, expires_in: timedelta = timedelta(minutes=5)) -> str:
    payload = {
        "sub": "user-1",
        "role": role,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def auth(role: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(role)}"}


@pytest.fixture
def api():
    levels = default_levels()
    level_repo = FakeLevelRepository(levels)
    role_repo = FakeRoleRepository(default_roles(levels))
    audit = FakeAuditService()

    app.dependency_overrides[get_level_port] = lambda: level_repo
    app.dependency_overrides[get_role_port] = lambda: role_repo
    app.dependency_overrides[get_audit_service] = lambda: audit
    try:
        yield TestClient(app), level_repo, role_repo, audit
    finally:
        app.dependency_overrides.clear()


ADMIN = settings.admin_role


def test_admin_routes_require_token(api) -> None:
    client, _, _, _ = api

    response = client.get("/api/admin/levels")

    assert response.status_code == 401
    body = response.json()
    assert body["error"]["code"] == "AUTH_ERROR"
    assert body["error"]["details"] == "Not authenticated"


def test_expired_token_is_rejected(api) -> None:
    client, _, _, _ = api
    token = make_token(ADMIN, expires_in=timedelta(minutes=-5))

    response = client.get("/api/admin/levels", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["details"] == "Token has expired"


def test_token_with_wrong_key_is_rejected(api) -> None:
    client, _, _, _ = api
    token = jwt.encode({"sub": "user-1", "role": ADMIN}, "other-key", algorithm="HS256")

    response = client.get("/api/admin/levels", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"]["details"] == "Invalid token"


def test_non_admin_role_is_denied_and_audited(api) -> None:
    client, _, _, audit = api

    response = client.delete("/api/admin/levels/3", headers=auth("CEO"))

    assert response.status_code == 403
    body = response.json()
    assert body["error"]["code"] == "PERMISSION_DENIED"
    assert body["error"]["details"] == f"Permission denied: {ADMIN} role required"
    assert audit.records[-1]["action"] == "security.permission_denied"
    assert audit.records[-1]["after"] == {"request_method": "DELETE", "required_role": ADMIN}


def test_list_levels_includes_role_counts(api) -> None:
    client, _, _, _ = api

    response = client.get("/api/admin/levels", headers=auth(ADMIN))

    assert response.status_code == 200
    body = response.json()
    assert [item["level"] for item in body] == [0, 1, 2, 3, 4]
    assert body[1]["role_count"] == 2
    assert body[0]["is_system_level"] is True


def test_create_level_and_audit_trail(api) -> None:
    client, level_repo, _, audit = api
    payload = {
        "level": 5,
        "name": "Interns",
        "component_permissions": [
            {"capability_id": "dashboard", "display_name": "Dashboard", "has_access": True}
        ],
    }

    response = client.post("/api/admin/levels", json=payload, headers=auth(ADMIN))

    assert response.status_code == 201
    body = response.json()
    assert body["level"] == 5
    assert body["cascade_enabled"] is True
    assert body["component_permissions"][0]["role_specific"] is False
    assert len(level_repo.rows) == 6
    assert audit.records[-1]["action"] == "access_level.create"
    assert audit.records[-1]["entity_id"] == "5"


def test_create_duplicate_level_conflicts(api) -> None:
    client, _, _, _ = api

    response = client.post(
        "/api/admin/levels", json={"level": 0, "name": "Again"}, headers=auth(ADMIN)
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "DUPLICATE_LEVEL"


def test_create_level_out_of_range_is_rejected(api) -> None:
    client, _, _, _ = api

    response = client.post(
        "/api/admin/levels", json={"level": 11, "name": "Too deep"}, headers=auth(ADMIN)
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"]["invariant"] == "INVARIANT-1.level_range"


def test_create_level_with_repeated_capability_is_rejected(api) -> None:
    client, _, _, _ = api
    entry = {"capability_id": "dashboard", "has_access": True}

    response = client.post(
        "/api/admin/levels",
        json={"level": 6, "name": "Dup", "component_permissions": [entry, entry]},
        headers=auth(ADMIN),
    )

    assert response.status_code == 400


def test_component_toggle_reports_cascade(api) -> None:
    client, _, role_repo, audit = api

    response = client.put(
        "/api/admin/levels/4/components/settings",
        json={"has_access": True},
        headers=auth(ADMIN),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["cascaded"] is True
    assert body["affected_roles"] == 1
    assert body["cascade"]["updated_role_ids"] == ["EMPLOYEE"]
    assert body["cascade"]["failed_count"] == 0
    assert role_repo.stored("EMPLOYEE").component_permissions.get("settings").has_access
    assert audit.records[-1]["action"] == "access_level.component_access"
    assert audit.records[-1]["before"]["level"] == 4


def test_partial_cascade_failure_is_reported(api) -> None:
    client, _, role_repo, _ = api
    role_repo.failing_role_ids.add("ACCOUNTANT")

    response = client.put(
        "/api/admin/levels/3/features/leave.apply",
        json={"has_access": False},
        headers=auth(ADMIN),
    )

    assert response.status_code == 200
    cascade = response.json()["cascade"]
    assert cascade["updated_role_ids"] == ["INCUBATION_MANAGER"]
    assert cascade["failures"][0]["role_id"] == "ACCOUNTANT"


def test_unknown_capability_toggle_is_not_found(api) -> None:
    client, _, _, _ = api

    response = client.put(
        "/api/admin/levels/4/features/rocket.launch",
        json={"has_access": True},
        headers=auth(ADMIN),
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "CAPABILITY_NOT_FOUND"


def test_toggle_cascade(api) -> None:
    client, _, _, _ = api

    response = client.put("/api/admin/levels/2/toggle-cascade", headers=auth(ADMIN))

    assert response.status_code == 200
    assert response.json()["cascade_enabled"] is False


def test_delete_system_level_is_forbidden(api) -> None:
    client, _, _, _ = api

    response = client.delete("/api/admin/levels/0", headers=auth(ADMIN))

    assert response.status_code == 403
    error = response.json()["error"]
    assert error["code"] == "SYSTEM_LEVEL_PROTECTED"
    assert error["message"] == "Cannot delete system access levels"


def test_delete_level_in_use(api) -> None:
    client, _, _, _ = api
    client.post("/api/admin/levels", json={"level": 6, "name": "Temps"}, headers=auth(ADMIN))
    client.post(
        "/api/admin/roles",
        json={"role_id": "temp", "display_name": "Temp", "hierarchy_level": 6},
        headers=auth(ADMIN),
    )

    response = client.delete("/api/admin/levels/6", headers=auth(ADMIN))

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "LEVEL_IN_USE"
    assert error["details"] == {"level": 6, "roles_count": 1}


def test_level_detail_lists_roles(api) -> None:
    client, _, _, _ = api

    response = client.get("/api/admin/levels/1", headers=auth(ADMIN))

    assert response.status_code == 200
    assert [role["role_id"] for role in response.json()["roles"]] == [
        "FACULTY_IN_CHARGE",
        "OFFICER_IN_CHARGE",
    ]


def test_missing_level_is_not_found(api) -> None:
    client, _, _, _ = api

    response = client.get("/api/admin/levels/9/affected-roles", headers=auth(ADMIN))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "LEVEL_NOT_FOUND"


def test_override_and_effective_permissions(api) -> None:
    client, _, _, audit = api

    response = client.put(
        "/api/admin/roles/employee/overrides",
        json={"type": "component", "capability_id": "salary", "has_access": True},
        headers=auth(ADMIN),
    )

    assert response.status_code == 200
    assert response.json()["has_overrides"] is True
    assert audit.records[-1]["action"] == "role.override"

    effective = client.get("/api/admin/roles/EMPLOYEE/effective", headers=auth(ADMIN))
    assert "salary" in effective.json()["components"]


def test_apply_level_to_role(api) -> None:
    client, _, _, _ = api

    response = client.put("/api/admin/levels/3/apply-to-role/EMPLOYEE", headers=auth(ADMIN))

    assert response.status_code == 200
    body = response.json()
    assert body["hierarchy_level"] == 4
    employees = next(
        entry for entry in body["component_permissions"] if entry["capability_id"] == "employees"
    )
    assert employees["role_specific"] is True


def test_patch_unknown_role_is_not_found(api) -> None:
    client, _, _, _ = api

    response = client.patch(
        "/api/admin/roles/GHOST", json={"display_name": "Ghost"}, headers=auth(ADMIN)
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ROLE_NOT_FOUND"


def test_system_role_cannot_be_deactivated(api) -> None:
    client, _, _, _ = api

    response = client.delete("/api/admin/roles/CEO", headers=auth(ADMIN))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "SYSTEM_ROLE_PROTECTED"


def test_my_permissions_snapshot(api) -> None:
    client, _, _, _ = api

    response = client.get("/api/access/permissions", headers=auth("employee"))

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "EMPLOYEE"
    assert body["degraded"] is False
    assert "salary" not in body["components"]


def test_snapshot_degrades_when_registry_is_down(api) -> None:
    client, _, role_repo, _ = api
    role_repo.unavailable = True

    response = client.get("/api/access/permissions", headers=auth("CEO"))

    assert response.status_code == 200
    body = response.json()
    assert body["degraded"] is True
    assert body["hierarchy_level"] == 2


def test_capability_decision(api) -> None:
    client, _, _, _ = api

    allowed = client.get("/api/access/features/leave.apply", headers=auth("EMPLOYEE"))
    denied = client.get("/api/access/components/salary", headers=auth("EMPLOYEE"))

    assert allowed.json()["allowed"] is True
    assert denied.json()["allowed"] is False


def test_role_hierarchy_endpoint(api) -> None:
    client, _, _, _ = api

    response = client.get("/api/access/roles", headers=auth("EMPLOYEE"))

    body = response.json()
    assert body["hierarchy"]["CEO"] == 2
    assert body["level_names"]["4"] == "Staff"
    assert "ADMIN" in body["roles"]
