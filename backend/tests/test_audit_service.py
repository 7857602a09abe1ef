"""Audit trail writes use their own session and never fail the caller."""
from contextlib import asynccontextmanager

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from hrms.auth.actor import CurrentActor
from hrms.crud.audit_log import AuditLogRepository
from hrms.models import AuditLog, Base
from hrms.services.audit import audit_service as audit_module
from hrms.services.audit.audit_service import AuditService
from tests.access_helpers import AsyncSessionAdapter

ACTOR = CurrentActor(subject="user-1", role="ADMIN")


@pytest.fixture()
def audit_db(monkeypatch: pytest.MonkeyPatch):
    engine = sa.create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=sa.pool.StaticPool,
    )
    Base.metadata.create_all(engine, tables=[AuditLog.__table__])
    session = Session(engine)
    adapter = AsyncSessionAdapter(session, engine)

    @asynccontextmanager
    async def session_factory():
        yield adapter

    monkeypatch.setattr(audit_module, "AsyncSessionLocal", session_factory)
    yield adapter
    session.close()
    engine.dispose()


@pytest.mark.anyio
async def test_level_change_is_recorded(audit_db) -> None:
    written = await AuditService().log_level_change(
        ACTOR, "update", 3, before={"name": "Old"}, after={"name": "New"}
    )

    assert written is True
    rows = await AuditLogRepository(audit_db).list_by_entity("access_level", "3")
    assert len(rows) == 1
    assert rows[0].action == "access_level.update"
    assert rows[0].actor_role == "ADMIN"
    assert rows[0].before == {"name": "Old"}
    assert rows[0].after == {"name": "New"}


@pytest.mark.anyio
async def test_role_change_is_recorded(audit_db) -> None:
    await AuditService().log_role_change(ACTOR, "override", "CEO", after={"capability_id": "salary"})

    rows = await AuditLogRepository(audit_db).list_by_entity("role", "CEO")
    assert [row.action for row in rows] == ["role.override"]


@pytest.mark.anyio
async def test_audit_failure_is_logged_not_raised(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    @asynccontextmanager
    async def broken_factory():
        raise OperationalError("INSERT", {}, Exception("database is down"))
        yield

    monkeypatch.setattr(audit_module, "AsyncSessionLocal", broken_factory)

    with caplog.at_level("WARNING", logger="hrms.audit"):
        written = await AuditService().log(ACTOR, "role.update", "role", "CEO")

    assert written is False
    assert any("audit_write_failed" in record.getMessage() for record in caplog.records)
