import logging
from typing import Any

from ...auth.actor import CurrentActor
from ...crud.audit_log import AuditLogRepository
from ...database import AsyncSessionLocal

logger = logging.getLogger("hrms.audit")


class AuditService:
    """Best-effort audit trail for administrative access-control changes.

    Each record is written in its own session so an audit commit never
    touches the business transaction. A failed audit write is logged and
    the request carries on.
    """

    async def log(
        self,
        actor: CurrentActor,
        action: str,
        entity_type: str,
        entity_id: str | int,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> bool:
        try:
            async with AsyncSessionLocal() as audit_session:
                await AuditLogRepository(audit_session).create(
                    actor_subject=actor.subject,
                    actor_role=actor.role,
                    action=action,
                    entity_type=entity_type,
                    entity_id=str(entity_id),
                    before=before,
                    after=after,
                    reason=reason,
                )
        except Exception as exc:
            logger.warning(
                "audit_write_failed action=%s entity_type=%s entity_id=%s error=%s",
                action,
                entity_type,
                entity_id,
                exc,
            )
            return False
        return True

    async def log_level_change(
        self,
        actor: CurrentActor,
        action: str,
        level: int,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
    ) -> bool:
        return await self.log(actor, f"access_level.{action}", "access_level", level, before, after)

    async def log_role_change(
        self,
        actor: CurrentActor,
        action: str,
        role_id: str,
        before: dict[str, Any] | None = None,
        after: dict[str, Any] | None = None,
    ) -> bool:
        return await self.log(actor, f"role.{action}", "role", role_id, before, after)
