"""
Admin dependencies.

Every access-control administration endpoint is restricted to the single
highest-privilege role configured as ADMIN_ROLE. Denials are logged and
written to the audit trail on a best-effort basis.
"""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status

from hrms.auth.actor import CurrentActor
from hrms.config import settings
from hrms.dependencies import get_audit_service, get_current_actor
from hrms.services.audit.audit_service import AuditService

logger = logging.getLogger("hrms.admin")


async def require_admin_role(
    request: Request,
    actor: CurrentActor = Depends(get_current_actor),
    audit: AuditService = Depends(get_audit_service),
) -> CurrentActor:
    """
    Allow the request only when the caller holds the admin role.

    Returns:
        The authenticated actor, for handlers that record audit entries

    Raises:
        HTTPException: 401 without a valid token, 403 for any other role
    """
    if actor.role == settings.admin_role:
        return actor

    logger.warning(
        "admin_access_denied subject=%s role=%s method=%s path=%s",
        actor.subject,
        actor.role,
        request.method,
        request.url.path,
    )
    await audit.log(
        actor,
        "security.permission_denied",
        "admin_route",
        request.url.path,
        after={"request_method": request.method, "required_role": settings.admin_role},
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=f"Permission denied: {settings.admin_role} role required",
    )
