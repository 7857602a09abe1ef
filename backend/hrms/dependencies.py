from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from .auth.actor import CurrentActor
from .crud.access_level import AccessLevelRepository
from .crud.role import RoleRepository
from .database import get_session
from .domain.ports.access import (
    AccessLevelRepository as AccessLevelRepositoryPort,
    RoleRepository as RoleRepositoryPort,
)
from .security.token_inspection import ExpiredTokenError, InvalidTokenError, actor_from_token
from .services.access import AccessDecisionService, LevelService, RoleService
from .services.audit.audit_service import AuditService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_level_port(db: AsyncSession = Depends(get_db)) -> AccessLevelRepositoryPort:
    return AccessLevelRepository(db)


def get_role_port(db: AsyncSession = Depends(get_db)) -> RoleRepositoryPort:
    return RoleRepository(db)


def get_role_service(
    roles: RoleRepositoryPort = Depends(get_role_port),
    levels: AccessLevelRepositoryPort = Depends(get_level_port),
) -> RoleService:
    return RoleService(roles, levels)


def get_level_service(
    levels: AccessLevelRepositoryPort = Depends(get_level_port),
    roles: RoleRepositoryPort = Depends(get_role_port),
    role_service: RoleService = Depends(get_role_service),
) -> LevelService:
    return LevelService(levels, roles, role_service=role_service)


def get_access_decision_service(
    roles: RoleRepositoryPort = Depends(get_role_port),
) -> AccessDecisionService:
    return AccessDecisionService(roles)


def get_audit_service() -> AuditService:
    return AuditService()


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentActor:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )

    try:
        return actor_from_token(credentials.credentials)
    except ExpiredTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired"
        ) from None
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from None
