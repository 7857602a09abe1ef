from fastapi import APIRouter

from ..admin import levels as admin_levels
from ..admin import roles as admin_roles
from ..routers import access

router = APIRouter(prefix="/api")

_admin_routers = [
    admin_levels.router,
    admin_roles.router,
]

_public_routers = [
    access.router,
]

for _router in [*_admin_routers, *_public_routers]:
    router.include_router(_router)
