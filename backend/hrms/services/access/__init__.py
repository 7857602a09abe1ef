from .access_decision import AccessDecisionService, PermissionSnapshot
from .bootstrap import BootstrapService
from .cascade import CascadeCoordinator, CascadeFailure, CascadeReport
from .level_service import LevelChanges, LevelService, LevelSummary, LevelUpdateResult
from .role_service import RoleChanges, RoleService

__all__ = [
    "AccessDecisionService",
    "BootstrapService",
    "CascadeCoordinator",
    "CascadeFailure",
    "CascadeReport",
    "LevelChanges",
    "LevelService",
    "LevelSummary",
    "LevelUpdateResult",
    "PermissionSnapshot",
    "RoleChanges",
    "RoleService",
]
