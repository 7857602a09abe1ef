from .access_level import AccessLevel
from .audit_log import AuditLog
from .base import Base
from .role import Role

__all__ = ["AccessLevel", "AuditLog", "Base", "Role"]
