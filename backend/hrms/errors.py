from typing import Any

from fastapi import status


class AppError(Exception):
    code: str = "APP_ERROR"
    message: str = "Application error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    details: Any | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any | None = None,
    ):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        if details is not None:
            self.details = details

        super().__init__(self.message)


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    message = "Validation error"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    code = "NOT_FOUND"
    message = "Resource not found"
    status_code = status.HTTP_404_NOT_FOUND


class AuthError(AppError):
    code = "AUTH_ERROR"
    message = "Authentication failed"
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionError(AppError):  # type: ignore[override]
    code = "PERMISSION_DENIED"
    message = "Insufficient permissions"
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(AppError):
    code = "CONFLICT_ERROR"
    message = "Resource conflict"
    status_code = status.HTTP_409_CONFLICT


class InternalError(AppError):
    code = "INTERNAL_ERROR"
    message = "Internal server error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class DuplicateLevelError(ConflictError):
    code = "DUPLICATE_LEVEL"

    def __init__(self, level: int):
        self.level = level
        super().__init__(
            f"Access level {level} already exists", details={"level": level}
        )


class DuplicateRoleError(ConflictError):
    code = "DUPLICATE_ROLE"

    def __init__(self, role_id: str):
        self.role_id = role_id
        super().__init__(f"Role {role_id} already exists", details={"role_id": role_id})


class LevelNotFoundError(NotFoundError):
    code = "LEVEL_NOT_FOUND"

    def __init__(self, level: int):
        self.level = level
        super().__init__(f"Access level {level} not found", details={"level": level})


class RoleNotFoundError(NotFoundError):
    code = "ROLE_NOT_FOUND"

    def __init__(self, role_id: str):
        self.role_id = role_id
        super().__init__(f"Role {role_id} not found", details={"role_id": role_id})


class CapabilityNotFoundError(NotFoundError):
    code = "CAPABILITY_NOT_FOUND"

    def __init__(self, permission_type: str, capability_id: str):
        self.permission_type = permission_type
        self.capability_id = capability_id
        super().__init__(
            f"{permission_type.capitalize()} {capability_id} not found",
            details={"type": permission_type, "capability_id": capability_id},
        )


class SystemLevelProtectedError(PermissionError):
    code = "SYSTEM_LEVEL_PROTECTED"
    message = "System access levels cannot be deleted or renumbered"


class SystemRoleProtectedError(PermissionError):
    code = "SYSTEM_ROLE_PROTECTED"
    message = "System roles cannot be deactivated"


class LevelInUseError(ValidationError):
    code = "LEVEL_IN_USE"

    def __init__(self, level: int, count: int):
        self.level = level
        self.count = count
        super().__init__(
            f"Cannot delete level: {count} role(s) are using this level",
            details={"level": level, "roles_count": count},
        )


class PermissionsSourceUnavailable(AppError):
    code = "PERMISSIONS_SOURCE_UNAVAILABLE"
    message = "Permission registry is unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


ERROR_CODE_BY_STATUS: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: ValidationError.code,
    status.HTTP_401_UNAUTHORIZED: AuthError.code,
    status.HTTP_403_FORBIDDEN: PermissionError.code,
    status.HTTP_404_NOT_FOUND: NotFoundError.code,
    status.HTTP_409_CONFLICT: ConflictError.code,
    status.HTTP_422_UNPROCESSABLE_ENTITY: ValidationError.code,
}


def error_payload(
    code: str,
    message: str,
    details: Any | None = None,
) -> dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details}}


def resolve_error_code(status_code: int) -> str:
    if status_code in ERROR_CODE_BY_STATUS:
        return ERROR_CODE_BY_STATUS[status_code]
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return InternalError.code
    return "UNKNOWN_ERROR"
