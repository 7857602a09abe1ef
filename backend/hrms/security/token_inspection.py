from typing import Any, Dict

import jwt

from ..auth.actor import CurrentActor
from ..config import settings
from ..domain.invariants import InvariantViolation, normalize_role_id


class InvalidTokenError(Exception):
    """Raised when a token cannot be parsed or is malformed."""


class ExpiredTokenError(Exception):
    """Raised when a token has expired."""


def _parse_token_payload(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredTokenError from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError from exc


def validate_access_token(token: str) -> Dict[str, Any]:
    payload = _parse_token_payload(token)

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise InvalidTokenError()

    role = payload.get("role")
    if not isinstance(role, str) or not role.strip():
        raise InvalidTokenError()

    return payload


def actor_from_token(token: str) -> CurrentActor:
    payload = validate_access_token(token)
    try:
        role = normalize_role_id(payload["role"])
    except InvariantViolation:
        raise InvalidTokenError() from None
    return CurrentActor(subject=payload["sub"], role=role)
