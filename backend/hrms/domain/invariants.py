"""
Domain invariants for access levels and roles.

All checks run BEFORE any side effect (database write). A violation raises
InvariantViolation, which is logged on construction and surfaced to callers
as a validation failure.

INVARIANTS:
1. Level numbers stay inside the supported hierarchy range
2. Role ids are non-empty upper-case identifiers
3. Entries produced by a merge carry exactly one provenance marker
"""

import logging
import re
from typing import Any

from .permissions import PermissionSet

logger = logging.getLogger(__name__)

MIN_LEVEL = 0
MAX_LEVEL = 10

_ROLE_ID_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")


class InvariantViolation(Exception):
    """
    Raised when a domain invariant is violated.

    This is a domain-level error that should be handled explicitly,
    never silently ignored.
    """

    def __init__(self, message: str, *, invariant: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.invariant = invariant
        self.details = details or {}

        logger.error(
            "invariant_violation invariant=%s message=%s details=%s",
            invariant,
            message,
            details,
        )


def validate_level_number(level: int) -> None:
    """
    INVARIANT-1: Level numbers must be within [MIN_LEVEL, MAX_LEVEL].

    Raises:
        InvariantViolation: If level is not an int in range
    """
    if isinstance(level, bool) or not isinstance(level, int) or not (MIN_LEVEL <= level <= MAX_LEVEL):
        raise InvariantViolation(
            f"Level must be between {MIN_LEVEL} and {MAX_LEVEL}",
            invariant="INVARIANT-1.level_range",
            details={"level": level},
        )


def normalize_role_id(role_id: str) -> str:
    """
    INVARIANT-2: Role ids are stored upper-case.

    Surrounding whitespace is dropped and spaces or dashes become underscores.

    Raises:
        InvariantViolation: If the normalized id is empty or malformed
    """
    normalized = re.sub(r"[\s\-]+", "_", (role_id or "").strip()).upper()
    if not _ROLE_ID_PATTERN.match(normalized):
        raise InvariantViolation(
            f"Invalid role id '{role_id}'",
            invariant="INVARIANT-2.role_id_format",
            details={"role_id": role_id},
        )
    return normalized


def validate_merged_provenance(permissions: PermissionSet, *, owner: str) -> None:
    """
    INVARIANT-3: Merge output marks every entry as exactly one of
    inherited or role-specific.

    Raises:
        InvariantViolation: If an entry carries both or neither marker
    """
    offending = [
        entry.capability_id
        for entry in permissions
        if entry.role_specific == entry.inherited_from_level
    ]
    if offending:
        raise InvariantViolation(
            "Merged permissions must carry exactly one provenance marker",
            invariant="INVARIANT-3.merge_provenance",
            details={"owner": owner, "capability_ids": offending},
        )
