from datetime import datetime, timedelta, timezone

import jwt
import pytest

from hrms.config import settings
from hrms.security.token_inspection import (
    ExpiredTokenError,
    InvalidTokenError,
    actor_from_token,
    validate_access_token,
)


def _encode(payload: dict) -> str:
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def test_actor_from_token_normalizes_role() -> None:
    actor = actor_from_token(_encode({"sub": "user-7", "role": " ceo "}))

    assert actor.subject == "user-7"
    assert actor.role == "CEO"


def test_actor_from_token_uses_registry_role_format() -> None:
    actor = actor_from_token(_encode({"sub": "user-7", "role": "officer in charge"}))

    assert actor.role == "OFFICER_IN_CHARGE"


def test_malformed_role_claim_is_invalid() -> None:
    with pytest.raises(InvalidTokenError):
        actor_from_token(_encode({"sub": "user-7", "role": "!!!"}))


def test_expired_token_raises() -> None:
    token = _encode(
        {"sub": "user-7", "role": "CEO", "exp": datetime.now(timezone.utc) - timedelta(seconds=5)}
    )

    with pytest.raises(ExpiredTokenError):
        validate_access_token(token)


@pytest.mark.parametrize(
    "payload",
    [
        {"role": "CEO"},
        {"sub": "", "role": "CEO"},
        {"sub": "user-7"},
        {"sub": "user-7", "role": "   "},
        {"sub": "user-7", "role": 3},
    ],
)
def test_incomplete_claims_are_invalid(payload: dict) -> None:
    with pytest.raises(InvalidTokenError):
        validate_access_token(_encode(payload))


def test_garbage_token_is_invalid() -> None:
    with pytest.raises(InvalidTokenError):
        validate_access_token("not-a-jwt")
