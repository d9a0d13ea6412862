from datetime import timedelta

import jwt

from jobboard.core.config import settings
from jobboard.core.security import (
    create_access_token,
    decode_access_token,
    generate_opaque_token,
    get_password_hash,
    verify_password,
)
from jobboard.models import Role


def test_password_hash_is_salted_and_verifiable():
    first = get_password_hash("hunter2")
    second = get_password_hash("hunter2")

    assert first != "hunter2"
    assert first != second
    assert verify_password("hunter2", first)
    assert verify_password("hunter2", second)
    assert not verify_password("hunter3", first)


def test_access_token_carries_identity_role_and_expiry():
    token = create_access_token(42, Role.ADMIN)
    payload = decode_access_token(token)

    assert payload["sub"] == "42"
    assert payload["role"] == 1
    assert "exp" in payload


def test_expired_token_is_rejected():
    token = create_access_token(1, Role.ORDINARY, expires_delta=timedelta(seconds=-10))
    assert decode_access_token(token) is None


def test_token_signed_with_another_secret_is_rejected():
    forged = jwt.encode({"sub": "1", "role": 1}, "not-the-secret", algorithm=settings.ALGORITHM)
    assert decode_access_token(forged) is None


def test_garbage_token_is_rejected():
    assert decode_access_token("not-a-jwt") is None


def test_opaque_tokens_are_random_hex():
    first = generate_opaque_token()
    second = generate_opaque_token()

    assert len(first) == 40
    int(first, 16)
    assert first != second
