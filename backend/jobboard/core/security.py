"""
Security utilities for authentication and authorization.

Provides password hashing (bcrypt), JWT bearer token management and the
opaque one-time tokens used for email verification and password reset.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt.exceptions import InvalidTokenError
from passlib.context import CryptContext

from jobboard.core.config import settings
from jobboard.models.user import Role

# Password hashing context using bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

OPAQUE_TOKEN_BYTES = 20


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain text password to hash

    Returns:
        The hashed password string
    """
    return pwd_context.hash(password)


def create_access_token(
    user_id: int,
    role: Role,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed JWT access token for a user.

    Args:
        user_id: Identifier stored in the ``sub`` claim
        role: Role at issuance time, stored in the ``role`` claim
        expires_delta: Optional custom expiration time

    Returns:
        The encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user_id),
        "role": int(role),
        "exp": datetime.now(timezone.utc) + expires_delta,
    }

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT access token.

    Args:
        token: The JWT token string to decode

    Returns:
        The decoded token payload, or None if invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
        return payload
    except InvalidTokenError:
        return None


def generate_opaque_token() -> str:
    """Random hex string used for email verification and password reset."""
    return secrets.token_hex(OPAQUE_TOKEN_BYTES)
