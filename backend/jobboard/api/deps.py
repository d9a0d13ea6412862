"""
Shared request dependencies.

The authorization guard resolves the caller's identity purely from the
bearer token; it never reads the database, so a token stays valid until it
expires even if the account changes in the meantime.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from jobboard.core.security import decode_access_token
from jobboard.models import Role
from jobboard.services.mailer import Mailer

# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


@dataclass(frozen=True)
class Identity:
    """Caller identity decoded from a bearer token."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


async def get_current_identity(token: str = Depends(oauth2_scheme)) -> Identity:
    """
    Dependency resolving the caller from the JWT token.

    Raises HTTPException 401 if the token is missing, invalid, expired or
    carries malformed claims. A token without a role claim is treated as an
    ordinary user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    try:
        user_id = int(payload.get("sub"))
        role = Role(int(payload.get("role", Role.ORDINARY)))
    except (TypeError, ValueError):
        raise credentials_exception

    return Identity(user_id=user_id, role=role)


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Dependency restricting a route to admins (403 otherwise)."""
    if not identity.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. This route is only accessible by admin users.",
        )
    return identity


def get_mailer(request: Request) -> Mailer:
    """The mailer built at application start-up."""
    return request.app.state.mailer
