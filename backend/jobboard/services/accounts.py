"""
Account workflows.

Registration with email verification, credential checks for login, the
password reset flow and account deletion. Verification and reset tokens
are single-use: they are cleared in the same transaction that consumes them.
"""

from datetime import timedelta
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.core.config import settings
from jobboard.core.logging import get_logger
from jobboard.core.security import generate_opaque_token, get_password_hash, verify_password
from jobboard.db.base import utcnow
from jobboard.db.session import transaction
from jobboard.models import ActivityLog, Application, Comment, Favorite, Job, Role, User
from jobboard.services.activity import record_activity
from jobboard.services.mailer import Mailer, MailKind

logger = get_logger("accounts")


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get a user by email address."""
    return db.query(User).filter(User.email == email).first()


def get_user_or_404(db: Session, email: str) -> User:
    user = get_user_by_email(db, email)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def register_user(
    db: Session,
    mailer: Mailer,
    name: str,
    email: str,
    password: str,
    motivation_letter: Optional[str] = None,
    photo: Optional[str] = None,
) -> User:
    """
    Create an unverified, active, ordinary account and email its verification link.

    The user row is only committed once the email has been handed to the
    transport; a delivery failure rolls the row back. A concurrent
    registration of the same address surfaces as the unique-email violation
    and is reported like any other duplicate.
    """
    duplicate = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Email already exists",
    )
    if get_user_by_email(db, email):
        raise duplicate

    verification_token = generate_opaque_token()

    try:
        with transaction(db):
            user = User(
                name=name,
                email=email,
                hashed_password=get_password_hash(password),
                motivation_letter=motivation_letter,
                role=Role.ORDINARY,
                active=True,
                verified_email=False,
                date_inscription=utcnow(),
                verification_token=verification_token,
                photo=photo,
            )
            db.add(user)
            db.flush()
            record_activity(db, user.id, "REGISTER", email)

            mailer.send(MailKind.VERIFICATION, email, {"token": verification_token})
    except IntegrityError:
        logger.info(f"Registration for {email} lost a race to an existing account")
        raise duplicate

    db.refresh(user)
    return user


def verify_email(db: Session, token: str) -> User:
    """Mark the token holder's email as verified and consume the token."""
    user = db.query(User).filter(User.verification_token == token).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid verification token",
        )

    with transaction(db):
        user.verified_email = True
        user.verification_token = None
        record_activity(db, user.id, "VERIFY_EMAIL", user.email)

    return user


def authenticate(db: Session, email: str, password: str, require_admin: bool = False) -> User:
    """
    Check credentials for a login.

    Unknown emails and wrong passwords share one message; an unverified
    email is reported separately.
    """
    invalid_credentials = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
    )

    user = get_user_by_email(db, email)
    if not user:
        raise invalid_credentials

    if not user.verified_email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email not verified. Please verify your email before logging in.",
        )

    if not verify_password(password, user.hashed_password):
        raise invalid_credentials

    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account deactivated",
        )

    if require_admin and user.role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized",
        )

    return user


def request_password_reset(db: Session, mailer: Mailer, email: str) -> User:
    """Issue a reset token valid for ``RESET_TOKEN_EXPIRE_MINUTES``."""
    user = get_user_by_email(db, email)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User not found",
        )

    reset_token = generate_opaque_token()

    with transaction(db):
        user.reset_token = reset_token
        user.reset_token_expires_at = utcnow() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
        record_activity(db, user.id, "REQUEST_PASSWORD_RESET", email)

        if settings.SEND_PASSWORD_RESET_EMAIL:
            mailer.send(MailKind.PASSWORD_RESET, email, {"token": reset_token})
        else:
            logger.info(f"Password reset email dispatch disabled, token stored for {email}")

    return user


def reset_password(db: Session, token: str, new_password: str) -> User:
    """Set a new password if the token exists and has not expired yet."""
    user = (
        db.query(User)
        .filter(User.reset_token == token)
        .filter(User.reset_token_expires_at > utcnow())
        .first()
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        )

    with transaction(db):
        user.hashed_password = get_password_hash(new_password)
        user.reset_token = None
        user.reset_token_expires_at = None
        record_activity(db, user.id, "RESET_PASSWORD", user.email)

    return user


def delete_user_account(db: Session, user: User, actor_id: Optional[int] = None) -> None:
    """
    Delete a user together with their CV, favorites, applications and comments.

    Jobs they posted stay online with the poster cleared.
    """
    user_id = user.id

    with transaction(db):
        db.query(Favorite).filter(Favorite.user_id == user_id).delete(synchronize_session=False)
        db.query(Application).filter(Application.user_id == user_id).delete(synchronize_session=False)
        db.query(Comment).filter(Comment.user_id == user_id).delete(synchronize_session=False)
        db.query(Job).filter(Job.user_id == user_id).update({Job.user_id: None}, synchronize_session=False)
        db.query(ActivityLog).filter(ActivityLog.user_id == user_id).update(
            {ActivityLog.user_id: None}, synchronize_session=False
        )
        db.delete(user)

        acting = actor_id if actor_id != user_id else None
        record_activity(db, acting, "DELETE_USER", user.email)
