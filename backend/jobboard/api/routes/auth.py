"""
Authentication and account API endpoints.

Handles registration with email verification, login, password reset,
the caller's own profile, and admin user management.
"""

import re
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from jobboard.api.deps import Identity, get_current_identity, get_mailer, require_admin
from jobboard.api.routes.cv import CVPayload, cv_fields
from jobboard.core.logging import get_logger
from jobboard.core.security import create_access_token
from jobboard.db.session import get_db, transaction
from jobboard.models import CV_FIELDS, Role, User
from jobboard.services import accounts
from jobboard.services.activity import record_activity
from jobboard.services.mailer import DeliveryError, Mailer
from jobboard.services.uploads import save_upload

logger = get_logger("auth")

router = APIRouter()

EMAIL_PATTERN = r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$"


# ============== Pydantic Schemas ==============


class LoginRequest(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    """Schema for JWT token response."""

    token: str


class EmailRequest(BaseModel):
    """Body of admin actions targeting a user by email."""

    email: str


class ResetPasswordRequest(BaseModel):
    new_password: str = Field(alias="newPassword", min_length=1)


class UserResponse(BaseModel):
    """Schema for user response (without password or tokens)."""

    user_id: int
    name: str
    email: str
    motivation_letter: Optional[str] = None
    role: int
    active: bool
    verified_email: bool
    date_inscription: Optional[datetime] = None
    photo: Optional[str] = None
    cv_id: Optional[int] = None


class ProfileResponse(UserResponse, CVPayload):
    """A user joined with their CV fields (all None when there is no CV)."""


class RegisterForm(BaseModel):
    name: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=1)
    motivation_letter: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate email format."""
        if not re.match(EMAIL_PATTERN, v):
            raise ValueError("Invalid email format")
        return v.lower()


# ============== Helper Functions ==============


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        user_id=user.id,
        name=user.name,
        email=user.email,
        motivation_letter=user.motivation_letter,
        role=int(user.role),
        active=user.active,
        verified_email=user.verified_email,
        date_inscription=user.date_inscription,
        photo=user.photo,
        cv_id=user.cv_id,
    )


def to_profile_response(user: User) -> ProfileResponse:
    return ProfileResponse(**to_user_response(user).model_dump(), **cv_fields(user.cv))


def get_user_by_id_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def delivery_failed(error: DeliveryError) -> HTTPException:
    logger.error(f"Mail delivery failed: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An error occurred",
    )


# ============== Registration & Login ==============


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    motivation_letter: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Register a new user.

    Multipart form with an optional ``photo`` file. The account starts
    unverified; a verification link is emailed to the given address.
    """
    try:
        form = RegisterForm(
            name=name,
            email=email,
            password=password,
            motivation_letter=motivation_letter,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if accounts.get_user_by_email(db, form.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already exists",
        )

    stored_photo = await save_upload(photo)

    try:
        accounts.register_user(
            db,
            mailer,
            name=form.name,
            email=form.email,
            password=form.password,
            motivation_letter=form.motivation_letter,
            photo=stored_photo,
        )
    except DeliveryError as e:
        raise delivery_failed(e)

    return {"message": "User registered successfully"}


@router.get("/verify/{verification_token}")
async def verify(verification_token: str, db: Session = Depends(get_db)):
    """Consume an email verification token."""
    accounts.verify_email(db, verification_token)
    return {"message": "Email verified successfully"}


@router.post("/login", response_model=Token)
async def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    user = accounts.authenticate(db, credentials.email.lower(), credentials.password)
    return Token(token=create_access_token(user.id, user.role))


@router.post("/admin-login", response_model=Token)
async def admin_login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Same as login, but only admins get a token (403 otherwise)."""
    user = accounts.authenticate(
        db, credentials.email.lower(), credentials.password, require_admin=True
    )
    return Token(token=create_access_token(user.id, user.role))


@router.post("/logout")
async def logout(response: Response):
    """
    Client-side logout.

    Bearer tokens cannot be revoked; this only clears a ``jwtToken`` cookie
    a browser client may have stored.
    """
    response.delete_cookie("jwtToken")
    return {"message": "Logout successful"}


# ============== Password Reset ==============


@router.post("/request-password-reset")
async def request_password_reset(
    body: EmailRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    try:
        accounts.request_password_reset(db, mailer, body.email.lower())
    except DeliveryError as e:
        raise delivery_failed(e)
    return {"message": "Password reset instructions sent to your email."}


@router.post("/reset-password/{reset_token}")
async def reset_password(
    reset_token: str,
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
):
    accounts.reset_password(db, reset_token, body.new_password)
    return {"message": "Password reset successful"}


# ============== Own Profile ==============


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """The caller's account joined with their CV."""
    user = get_user_by_id_or_404(db, identity.user_id)
    return to_profile_response(user)


@router.put("/profile")
async def update_profile(
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """
    Update the caller's profile from a multipart form.

    Accepts ``motivation_letter``, an optional ``photo`` file and any CV
    field. Only text fields present in the form are changed; CV fields are
    ignored when the user has no CV yet.
    """
    user = get_user_by_id_or_404(db, identity.user_id)
    form = await request.form()

    photo = form.get("photo")
    stored_photo = await save_upload(photo) if photo is not None and not isinstance(photo, str) else None

    with transaction(db):
        if stored_photo:
            user.photo = stored_photo
        if isinstance(form.get("motivation_letter"), str):
            user.motivation_letter = form["motivation_letter"]

        if user.cv is not None:
            for field in CV_FIELDS:
                # file parts are not valid values for text columns
                if isinstance(form.get(field), str):
                    setattr(user.cv, field, form[field])

    return {"message": "Profile updated successfully"}


@router.delete("/profile")
async def delete_profile(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Delete the caller's own account."""
    user = get_user_by_id_or_404(db, identity.user_id)
    accounts.delete_user_account(db, user, actor_id=identity.user_id)
    return {"message": "Profile deleted successfully"}


# ============== Admin User Management ==============


@router.delete("/delete")
async def delete_user(
    body: EmailRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    user = accounts.get_user_or_404(db, body.email.lower())
    accounts.delete_user_account(db, user, actor_id=identity.user_id)
    return {"message": "User deleted successfully"}


@router.get("/search", response_model=list[ProfileResponse])
async def search_users(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    """List every user with their CV fields."""
    users = db.query(User).order_by(User.id).all()
    return [to_profile_response(user) for user in users]


@router.get("/search_user", response_model=UserResponse)
async def search_user(
    email: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    """Find a user by email (query parameter)."""
    return to_user_response(accounts.get_user_or_404(db, email.lower()))


@router.get("/search_user/{user_id}", response_model=ProfileResponse)
async def search_user_by_id(
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    return to_profile_response(get_user_by_id_or_404(db, user_id))


@router.put("/update-role")
async def update_role(
    body: EmailRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    """Promote a user to admin."""
    user = accounts.get_user_or_404(db, body.email.lower())
    with transaction(db):
        user.role = Role.ADMIN
        record_activity(db, identity.user_id, "UPDATE_ROLE", f"{user.email} -> {Role.ADMIN.name}")
    return {"message": "User role updated successfully"}


@router.put("/toggle-role")
async def toggle_role(
    body: EmailRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    """Flip a user between ordinary and admin."""
    user = accounts.get_user_or_404(db, body.email.lower())
    new_role = Role.ORDINARY if user.role == Role.ADMIN else Role.ADMIN
    with transaction(db):
        user.role = new_role
        record_activity(db, identity.user_id, "TOGGLE_ROLE", f"{user.email} -> {new_role.name}")
    return {"message": "User role updated successfully", "role": int(new_role)}


@router.put("/deactivate")
async def deactivate_user(
    body: EmailRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    user = accounts.get_user_or_404(db, body.email.lower())
    with transaction(db):
        user.active = False
        record_activity(db, identity.user_id, "DEACTIVATE_USER", user.email)
    return {"message": "User account deactivated successfully"}


@router.put("/activate")
async def activate_user(
    body: EmailRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    user = accounts.get_user_or_404(db, body.email.lower())
    with transaction(db):
        user.active = True
        record_activity(db, identity.user_id, "ACTIVATE_USER", user.email)
    return {"message": "User account activated successfully"}
