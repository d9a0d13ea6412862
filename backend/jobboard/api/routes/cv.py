"""
CV API endpoints.

Each user owns at most one CV. Only the owner can create, update, read or
delete it; admins can list all of them.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from jobboard.api.deps import Identity, get_current_identity, require_admin
from jobboard.db.session import get_db, transaction
from jobboard.models import CV, CV_FIELDS

router = APIRouter()


# ============== Pydantic Schemas ==============


class CVPayload(BaseModel):
    """Free-text CV fields as sent by clients."""

    nom: Optional[str] = None
    prenom: Optional[str] = None
    localisation: Optional[str] = None
    work_experience: Optional[str] = None
    work_experience_duree: Optional[str] = None
    education: Optional[str] = None
    education_duree: Optional[str] = None
    skills: Optional[str] = None
    languages: Optional[str] = None
    certifications_and_licenses: Optional[str] = None
    links: Optional[str] = None
    profession: Optional[str] = None
    country: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None


class CVResponse(CVPayload):
    """Schema for a stored CV."""

    cv_id: int
    user_id: int


class CVCreated(BaseModel):
    cvId: int


# ============== Helper Functions ==============


def cv_fields(cv: Optional[CV]) -> dict:
    """Column values of a CV keyed by wire name (all None when there is no CV)."""
    return {field: getattr(cv, field) if cv is not None else None for field in CV_FIELDS}


def to_cv_response(cv: CV) -> CVResponse:
    return CVResponse(cv_id=cv.id, user_id=cv.user_id, **cv_fields(cv))


def get_user_cv(db: Session, user_id: int) -> Optional[CV]:
    return db.query(CV).filter(CV.user_id == user_id).first()


def apply_cv_payload(cv: CV, payload: CVPayload) -> None:
    for field, value in payload.model_dump().items():
        setattr(cv, field, value)


# ============== API Endpoints ==============


@router.post("/create_cv", response_model=CVCreated, status_code=status.HTTP_201_CREATED)
async def create_cv(
    payload: CVPayload,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """
    Create the caller's CV.

    A user has at most one CV: if one already exists it is overwritten in
    place and 200 is returned instead of 201.
    """
    cv = get_user_cv(db, identity.user_id)

    with transaction(db):
        if cv is None:
            cv = CV(user_id=identity.user_id)
            db.add(cv)
        else:
            response.status_code = status.HTTP_200_OK
        apply_cv_payload(cv, payload)

    db.refresh(cv)
    return CVCreated(cvId=cv.id)


@router.put("/update_cv/{cv_id}")
async def update_cv(
    cv_id: int,
    payload: CVPayload,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Update a CV owned by the caller."""
    cv = db.query(CV).filter(CV.id == cv_id, CV.user_id == identity.user_id).first()
    if not cv:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="CV not found",
        )

    with transaction(db):
        apply_cv_payload(cv, payload)

    return {"message": "CV updated successfully"}


@router.get("/check_cv")
async def check_cv(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Tell whether the caller already has a CV."""
    return {"hasCV": get_user_cv(db, identity.user_id) is not None}


@router.get("/get_cv/{cv_id}", response_model=CVResponse)
async def get_cv(
    cv_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    cv = db.query(CV).filter(CV.id == cv_id, CV.user_id == identity.user_id).first()
    if not cv:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="CV not found",
        )
    return to_cv_response(cv)


@router.get("/get_all_cvs", response_model=list[CVResponse])
async def get_all_cvs(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    """List every CV (admin only)."""
    return [to_cv_response(cv) for cv in db.query(CV).order_by(CV.id).all()]


@router.delete("/delete_cv")
async def delete_cv(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Delete the caller's CV."""
    cv = get_user_cv(db, identity.user_id)
    if not cv:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="CV not found",
        )

    with transaction(db):
        db.delete(cv)

    return {"message": "CV deleted successfully"}
