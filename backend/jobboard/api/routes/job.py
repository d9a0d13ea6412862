"""
Job API endpoints.

Job postings (with implicit company creation), favorites, applications and
forwarding an application by email to a posting's contact address.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.api.deps import Identity, get_current_identity, get_mailer, require_admin
from jobboard.core.logging import get_logger
from jobboard.db.base import utcnow
from jobboard.db.session import get_db, transaction
from jobboard.models import Application, Comment, Company, Favorite, Job, User
from jobboard.services.activity import record_activity
from jobboard.services.mailer import DeliveryError, Mailer, MailKind
from jobboard.services.uploads import save_upload

logger = get_logger("job")

router = APIRouter()


# ============== Pydantic Schemas ==============


class AddJobRequest(BaseModel):
    """Posting that names its company; unknown companies are created."""

    company_name: str
    titles: Optional[str] = None
    mail: Optional[str] = None
    num: Optional[str] = None
    speciality: Optional[str] = None
    description: Optional[str] = None


class CreateJobRequest(BaseModel):
    """Posting attached to an existing company by id."""

    company_id: int
    titles: Optional[str] = None
    mail: Optional[str] = None
    num: Optional[str] = None
    speciality: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    category_id: Optional[int] = None


class JobIdRequest(BaseModel):
    job_id: int


class JobResponse(BaseModel):
    job_id: int
    titles: Optional[str] = None
    mail: Optional[str] = None
    num: Optional[str] = None
    speciality: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    company_id: int
    company_name: Optional[str] = None
    user_id: Optional[int] = None
    category_id: Optional[int] = None


class ApplicationResponse(BaseModel):
    candidature_id: int
    job_id: int
    user_id: int
    number_apply: int
    date_applied: Optional[datetime] = None
    user_name: Optional[str] = None
    job_title: Optional[str] = None


# ============== Helper Functions ==============


def to_job_response(job: Job) -> JobResponse:
    return JobResponse(
        job_id=job.id,
        titles=job.titles,
        mail=job.mail,
        num=job.num,
        speciality=job.speciality,
        description=job.description,
        date=job.date,
        company_id=job.company_id,
        company_name=job.company.name if job.company else None,
        user_id=job.user_id,
        category_id=job.category_id,
    )


def get_job_or_404(db: Session, job_id: int) -> Job:
    job = db.get(Job, job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )
    return job


def find_company(db: Session, name: str) -> Optional[Company]:
    return db.query(Company).filter(Company.name == name).first()


def get_or_create_company(db: Session, name: str) -> Company:
    """Company with this name, created in the current transaction if missing."""
    company = find_company(db, name)
    if company is None:
        company = Company(name=name)
        db.add(company)
        db.flush()
        logger.info(f"Created company {name!r} (id={company.id})")
    return company


def insert_job_for_company(db: Session, body: AddJobRequest, user_id: int) -> int:
    with transaction(db):
        company = get_or_create_company(db, body.company_name)
        job = Job(
            titles=body.titles,
            mail=body.mail,
            num=body.num,
            speciality=body.speciality,
            description=body.description,
            company_id=company.id,
            user_id=user_id,
            date=utcnow(),
        )
        db.add(job)
        db.flush()
        return job.id


def find_favorite(db: Session, user_id: int, job_id: int) -> Optional[Favorite]:
    return (
        db.query(Favorite)
        .filter(Favorite.user_id == user_id, Favorite.job_id == job_id)
        .first()
    )


def ensure_self_or_admin(identity: Identity, user_id: int) -> None:
    if not identity.is_admin and identity.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Only admin users can access data of other users.",
        )


def favorite_jobs(db: Session, user_id: int) -> list[JobResponse]:
    jobs = (
        db.query(Job)
        .join(Favorite, Favorite.job_id == Job.id)
        .filter(Favorite.user_id == user_id)
        .order_by(Favorite.date_added.desc())
        .all()
    )
    return [to_job_response(job) for job in jobs]


def list_applications(
    db: Session,
    user_id: Optional[int] = None,
    job_id: Optional[int] = None,
) -> list[ApplicationResponse]:
    query = (
        db.query(Application, User.name, Job.titles)
        .join(User, Application.user_id == User.id)
        .join(Job, Application.job_id == Job.id)
    )
    if user_id is not None:
        query = query.filter(Application.user_id == user_id)
    if job_id is not None:
        query = query.filter(Application.job_id == job_id)

    return [
        ApplicationResponse(
            candidature_id=application.id,
            job_id=application.job_id,
            user_id=application.user_id,
            number_apply=application.number_apply,
            date_applied=application.date_applied,
            user_name=user_name,
            job_title=job_title,
        )
        for application, user_name, job_title in query.order_by(Application.date_applied.desc()).all()
    ]


# ============== Job Postings ==============


@router.post("/add_job", status_code=status.HTTP_201_CREATED)
async def add_job(
    body: AddJobRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """
    Publish a job for a company given by name.

    The company lookup/creation and the job insert share one transaction.
    When another request creates the same company in between, the unique
    name rejects the insert and the posting is retried against that company.
    """
    try:
        job_id = insert_job_for_company(db, body, identity.user_id)
    except IntegrityError:
        logger.info(f"Company {body.company_name!r} created concurrently, retrying")
        job_id = insert_job_for_company(db, body, identity.user_id)

    return {"job_id": job_id}


@router.post("/create_job", status_code=status.HTTP_201_CREATED)
async def create_job(
    body: CreateJobRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Publish a job for an existing company id."""
    if db.get(Company, body.company_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Company not found",
        )

    with transaction(db):
        job = Job(
            titles=body.titles,
            mail=body.mail,
            num=body.num,
            speciality=body.speciality,
            description=body.description,
            date=body.date or utcnow(),
            company_id=body.company_id,
            category_id=body.category_id,
            user_id=identity.user_id,
        )
        db.add(job)
        db.flush()
        job_id = job.id

    return {"job_id": job_id}


@router.get("/get_jobs", response_model=list[JobResponse])
async def get_jobs(db: Session = Depends(get_db)):
    """All jobs, newest first."""
    jobs = db.query(Job).join(Company).order_by(Job.date.desc(), Job.id.desc()).all()
    return [to_job_response(job) for job in jobs]


@router.get("/get_job/{job_id}", response_model=JobResponse)
async def get_job(job_id: int, db: Session = Depends(get_db)):
    return to_job_response(get_job_or_404(db, job_id))


@router.post("/delete_job")
async def delete_job(
    body: JobIdRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    """Delete a job with its favorites, applications and comments (admin only)."""
    job = get_job_or_404(db, body.job_id)

    with transaction(db):
        db.query(Favorite).filter(Favorite.job_id == job.id).delete(synchronize_session=False)
        db.query(Application).filter(Application.job_id == job.id).delete(synchronize_session=False)
        db.query(Comment).filter(Comment.job_id == job.id).delete(synchronize_session=False)
        db.delete(job)
        record_activity(db, identity.user_id, "DELETE_JOB", f"job {body.job_id}")

    return {"message": "Job deleted successfully"}


# ============== Favorites ==============


@router.post("/add_to_favorites")
async def add_to_favorites(
    body: JobIdRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Bookmark a job. Bookmarking the same job twice keeps a single entry."""
    get_job_or_404(db, body.job_id)

    if find_favorite(db, identity.user_id, body.job_id) is None:
        try:
            with transaction(db):
                db.add(Favorite(user_id=identity.user_id, job_id=body.job_id, date_added=utcnow()))
        except IntegrityError:
            # a concurrent request stored the same pair first
            logger.info(f"Job {body.job_id} already in favorites of user {identity.user_id}")

    return {"message": "Job added to favorites successfully"}


@router.get("/get_favorites")
async def get_favorites(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return {"favorites": favorite_jobs(db, identity.user_id)}


@router.get("/get_favorites/{user_id}")
async def get_user_favorites(
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    ensure_self_or_admin(identity, user_id)
    return {"favorites": favorite_jobs(db, user_id)}


@router.get("/get_job_favorites/{job_id}")
async def get_job_favorites(job_id: int, db: Session = Depends(get_db)):
    """Users who bookmarked a job."""
    rows = (
        db.query(Favorite.user_id, User.name)
        .join(User, Favorite.user_id == User.id)
        .filter(Favorite.job_id == job_id)
        .all()
    )
    return [{"user_id": user_id, "user_name": name} for user_id, name in rows]


@router.get("/get_all_favorites")
async def get_all_favorites(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    rows = (
        db.query(Favorite, Job.titles)
        .join(Job, Favorite.job_id == Job.id)
        .order_by(Favorite.date_added.desc())
        .all()
    )
    return {
        "allFavorites": [
            {
                "favoris_id": favorite.id,
                "user_id": favorite.user_id,
                "job_id": favorite.job_id,
                "date_added": favorite.date_added,
                "titles": titles,
            }
            for favorite, titles in rows
        ]
    }


# ============== Applications ==============


@router.post("/apply_to_job")
async def apply_to_job(
    body: JobIdRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """
    Apply to a job.

    The first application creates the candidature; later ones increment
    ``number_apply`` and refresh ``date_applied``.
    """
    get_job_or_404(db, body.job_id)

    with transaction(db):
        application = (
            db.query(Application)
            .filter(Application.job_id == body.job_id, Application.user_id == identity.user_id)
            .first()
        )
        if application is None:
            application = Application(
                job_id=body.job_id,
                user_id=identity.user_id,
                number_apply=1,
                date_applied=utcnow(),
            )
            db.add(application)
        else:
            application.number_apply = Application.number_apply + 1
            application.date_applied = utcnow()

    return {"message": "Applied to job successfully"}


@router.get("/get_user_applications", response_model=list[ApplicationResponse])
async def get_all_applications(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    """Every application (admin only)."""
    return list_applications(db)


@router.get("/get_user_applications/{user_id}", response_model=list[ApplicationResponse])
async def get_user_applications(
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    ensure_self_or_admin(identity, user_id)
    return list_applications(db, user_id=user_id)


@router.get("/get_job_applications/{job_id}", response_model=list[ApplicationResponse])
async def get_job_applications(job_id: int, db: Session = Depends(get_db)):
    return list_applications(db, job_id=job_id)


@router.post("/send_mail", status_code=status.HTTP_201_CREATED)
async def send_mail(
    mail: str = Form(...),
    email: str = Form(...),
    description: str = Form(""),
    cvFile: Optional[UploadFile] = File(None),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Forward an application to a job's contact address.

    ``mail`` is the recipient, ``email`` the applicant's address; the
    uploaded ``cvFile`` is linked from the message body.
    """
    stored_cv = await save_upload(cvFile)

    try:
        mailer.send(
            MailKind.JOB_APPLICATION,
            mail,
            {"applicant_email": email, "description": description, "cv_file": stored_cv or ""},
        )
    except DeliveryError as e:
        logger.error(f"Failed to forward application to {mail}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred",
        )

    return {"message": "Mail sent successfully"}
