"""
Comments, contact messages and the activity log.

Mounted under the same ``/job`` prefix as the job endpoints.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from jobboard.api.deps import Identity, get_current_identity, require_admin
from jobboard.db.base import utcnow
from jobboard.db.session import get_db, transaction
from jobboard.models import CV, ActivityLog, Comment, Job, Message, User
from jobboard.services.activity import record_activity

router = APIRouter()


# ============== Pydantic Schemas ==============


class CommentRequest(BaseModel):
    comment_text: str = Field(min_length=1)


class CommentIdRequest(BaseModel):
    comment_id: int


class CommentResponse(BaseModel):
    comment_id: int
    job_id: int
    user_id: int
    comment_text: str
    created_at: Optional[datetime] = None
    photo: Optional[str] = None
    user_prenom: Optional[str] = None
    user_nom: Optional[str] = None


class MessageRequest(BaseModel):
    """Contact form submission."""

    names: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    subject: Optional[str] = None
    message_text: str = Field(min_length=1)


class MessageIdRequest(BaseModel):
    message_id: int


class MessageResponse(BaseModel):
    message_id: int
    names: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    subject: Optional[str] = None
    message_text: Optional[str] = None
    created_at: Optional[datetime] = None


class LogResponse(BaseModel):
    log_id: int
    user_id: Optional[int] = None
    action: str
    detail: Optional[str] = None
    date_log: Optional[datetime] = None


# ============== Helper Functions ==============


def list_comments(db: Session, job_id: Optional[int] = None) -> list[CommentResponse]:
    """Comments with the author's photo and CV names, newest first."""
    query = (
        db.query(Comment, User.photo, CV.prenom, CV.nom)
        .join(User, Comment.user_id == User.id)
        .outerjoin(CV, CV.user_id == Comment.user_id)
    )
    if job_id is not None:
        query = query.filter(Comment.job_id == job_id)

    rows = query.order_by(Comment.created_at.desc(), Comment.id.desc()).all()
    return [
        CommentResponse(
            comment_id=comment.id,
            job_id=comment.job_id,
            user_id=comment.user_id,
            comment_text=comment.comment_text,
            created_at=comment.created_at,
            photo=photo,
            user_prenom=prenom,
            user_nom=nom,
        )
        for comment, photo, prenom, nom in rows
    ]


# ============== Comments ==============


@router.get("/comments/{job_id}", response_model=list[CommentResponse])
async def get_comments(job_id: int, db: Session = Depends(get_db)):
    return list_comments(db, job_id=job_id)


@router.get("/all_comments", response_model=list[CommentResponse])
async def get_all_comments(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    return list_comments(db)


@router.post("/add_comment/{job_id}", status_code=status.HTTP_201_CREATED)
async def add_comment(
    job_id: int,
    body: CommentRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    if db.get(Job, job_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )

    comment = Comment(
        job_id=job_id,
        user_id=identity.user_id,
        comment_text=body.comment_text,
        created_at=utcnow(),
    )
    with transaction(db):
        db.add(comment)

    db.refresh(comment)
    return {
        "message": "Comment added successfully",
        "comment": {"comment_id": comment.id, "created_at": comment.created_at},
    }


@router.post("/delete_comment")
async def delete_comment(
    body: CommentIdRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    comment = db.get(Comment, body.comment_id)
    if comment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )

    with transaction(db):
        db.delete(comment)
        record_activity(db, identity.user_id, "DELETE_COMMENT", f"comment {body.comment_id}")

    return {"message": "Comment deleted successfully"}


# ============== Contact Messages ==============


@router.post("/save_message", status_code=status.HTTP_201_CREATED)
async def save_message(body: MessageRequest, db: Session = Depends(get_db)):
    message = Message(**body.model_dump(), created_at=utcnow())
    with transaction(db):
        db.add(message)

    db.refresh(message)
    return {"message": "Message saved successfully", "messageId": message.id}


@router.get("/get_messages", response_model=list[MessageResponse])
async def get_messages(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    messages = db.query(Message).order_by(Message.created_at.desc(), Message.id.desc()).all()
    return [
        MessageResponse(
            message_id=message.id,
            names=message.names,
            email=message.email,
            phone_number=message.phone_number,
            subject=message.subject,
            message_text=message.message_text,
            created_at=message.created_at,
        )
        for message in messages
    ]


@router.post("/delete_message")
async def delete_message(
    body: MessageIdRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    message = db.get(Message, body.message_id)
    if message is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found",
        )

    with transaction(db):
        db.delete(message)
        record_activity(db, identity.user_id, "DELETE_MESSAGE", f"message {body.message_id}")

    return {"message": "Message deleted successfully"}


# ============== Activity Log ==============


@router.get("/get_logs", response_model=list[LogResponse])
async def get_logs(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    entries = db.query(ActivityLog).order_by(ActivityLog.date_log.desc(), ActivityLog.id.desc()).all()
    return [
        LogResponse(
            log_id=entry.id,
            user_id=entry.user_id,
            action=entry.action,
            detail=entry.detail,
            date_log=entry.date_log,
        )
        for entry in entries
    ]
