from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from jobboard.db.base import Base, utcnow


class Comment(Base):
    """Free-text comment left by a user on a job posting."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("job.id"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    comment_text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)


class Message(Base):
    """Contact form submission. Has no owning user."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True)
    names = Column(String)
    email = Column(String)
    phone_number = Column(String)
    subject = Column(String)
    message_text = Column(Text)
    created_at = Column(DateTime, default=utcnow, index=True)
