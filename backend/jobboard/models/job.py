from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from jobboard.db.base import Base, utcnow


class Company(Base):
    """Hiring company, deduplicated by name and created on first use."""

    __tablename__ = "company"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)

    jobs = relationship("Job", back_populates="company")


class Job(Base):
    """Job posting published by a user on behalf of a company."""

    __tablename__ = "job"

    id = Column(Integer, primary_key=True, index=True)
    titles = Column(String)
    mail = Column(String)  # contact email applications are forwarded to
    num = Column(String)  # contact phone
    speciality = Column(String)
    description = Column(Text)
    date = Column(DateTime, default=utcnow)

    company_id = Column(Integer, ForeignKey("company.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    category_id = Column(Integer, nullable=True)

    # Relationships
    company = relationship("Company", back_populates="jobs")


class Favorite(Base):
    """A user's bookmark of a job posting."""

    __tablename__ = "favoris"
    __table_args__ = (UniqueConstraint("user_id", "job_id", name="uq_favoris_user_job"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    job_id = Column(Integer, ForeignKey("job.id"), index=True, nullable=False)
    date_added = Column(DateTime, default=utcnow)


class Application(Base):
    """
    Candidature of a user to a job.

    One row per (job, user); repeat applications bump ``number_apply``.
    """

    __tablename__ = "candidature"
    __table_args__ = (UniqueConstraint("job_id", "user_id", name="uq_candidature_job_user"),)

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("job.id"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    number_apply = Column(Integer, nullable=False, default=1)
    date_applied = Column(DateTime, default=utcnow)
