import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator

from jobboard.db.base import Base, utcnow


class Role(enum.IntEnum):
    """Account role. Stored as a small integer."""

    ORDINARY = 0
    ADMIN = 1


class RoleType(TypeDecorator):
    """Integer column that always loads as a ``Role``."""

    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(Role(int(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Role(int(value))


class User(Base):
    """User account for authentication, authorization and profile data."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    motivation_letter = Column(Text)
    role = Column(RoleType, nullable=False, default=Role.ORDINARY)
    active = Column(Boolean, nullable=False, default=True)
    verified_email = Column(Boolean, nullable=False, default=False)
    date_inscription = Column(DateTime, default=utcnow)

    # One-time tokens (cleared once consumed)
    verification_token = Column(String, index=True, nullable=True)
    reset_token = Column(String, index=True, nullable=True)
    reset_token_expires_at = Column(DateTime, nullable=True)

    photo = Column(String, nullable=True)  # stored upload name
    # Relationships
    cv = relationship("CV", back_populates="user", uselist=False, cascade="all, delete-orphan")

    @property
    def cv_id(self):
        return self.cv.id if self.cv is not None else None
