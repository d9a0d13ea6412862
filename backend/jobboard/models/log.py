from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from jobboard.db.base import Base, utcnow


class ActivityLog(Base):
    """
    Audit trail of account events and admin moderation actions.

    Read back by admins through the logs endpoint.
    """

    __tablename__ = "log"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String, nullable=False)  # "REGISTER", "DELETE_USER", "TOGGLE_ROLE", ...
    detail = Column(String, nullable=True)
    date_log = Column(DateTime, default=utcnow, index=True)
