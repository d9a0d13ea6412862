from jobboard.models.user import User, Role
from jobboard.models.cv import CV, CV_FIELDS
from jobboard.models.job import Company, Job, Favorite, Application
from jobboard.models.comment import Comment, Message
from jobboard.models.log import ActivityLog

__all__ = [
    "User",
    "Role",
    "CV",
    "CV_FIELDS",
    "Company",
    "Job",
    "Favorite",
    "Application",
    "Comment",
    "Message",
    "ActivityLog",
]
