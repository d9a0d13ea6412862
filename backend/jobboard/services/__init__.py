from jobboard.services.mailer import Mailer, MailKind, DeliveryError
from jobboard.services.uploads import save_upload, build_storage_name
from jobboard.services.activity import record_activity
from jobboard.services import accounts

__all__ = [
    "Mailer",
    "MailKind",
    "DeliveryError",
    "save_upload",
    "build_storage_name",
    "record_activity",
    "accounts",
]
