"""
Notification Dispatcher.

Composes transactional emails (verification link, job application
forwarding, password reset) and hands them to an SMTP server.
"""

import enum
import html
import smtplib
from email.message import EmailMessage
from typing import Any

from jobboard.core.config import Settings
from jobboard.core.logging import get_logger

logger = get_logger("mailer")


class MailKind(str, enum.Enum):
    VERIFICATION = "verification"
    JOB_APPLICATION = "job_application"
    PASSWORD_RESET = "password_reset"


class DeliveryError(Exception):
    """Raised when the mail transport fails to accept a message."""


SUBJECTS = {
    MailKind.VERIFICATION: "Email Verification",
    MailKind.JOB_APPLICATION: "Apply for job",
    MailKind.PASSWORD_RESET: "Password Reset",
}

TEMPLATES = {
    MailKind.VERIFICATION: (
        "<p>Dear user,</p>\n"
        "<p>Thank you for registering. Please click the following link to verify your email:</p>\n"
        '<a href="{base_url}/api/auth/verify/{token}">Verify Email</a>\n'
    ),
    MailKind.JOB_APPLICATION: (
        "<p>Good Morning,</p>\n"
        "<p>This is my mail : {applicant_email}</p>\n"
        "<p>{description}</p>\n"
        '<p>Here is the CV File: <a href="{base_url}/uploads/{cv_file}">Download CV</a></p>\n'
    ),
    MailKind.PASSWORD_RESET: (
        "<p>Dear user,</p>\n"
        "<p>A password reset was requested for your account. The link expires in one hour:</p>\n"
        '<a href="{reset_url}/{token}">Reset Password</a>\n'
    ),
}


class Mailer:
    """
    SMTP-backed mail sender.

    Built once at application start-up and shared through the
    ``get_mailer`` dependency. Each send opens its own SMTP connection.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def render(self, kind: MailKind, recipient: str, payload: dict[str, Any]) -> EmailMessage:
        values = {key: html.escape(str(value)) for key, value in payload.items()}
        body = TEMPLATES[kind].format(
            base_url=self.settings.PUBLIC_BASE_URL.rstrip("/"),
            reset_url=self.settings.PASSWORD_RESET_URL.rstrip("/"),
            **values,
        )

        message = EmailMessage()
        message["Subject"] = SUBJECTS[kind]
        message["From"] = self.settings.MAIL_FROM
        message["To"] = recipient
        message.set_content(body, subtype="html")
        return message

    def send(self, kind: MailKind, recipient: str, payload: dict[str, Any]) -> None:
        """
        Render and deliver one email.

        Raises:
            DeliveryError: if the SMTP server cannot be reached or rejects the message
        """
        message = self.render(kind, recipient, payload)

        if not self.settings.MAIL_ENABLED:
            logger.info(f"Mail disabled, not sending {kind.value} email to {recipient}")
            return

        try:
            with smtplib.SMTP(self.settings.MAIL_SERVER, self.settings.MAIL_PORT) as smtp:
                if self.settings.MAIL_USE_TLS:
                    smtp.starttls()
                if self.settings.MAIL_USERNAME:
                    smtp.login(self.settings.MAIL_USERNAME, self.settings.MAIL_PASSWORD)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send {kind.value} email to {recipient}: {e}")
            raise DeliveryError(str(e)) from e

        logger.info(f"Sent {kind.value} email to {recipient}")
