import smtplib

import pytest
from fastapi.testclient import TestClient

from jobboard.core.config import Settings, settings
from jobboard.main import app
from jobboard.services import mailer as mailer_module
from jobboard.services.mailer import DeliveryError, Mailer, MailKind


class FakeSMTP:
    """Records the SMTP conversation instead of opening a socket."""

    instances = []

    def __init__(self, host, port):
        self.host = host
        self.port = port
        self.calls = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(("login", username, password))

    def send_message(self, message):
        self.calls.append(("send", message))


class RefusingSMTP(FakeSMTP):
    def send_message(self, message):
        raise smtplib.SMTPRecipientsRefused({message["To"]: (550, b"no such user")})


def make_settings(**overrides):
    values = {
        "MAIL_ENABLED": True,
        "MAIL_SERVER": "smtp.test",
        "MAIL_PORT": 2525,
        "MAIL_USERNAME": "robot",
        "MAIL_PASSWORD": "pw",
        "MAIL_FROM": "robot@jobboard.test",
        "PUBLIC_BASE_URL": "http://jobs.test/",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(autouse=True)
def reset_fake():
    FakeSMTP.instances = []


def test_verification_email_links_to_verify_endpoint():
    message = Mailer(make_settings()).render(MailKind.VERIFICATION, "a@x.com", {"token": "abc123"})

    assert message["Subject"] == "Email Verification"
    assert message["To"] == "a@x.com"
    assert message["From"] == "robot@jobboard.test"
    assert 'href="http://jobs.test/api/auth/verify/abc123"' in message.get_content()


def test_password_reset_email_links_to_client_reset_page():
    settings = make_settings(PASSWORD_RESET_URL="https://jobs.example/reset/")

    message = Mailer(settings).render(MailKind.PASSWORD_RESET, "a@x.com", {"token": "abc123"})

    assert 'href="https://jobs.example/reset/abc123"' in message.get_content()
    assert "/api/auth/reset-password/" not in message.get_content()


def test_application_email_escapes_applicant_text():
    message = Mailer(make_settings()).render(
        MailKind.JOB_APPLICATION,
        "jobs@acme.example",
        {"applicant_email": "jane@example.com", "description": "<script>x</script>", "cv_file": "1-cv.pdf"},
    )
    body = message.get_content()

    assert "jane@example.com" in body
    assert "&lt;script&gt;" in body
    assert "http://jobs.test/uploads/1-cv.pdf" in body


def test_send_uses_tls_and_login(monkeypatch):
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)

    Mailer(make_settings()).send(MailKind.PASSWORD_RESET, "a@x.com", {"token": "t"})

    smtp = FakeSMTP.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.test", 2525)
    assert smtp.calls[0] == "starttls"
    assert smtp.calls[1] == ("login", "robot", "pw")
    assert smtp.calls[2][0] == "send"


def test_send_is_skipped_when_mail_disabled(monkeypatch):
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)

    Mailer(make_settings(MAIL_ENABLED=False)).send(MailKind.VERIFICATION, "a@x.com", {"token": "t"})

    assert FakeSMTP.instances == []


def test_transport_failure_raises_delivery_error(monkeypatch):
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", RefusingSMTP)

    with pytest.raises(DeliveryError):
        Mailer(make_settings()).send(MailKind.VERIFICATION, "a@x.com", {"token": "t"})


def test_unreachable_server_raises_delivery_error(monkeypatch):
    def unreachable(host, port):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(mailer_module.smtplib, "SMTP", unreachable)

    with pytest.raises(DeliveryError):
        Mailer(make_settings()).send(MailKind.VERIFICATION, "a@x.com", {"token": "t"})


def test_app_lifespan_provides_mailer_and_shuts_down_cleanly(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))

    with TestClient(app) as client:
        assert isinstance(app.state.mailer, Mailer)
        assert client.get("/health").status_code == 200

    assert (tmp_path / "uploads").is_dir()
