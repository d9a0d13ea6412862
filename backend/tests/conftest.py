from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobboard.api.deps import get_mailer
from jobboard.core.config import settings
from jobboard.core.security import create_access_token, get_password_hash
from jobboard.db.base import Base, utcnow
from jobboard.db.session import get_db
from jobboard.main import app
from jobboard.models import Role, User
from jobboard.services.mailer import DeliveryError


class RecordingMailer:
    """Stands in for the SMTP mailer and remembers what would have been sent."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, kind, recipient, payload):
        if self.fail:
            raise DeliveryError("SMTP server unavailable")
        self.sent.append((kind, recipient, payload))


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def mailer():
    return RecordingMailer()


@pytest.fixture()
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture()
def client(session_factory, mailer, upload_dir):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    def _make_user(
        email,
        name="Test User",
        password="secret",
        role=Role.ORDINARY,
        verified=True,
        active=True,
    ):
        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            verified_email=verified,
            active=active,
            date_inscription=utcnow(),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def user(make_user):
    return make_user("user@example.com", name="Regular User")


@pytest.fixture()
def other_user(make_user):
    return make_user("other@example.com", name="Other User")


@pytest.fixture()
def admin(make_user):
    return make_user("admin@example.com", name="Admin", role=Role.ADMIN)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def headers_for(user):
    return bearer(create_access_token(user.id, user.role))


def roleless_headers(user):
    """Token signed with the right key but carrying no role claim."""
    token = jwt.encode(
        {"sub": str(user.id), "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    return bearer(token)


@pytest.fixture()
def user_headers(user):
    return headers_for(user)


@pytest.fixture()
def admin_headers(admin):
    return headers_for(admin)
