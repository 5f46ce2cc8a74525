import io
import os
import tempfile

_db_fd, _db_path = tempfile.mkstemp(suffix=".db")
os.close(_db_fd)
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_db_path}")
os.environ.setdefault("SEED_ON_STARTUP", "false")

import pytest
from fastapi.testclient import TestClient
from reportlab.pdfgen import canvas

from database import Base, SessionLocal, engine
from main import app
from modules.auth.services.auth_service import AuthService
from modules.directory.models import Sector, User, UserRole
from modules.signatures import storage

TEST_PASSWORD = "secret123"
_password_hash = None


class FakeStorage:
    """In-memory stand-in for the MinIO bucket"""

    def __init__(self):
        self.objects = {}
        self.fail_deletes = False
        self.missing = set()

    def put_bytes(self, key, data, content_type="application/octet-stream"):
        self.objects[key] = data

    def get_bytes(self, key):
        if key in self.missing or key not in self.objects:
            raise RuntimeError(f"object {key} not found")
        return self.objects[key]

    def presigned_url(self, key, expires=None):
        return f"http://storage.test/{key}"

    def delete_objects(self, paths):
        if self.fail_deletes:
            return [f"{p}: storage unavailable" for p in paths]
        for p in paths:
            self.objects.pop(p, None)
        return []


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def fake_storage(monkeypatch):
    fake = FakeStorage()
    for name in ("put_bytes", "get_bytes", "presigned_url", "delete_objects"):
        monkeypatch.setattr(storage, name, getattr(fake, name))
    return fake


@pytest.fixture
def db_session():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_sector(db_session):
    def _make(name="Administração", description=None):
        sector = db_session.query(Sector).filter(Sector.name == name).first()
        if sector:
            return sector
        sector = Sector(name=name, description=description)
        db_session.add(sector)
        db_session.commit()
        return sector
    return _make


@pytest.fixture
def make_user(db_session, make_sector):
    def _make(username, role=UserRole.COMMON, name=None, sector=None):
        global _password_hash
        if _password_hash is None:
            _password_hash = AuthService.get_password_hash(TEST_PASSWORD)
        sector = sector or make_sector()
        user = User(
            username=username,
            name=name or username.capitalize(),
            password_hash=_password_hash,
            role=role,
            sector_id=sector.id,
            is_first_login=False,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture
def common_user(make_user):
    return make_user("ana", name="Ana Souza")


@pytest.fixture
def other_user(make_user):
    return make_user("bruno", name="Bruno Lima")


@pytest.fixture
def admin_user(make_user):
    return make_user("carla", role=UserRole.ADMIN, name="Carla Admin")


@pytest.fixture
def support_user(make_user):
    return make_user("suporte", role=UserRole.SUPPORT, name="Suporte TI")


def auth_headers(user):
    token, _ = AuthService.create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


def pdf_bytes(text="PDF de prueba"):
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer)
    c.drawString(100, 750, text)
    c.save()
    buffer.seek(0)
    return buffer.read()
