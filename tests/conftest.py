# tests/conftest.py
import pytest
from sqlalchemy.orm import sessionmaker

from chirp import config
from chirp.db import make_engine
from chirp.models import Base
from chirp.services import users as user_service


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with foreign keys enforced."""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep media files and login state inside the test's tmp directory."""
    monkeypatch.setattr(config, "MEDIA_DIR", str(tmp_path / "media"))
    monkeypatch.setattr(config, "SESSION_FILE", str(tmp_path / "session.json"))
    return tmp_path


@pytest.fixture
def alice(db):
    return user_service.create_user(db, "alice")


@pytest.fixture
def bob(db):
    return user_service.create_user(db, "bob")


@pytest.fixture
def carol(db):
    return user_service.create_user(db, "carol")


@pytest.fixture
def make_image(tmp_path):
    """Write a small real image with Pillow and return its path."""
    from PIL import Image

    def _make(name="pic.png", fmt="PNG", size=(8, 6), color=(200, 40, 40)):
        path = tmp_path / name
        Image.new("RGB", size, color).save(path, format=fmt)
        return str(path)

    return _make
