import os

# Required settings must exist before the app modules are imported
os.environ.setdefault("DOWNLOAD_TOKEN_SECRET", "test-download-secret")
os.environ.setdefault("ADMIN_SESSION_SECRET", "test-admin-session-secret")
os.environ.setdefault("ADMIN_PASSWORD", "letmein")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_feedback.db")

import pytest

from webinar_feedback.db.session import Base, SessionLocal, engine
from webinar_feedback.models import feedback, rate_limit  # noqa: E402,F401


@pytest.fixture(autouse=True)
def _reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def deliverable(tmp_path, monkeypatch):
    from webinar_feedback.core.settings import settings

    path = tmp_path / "slides.pptx"
    path.write_bytes(b"PK\x03\x04 fake slides")
    monkeypatch.setattr(settings, "download_file_path", str(path))
    return path
