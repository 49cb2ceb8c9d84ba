from __future__ import annotations

import os
import tempfile

_RUNTIME_DIR = tempfile.mkdtemp(prefix="careers-tests-")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_RUNTIME_DIR, "uploads"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_RUNTIME_DIR, 'careers.db')}")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from careers.database import Base, build_engine, get_db  # noqa: E402
from careers.main import app  # noqa: E402
from careers.services.file_store import FileStore, get_file_store  # noqa: E402
from careers.services.submission import IncomingFile, SubmissionForm  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(tmp_path):
    return FileStore(tmp_path / "uploads")


@pytest.fixture
def client(session_factory, store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_form(**overrides) -> SubmissionForm:
    values = {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "position": "developer",
        "phone": "555-0100",
        "cover_letter": "I would like to build engines.",
    }
    values.update(overrides)
    return SubmissionForm(**values)


def make_file(field_name: str, filename: str, size: int = 2048, content_type: str = "text/plain") -> IncomingFile:
    return IncomingFile(field_name=field_name, filename=filename, content_type=content_type, data=b"x" * size)
