import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure tests use an in-memory SQLite DB and never create the on-disk one
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SKIP_INIT_DB", "1")

# Ensure the project root is on sys.path so `import clinidash` works when running
# pytest from the repository root.
ROOT_DIR = Path(__file__).resolve().parents[2]  # repository root
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from clinidash.app import app
from clinidash.db.session import Base, enable_sqlite_foreign_keys, get_db


# In-memory SQLite shared across connections
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def create_schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


def _override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    # ensure limiter state fresh each test
    if hasattr(app.state, "limiter") and hasattr(app.state.limiter, "reset"):
        app.state.limiter.reset()
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def patient(db):
    from datetime import date
    from clinidash.services import records

    return records.create_patient(
        db,
        {"name": "Jane Doe", "dob": date(1980, 5, 17), "gender": "Female", "chief_complaint": "Fatigue"},
    )


@pytest.fixture
def mock_gemini(monkeypatch):
    """Replace the HTTP call with canned replies; returns the list of captured calls.

    Tests queue replies with `mock_gemini.replies.append(text)`.
    """
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    import clinidash.services.gemini as gemini

    class _Fake:
        def __init__(self):
            self.replies = []
            self.calls = []

        async def __call__(self, parts, *, json_mode=False, pro=False):
            self.calls.append({"parts": parts, "json_mode": json_mode, "pro": pro})
            return self.replies.pop(0) if self.replies else "{}"

    fake = _Fake()
    monkeypatch.setattr(gemini, "generate_content", fake)
    return fake
