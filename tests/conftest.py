import os
import sys
from pathlib import Path

# Must be set before anything imports backend.hr_nexus.config.
os.environ["DISABLE_DOTENV"] = "1"
os.environ["DATABASE_URL"] = "sqlite://"
# Ensure tests never call Gemini even if the developer machine has a key set.
os.environ["GEMINI_API_KEY"] = ""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


# Ensure `import backend.hr_nexus...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture()
def app(tmp_path: Path) -> FastAPI:
    """
    A FastAPI app wired to a fresh temporary SQLite key-value store.
    """
    from backend.hr_nexus import database as db

    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'store.sqlite3'}",
        connect_args={"check_same_thread": False},
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch the shared database module so router dependencies use the test DB.
    db.engine = engine
    db.SessionLocal = TestingSessionLocal

    from backend.hr_nexus.models import storage_entry  # noqa: F401

    db.Base.metadata.create_all(bind=engine)

    from backend.hr_nexus.main import include_routers, register_exception_handlers

    fastapi_app = FastAPI()
    include_routers(fastapi_app)
    register_exception_handlers(fastapi_app)
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary store used by the test app.
    """
    from backend.hr_nexus import database as db

    session = db.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_candidate(db_session):
    """Store a candidate (user + PENDING profile) directly through the repository."""
    from backend.hr_nexus.schemas.records import CandidateProfile
    from backend.hr_nexus.services.repository import save_candidate_profile, save_user
    from backend.hr_nexus.utils.identifiers import new_id, now_ms

    def _make(name: str = "Alice", email: str = "a@x.com", **fields) -> CandidateProfile:
        now = now_ms()
        profile = CandidateProfile(
            id=fields.pop("id", new_id()),
            name=name,
            email=email,
            created_at=now,
            last_updated=now,
            **fields,
        )
        save_user(db_session, profile.as_user())
        save_candidate_profile(db_session, profile)
        return profile

    return _make
