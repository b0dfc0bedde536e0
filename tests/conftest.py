"""
- Spins up an in-memory SQLite database for the progress tables
- Provide a db_session fixture and override FastAPI's get_db so routes use it
- Provide a client fixture (TestClient(app)) that already has the override applied
"""
import os
import pytest
from typing import Generator

# Must be set before codebreaker.config is imported:
# skip dev-only startup hooks and never point at a real database.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("RANDOM_ORG_ENABLED", "0")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from codebreaker.db import Base, get_db
from codebreaker.main import app
from codebreaker import models  # noqa: F401

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"



@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets TestClient threads and the test
    # share ONE in-memory SQLite database.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _clean_db(engine):
    """The repository commits, so wipe rows before each test."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM level_progress"))
        conn.execute(text("DELETE FROM daily_results"))
        conn.execute(text("DELETE FROM stats"))
    yield


@pytest.fixture(autouse=True)
def override_dep(db_session):
    """Force the app to use our test session for every request."""
    def _get_db_for_tests():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_for_tests
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)
