"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Generator

# Settings are read at import time; point them at SQLite before importing the app.
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import examhub.models  # noqa: E402, F401
from examhub.db.base import Base  # noqa: E402
from examhub.db.session import get_db  # noqa: E402
from examhub.main import app  # noqa: E402
from tests.helpers.seed import (  # noqa: E402
    create_district,
    create_exam_year,
    create_school,
)


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared by every connection of one test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine: Engine) -> Generator[Session, None, None]:
    """Database session bound to the per-test engine."""
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    """FastAPI test client with the database dependency overridden."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def exam_year(db: Session):
    return create_exam_year(db, year=2025)


@pytest.fixture
def district(db: Session):
    return create_district(db, name="Sivasagar")


@pytest.fixture
def school(db: Session, district):
    return create_school(db, district, name="Takenstar Partner School")


@pytest.fixture
def other_school(db: Session, district):
    return create_school(db, district, name="Nazira High School", medium="Assamese")
