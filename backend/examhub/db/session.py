"""Request-scoped and script-scoped database sessions."""

from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy.orm import Session, sessionmaker

from examhub.db.engine import engine

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # results are serialized after commit
)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request. Services commit their own writes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(factory: sessionmaker = SessionLocal) -> Iterator[Session]:
    """Session for work outside a request (startup seeding); rolls back on error."""
    db = factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
