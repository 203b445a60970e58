from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from webinar_feedback.core.settings import settings


class Base(DeclarativeBase):
    pass


def engine_options(database_url: str) -> Dict[str, Any]:
    """Engine kwargs for the configured backend.

    SQLite connections are shared across FastAPI worker threads; other
    backends ping pooled connections before use.
    """
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"connect_args": {}, "pool_pre_ping": True}


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

# services read ids and flags back after commit, so expire_on_commit stays on
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; rollback of failed admissions happens in the services."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
