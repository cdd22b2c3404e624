"""Engine, session factory and the per-request session dependency"""
from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from routeboard.config import get_settings


def _engine_options(url: str) -> dict:
    # sqlite sessions are handed across threadpool workers by FastAPI
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


settings = get_settings()
engine = create_engine(settings.database_url, echo=False, **_engine_options(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """One session per request. Services only flush; handlers commit, so anything uncommitted is discarded here."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
