from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from legal_diary.core.config import settings


def _create_engine(database_url: str):
    # SQLite is used for local runs and tests
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


engine = _create_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables. Development and tests only."""
    from legal_diary.db import models  # noqa: F401  (register mappers)

    Base.metadata.create_all(bind=engine)
