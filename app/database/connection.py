from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings

MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    kwargs = {
        "connect_args": {
            "check_same_thread": False,
            "timeout": settings.SQLITE_BUSY_TIMEOUT,
        }
    }
    # an in-memory database lives and dies with its single connection
    if url in MEMORY_URLS:
        kwargs["poolclass"] = StaticPool
    return kwargs


def make_engine(url: str):
    """Engine for `url`; file-backed SQLite gets a pooled connection per session."""
    return create_engine(url, **_engine_kwargs(url))


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def reset_database(bind=None) -> None:
    """Drop and recreate every table."""
    bind = bind or engine
    Base.metadata.drop_all(bind=bind)
    Base.metadata.create_all(bind=bind)
