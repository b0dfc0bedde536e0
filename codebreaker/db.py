"""
Single place to:
- Create a SQLAlchemy Engine from DATABASE_URL (see config.py)
- Create a Session factory (SessionLocal) for per-request DB sessions
- Provide get_db() dependency for FastAPI routes
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .config import DATABASE_URL

# pool_pre_ping=True = auto-detect dead connections (helps with long-lived processes).
# SQLite needs check_same_thread off because FastAPI serves sync routes from a threadpool.
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    echo=False,
    future=True,
    connect_args=_connect_args,
)

# Each request gets its own session from this factory.
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


class Base(DeclarativeBase):
    pass


# FastAPI dependency that yields a DB session for the duration of a request,
# closing it even if the route raises.
def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
