"""
Database connection for emis-plan
"""

import uuid

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL


def make_engine(url: str = DATABASE_URL, **kwargs):
    """Create an engine; pool sizing only applies to server databases."""
    if not url.startswith("sqlite"):
        kwargs.setdefault("pool_size", 10)          # Base connections to keep open
        kwargs.setdefault("max_overflow", 20)       # Additional connections when busy
        kwargs.setdefault("pool_timeout", 30)       # Seconds to wait for a connection
        kwargs.setdefault("pool_recycle", 1800)     # Recycle connections after 30 min
    kwargs.setdefault("pool_pre_ping", True)        # Test connections before using
    return create_engine(url, **kwargs)


engine = make_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def new_id() -> str:
    return uuid.uuid4().hex


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
