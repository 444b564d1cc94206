"""
Database Engine & Session Management
SQLAlchemy engine, session factory and declarative base.
Only the idempotency store lives here; orders are persisted by the storefront backend.
"""
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from mamata.config import get_settings

settings = get_settings()

# Ensure data directory exists
if settings.DATABASE_URL.startswith("sqlite:///"):
    _db_dir = os.path.dirname(settings.DATABASE_URL.replace("sqlite:///", ""))
    if _db_dir:
        os.makedirs(_db_dir, exist_ok=True)

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    """Create all tables. Called once at application startup."""
    from mamata.models import idempotency as _idempotency_model   # noqa: F401

    Base.metadata.create_all(bind=engine)
