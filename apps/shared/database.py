"""
Database configuration and session management

This module provides the SQLAlchemy engine, session factory and declarative
base shared by the blog and image services.
"""

import os
import re
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool, StaticPool

DEFAULT_DATABASE_URL = "postgresql+psycopg2://portfolio_user:changeme@db:5432/portfolio_db"

# Matches the URL inside a pasted `psql 'postgresql://...'` command
_PG_URL_PATTERN = re.compile(r"postgres(?:ql)?://[^\s'\"]+")


def normalize_database_url(value: Optional[str]) -> Optional[str]:
    """
    Clean up a DATABASE_URL copied from a hosting dashboard.

    - Extracts the URL from a full `psql '<url>'` command
    - Strips surrounding quotes
    - Rewrites postgres:// and postgresql:// to use the psycopg2 driver
    - Adds sslmode=require for Neon hosts
    """
    if not value:
        return None

    url = value.strip()
    match = _PG_URL_PATTERN.search(url)
    if match:
        url = match.group(0)
    url = url.strip("'\"")

    if url.startswith("postgres://"):
        url = "postgresql+psycopg2://" + url[len("postgres://"):]
    elif url.startswith("postgresql://"):
        url = "postgresql+psycopg2://" + url[len("postgresql://"):]

    if "neon.tech" in url and "sslmode=" not in url:
        url += ("&" if "?" in url else "?") + "sslmode=require"

    return url


DATABASE_URL = normalize_database_url(os.getenv("DATABASE_URL")) or DEFAULT_DATABASE_URL


def _engine_options(url: str) -> dict:
    # SQLite in-memory databases live on a single connection
    if url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    # NullPool for better compatibility with containerized environments
    return {"poolclass": NullPool}


engine = create_engine(
    DATABASE_URL,
    echo=False,  # Set to True for SQL query logging during development
    **_engine_options(DATABASE_URL),
)

if DATABASE_URL.startswith("sqlite"):
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # ON DELETE SET NULL on blogs.cover_image_id needs this
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for ORM models
Base = declarative_base()


def get_db():
    """
    Dependency injection for database sessions
    Usage in FastAPI endpoints:

    @router.get("/endpoint")
    def endpoint(db: Session = Depends(get_db)):
        ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables and indexes that don't exist yet."""
    # Import models so they register on Base.metadata
    import apps.images.models  # noqa: F401
    import apps.blog.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def check_db_connection() -> bool:
    """
    Test database connectivity
    Returns True if connection successful, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
