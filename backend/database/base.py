# backend/database/base.py
"""
SQLAlchemy Base and Engine Configuration

Provides the declarative base for all models and engine factory.

CRITICAL SAFETY: When TESTING=true, this module ONLY connects to the test
database. The production database URL is refused during tests.
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError, TimeoutError
from sqlalchemy.orm import declarative_base, sessionmaker

from config import DEFAULT_DATABASE_URL, load_app_config

logger = logging.getLogger(__name__)

# ============================================================================
# CRITICAL: TEST DATABASE SAFETY CHECK
# ============================================================================
_config = load_app_config()
IS_TESTING = _config.testing
DATABASE_URL = _config.database_url

if IS_TESTING and DATABASE_URL == DEFAULT_DATABASE_URL:
    raise RuntimeError(
        "TESTING=true but the database URL is the production default. "
        "Set TEST_DATABASE_URL to a test database."
    )

_url = make_url(DATABASE_URL)
IS_SQLITE = _url.get_backend_name() == "sqlite"

if IS_SQLITE and _url.database and _url.database != ":memory:":
    # SQLite will not create missing parent directories
    Path(_url.database).parent.mkdir(parents=True, exist_ok=True)

# Declarative base for all models
Base = declarative_base()

if IS_SQLITE:
    # Flask serves requests from several threads
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=10,
        max_overflow=0,
        pool_pre_ping=True,  # Verify connections before use
        echo=False,  # Set to True for SQL logging during development
        hide_parameters=True,  # Redact parameters in logs
    )

# Session factory
SessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)


@contextmanager
def get_session():
    """Get a new SQLAlchemy session (context manager)."""
    try:
        db = SessionLocal()
    except TimeoutError:
        logger.error("Connection pool exhausted (all connections in use)")
        raise
    except OperationalError as e:
        logger.error(f"Database connection failed: {e}")
        raise

    try:
        yield db
    except Exception as e:
        logger.error(f"Session error: {e}")
        db.rollback()  # Explicit rollback on error
        raise
    finally:
        db.close()


def init_db():
    """Create all tables that do not exist yet."""
    # Models must be imported so they register on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created or already exist")


def check_connection() -> bool:
    """Test database connectivity.

    Returns:
        True if database is accessible
    """
    try:
        with get_session() as session:
            return session.execute(text("SELECT 1")).scalar() == 1
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        return False
