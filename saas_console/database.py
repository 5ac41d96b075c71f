"""
Database Configuration and Session Management

This module handles SQLAlchemy setup with connection pooling.
One session is opened per request through the get_db dependency.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool
from saas_console.config import get_settings
import logging

logger = logging.getLogger(__name__)

settings = get_settings()

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

# SQLAlchemy engine with connection pooling
# SQLite connections are shared across the test client's worker threads.
engine = create_engine(
    settings.DATABASE_URL,
    poolclass=QueuePool,
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=settings.DATABASE_MAX_OVERFLOW,
    pool_pre_ping=True,
    echo=settings.DEBUG,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)

# expire_on_commit=False lets handlers serialize objects after commit
# without another round trip.
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False
)

# Base class for all models
Base = declarative_base()


@event.listens_for(engine, "connect")
def configure_connection(dbapi_connection, connection_record):
    """Set connection-level configuration on new connections."""
    cursor = dbapi_connection.cursor()
    if settings.DATABASE_URL.startswith("postgresql"):
        cursor.execute("SET TIME ZONE 'UTC'")
    cursor.close()
    logger.debug("New database connection established")


def get_db() -> Session:
    """
    Dependency function that provides a database session.

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Create all tables.

    Used by the development server on startup and by the seed command.
    """
    import saas_console.models  # noqa: F401  registers every table

    logger.warning("init_db() called - creating tables from model metadata")
    Base.metadata.create_all(bind=engine)
