import logging
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from moviebooking.core.config import settings
from moviebooking.core.errors import DuplicateKeyError, StoreError

logger = logging.getLogger(__name__)


def create_database_engine(database_url: str):
    """Create the SQLAlchemy engine for the configured database"""
    if database_url.startswith("sqlite"):
        # SQLite connections are shared across the threadpool FastAPI runs sync code in
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


# Create database engine - manages connection pool
engine = create_database_engine(settings.DATABASE_URL)

# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit
# autoflush=False: Don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def init_db(bind=None):
    """Create tables for every model registered on Base"""
    # Model modules register their tables on import
    from moviebooking.models import artist, genre, movie, user  # noqa: F401

    try:
        Base.metadata.create_all(bind=bind or engine)
    except SQLAlchemyError as e:
        logger.error(f"Failed to initialize database tables: {e}")
        raise


def get_db():
    """
    Dependency for getting database session.

    The session is closed after the request completes, even if the
    handler raised.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_errors(db, action: str):
    """
    Translate SQLAlchemy failures inside the block into StoreError.

    Rolls the session back so it stays usable, logs the underlying error and
    raises DuplicateKeyError for unique-constraint violations. The client only
    sees the generic message built from ``action``.
    """
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Constraint violation while {action}: {e.orig}")
        raise DuplicateKeyError(f"Error {action}")
    except SQLAlchemyError as e:
        db.rollback()
        # orig carries the driver message without bound parameters
        logger.error(f"Database error while {action}: {getattr(e, 'orig', None) or e}")
        raise StoreError(f"Error {action}")
    except OverflowError as e:
        db.rollback()
        logger.error(f"Value out of range while {action}: {e}")
        raise StoreError(f"Error {action}")
