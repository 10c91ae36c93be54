import logging
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from studyplan.config import settings
from studyplan.exceptions import StoreError

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()

def init_db():
    """Create all tables"""
    # Models must be imported so they register on Base.metadata
    import studyplan.models  # noqa: F401
    Base.metadata.create_all(bind=engine)

def commit_or_rollback(db: Session):
    """Commit the session; on failure roll everything back and raise StoreError"""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Transaction rolled back: %s", e)
        raise StoreError("Could not save changes") from e

@contextmanager
def store_errors(db: Session):
    """
    Run a block of reads and writes on db as one unit.

    Any error inside the block rolls back whatever the block staged, so a
    later commit on the same session cannot store half of it. Database
    errors are raised as StoreError.
    """
    try:
        yield db
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Store access failed, rolled back: %s", e)
        raise StoreError("Could not load or save data, is the database initialized?") from e
    except Exception:
        db.rollback()
        raise
