import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from backend.app.core.exceptions import BillingError
from backend.app.core.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transactional(db: Session, operation: str):
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield db
        db.commit()
    except BillingError as exc:
        db.rollback()
        logger.warning("%s rejected: %s", operation, exc.message)
        raise
    except Exception:
        db.rollback()
        logger.exception("%s failed; changes rolled back", operation)
        raise
