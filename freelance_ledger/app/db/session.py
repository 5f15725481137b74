"""Engine, session factory and transaction helper."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from freelance_ledger.app.core.errors import ConflictError
from freelance_ledger.app.core.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit everything done in the block as one unit, or none of it.

    Constraint violations (a second running timer, a duplicate invoice number)
    mean a concurrent request won the race and surface as ConflictError.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Transaction rolled back on integrity error: %s", exc.orig)
        raise ConflictError("The record was changed by another request. Please retry.") from exc
    except Exception:
        db.rollback()
        raise
