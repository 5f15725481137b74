"""Start/stop timer operations; one running entry per user."""

import logging

from sqlalchemy.orm import Session

from freelance_ledger.app.core.errors import ConflictError, require_user_id
from freelance_ledger.app.core.time import minutes_between, utc_now
from freelance_ledger.app.db.session import transaction
from freelance_ledger.app.models.time_entry import TimeEntry
from freelance_ledger.app.services.lookups import get_owned_project

logger = logging.getLogger(__name__)


def get_active_entry(db: Session, user_id: int | None) -> TimeEntry | None:
    user_id = require_user_id(user_id)
    return (
        db.query(TimeEntry)
        .filter(TimeEntry.user_id == user_id, TimeEntry.end.is_(None))
        .first()
    )


def start_timer(db: Session, user_id: int | None, project_id: int, description: str | None = None) -> TimeEntry:
    user_id = require_user_id(user_id)
    project = get_owned_project(db, user_id, project_id)
    if project.is_cancelled:
        raise ConflictError("Cannot track time on a cancelled project")

    with transaction(db):
        if get_active_entry(db, user_id) is not None:
            logger.warning("User %s tried to start a second timer", user_id)
            raise ConflictError("Timer already running")
        entry = TimeEntry(
            user_id=user_id,
            project_id=project.id,
            description=description,
            start=utc_now(),
        )
        db.add(entry)
        # A concurrent start lands on the running-timer unique index here.
        db.flush()
    db.refresh(entry)
    logger.info("Timer %s started for user %s on project %s", entry.id, user_id, project.id)
    return entry


def finish_entry(entry: TimeEntry) -> TimeEntry:
    """Close a running entry at now; a stopped timer bills at least one minute."""
    entry.end = utc_now()
    entry.duration_min = max(1, minutes_between(entry.start, entry.end))
    return entry


def stop_timer(db: Session, user_id: int | None, entry_id: int | None = None) -> TimeEntry:
    user_id = require_user_id(user_id)
    with transaction(db):
        query = db.query(TimeEntry).filter(TimeEntry.user_id == user_id, TimeEntry.end.is_(None))
        if entry_id is not None:
            query = query.filter(TimeEntry.id == entry_id)
        running = query.with_for_update().first()
        if running is None:
            raise ConflictError("No running timer")
        finish_entry(running)
    db.refresh(running)
    logger.info("Timer %s stopped after %s min", running.id, running.duration_min)
    return running
