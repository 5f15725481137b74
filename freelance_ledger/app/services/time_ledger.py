"""Time ledger: manual entries, unbilled queries, billing flags and summaries."""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List

from sqlalchemy.orm import Session

from freelance_ledger.app.core.errors import ConflictError, NotFoundError, ValidationError, require_user_id
from freelance_ledger.app.core.time import ensure_utc, minutes_between, utc_now
from freelance_ledger.app.db.session import transaction
from freelance_ledger.app.models.project import Project
from freelance_ledger.app.models.time_entry import TimeEntry
from freelance_ledger.app.models.user_settings import UserSettings
from freelance_ledger.app.services.lookups import get_owned_project
from freelance_ledger.app.services.rounding import round_minutes

logger = logging.getLogger(__name__)

DEFAULT_MANUAL_MINUTES = 60
MAX_LIST_LIMIT = 100


def entry_minutes(entry: TimeEntry) -> int:
    """Raw minutes of an entry: the stored duration, else derived from start/end."""
    if entry.duration_min is not None:
        return max(entry.duration_min, 0)
    if entry.end is not None:
        return max(minutes_between(entry.start, entry.end), 0)
    return 0


def get_owned_entry(db: Session, user_id: int, entry_id: int) -> TimeEntry:
    entry = db.query(TimeEntry).filter(TimeEntry.id == entry_id, TimeEntry.user_id == user_id).first()
    if not entry:
        raise NotFoundError("Time entry not found")
    return entry


def list_entries(db: Session, user_id: int | None, limit: int = 20) -> List[TimeEntry]:
    user_id = require_user_id(user_id)
    limit = min(max(limit, 1), MAX_LIST_LIMIT)
    return (
        db.query(TimeEntry)
        .filter(TimeEntry.user_id == user_id)
        .order_by(TimeEntry.start.desc(), TimeEntry.id.desc())
        .limit(limit)
        .all()
    )


def create_manual_entry(
    db: Session,
    user_id: int | None,
    project_id: int,
    description: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    duration_min: int | None = None,
) -> TimeEntry:
    user_id = require_user_id(user_id)
    project = get_owned_project(db, user_id, project_id)
    start = ensure_utc(start)
    end = ensure_utc(end)

    if duration_min is not None and duration_min <= 0:
        raise ValidationError("duration_min must be positive")
    if start is not None and end is not None and end <= start:
        raise ValidationError("end must be after start")

    if duration_min is None and start is not None and end is not None:
        duration_min = max(1, minutes_between(start, end))
    if start is None:
        start = utc_now()
    if duration_min is None and end is None:
        duration_min = DEFAULT_MANUAL_MINUTES
    if end is None:
        end = start + timedelta(minutes=duration_min)
    elif end <= start:
        raise ValidationError("end must be after start")

    with transaction(db):
        entry = TimeEntry(
            user_id=user_id,
            project_id=project.id,
            description=description,
            start=start,
            end=end,
            duration_min=duration_min,
        )
        db.add(entry)
    db.refresh(entry)
    logger.info("Manual entry %s logged: %s min on project %s", entry.id, entry.duration_min, project.id)
    return entry


def delete_entry(db: Session, user_id: int | None, entry_id: int) -> None:
    user_id = require_user_id(user_id)
    with transaction(db):
        entry = get_owned_entry(db, user_id, entry_id)
        if entry.billed:
            raise ConflictError("Cannot delete a billed time entry. Delete its invoice first.")
        db.delete(entry)
    logger.info("Time entry %s deleted", entry_id)


def get_unbilled_entries(
    db: Session,
    user_id: int,
    project_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
) -> List[TimeEntry]:
    """Finished, unbilled entries of a project whose start lies in [start, end)."""
    query = db.query(TimeEntry).filter(
        TimeEntry.user_id == user_id,
        TimeEntry.project_id == project_id,
        TimeEntry.billed.is_(False),
        TimeEntry.end.isnot(None),
    )
    if start is not None:
        query = query.filter(TimeEntry.start >= ensure_utc(start))
    if end is not None:
        query = query.filter(TimeEntry.start < ensure_utc(end))
    return query.order_by(TimeEntry.start.asc(), TimeEntry.id.asc()).with_for_update().all()


def mark_entries_billed(db: Session, entries: Iterable[TimeEntry], invoice_id: int) -> None:
    """Link entries to an invoice, but only those still unbilled in the database.

    A generation that committed after these entries were read has already
    claimed some of them; the whole invoice is then rejected.
    """
    ids = [entry.id for entry in entries]
    if not ids:
        return
    linked = (
        db.query(TimeEntry)
        .filter(TimeEntry.id.in_(ids), TimeEntry.billed.is_(False))
        .update({TimeEntry.billed: True, TimeEntry.invoice_id: invoice_id}, synchronize_session=False)
    )
    if linked != len(ids):
        logger.warning("Invoice %s lost %s of %s entries to another invoice", invoice_id, len(ids) - linked, len(ids))
        raise ConflictError("Some of this time was invoiced by another request. Please retry.")


def unlink_invoice_entries(db: Session, invoice_id: int) -> int:
    """Return an invoice's time to the unbilled pool; durations are untouched."""
    return (
        db.query(TimeEntry)
        .filter(TimeEntry.invoice_id == invoice_id)
        .update({TimeEntry.invoice_id: None, TimeEntry.billed: False}, synchronize_session="fetch")
    )


def _finished_entries_query(db: Session, user_id: int, start: datetime | None, end: datetime | None):
    query = db.query(TimeEntry).filter(TimeEntry.user_id == user_id, TimeEntry.end.isnot(None))
    if start is not None:
        query = query.filter(TimeEntry.start >= ensure_utc(start))
    if end is not None:
        query = query.filter(TimeEntry.start < ensure_utc(end))
    return query


def summarize_by_project(
    db: Session,
    user_id: int | None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[dict]:
    """Per-project totals with the user's rounding policy applied per entry."""
    user_id = require_user_id(user_id)
    settings = db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
    policy = settings.rounding if settings else "NONE"

    entries = (
        _finished_entries_query(db, user_id, start, end)
        .order_by(TimeEntry.start.desc(), TimeEntry.id.desc())
        .all()
    )

    by_project: dict[int, list[TimeEntry]] = {}
    for entry in entries:
        by_project.setdefault(entry.project_id, []).append(entry)

    results = []
    for project_id, project_entries in by_project.items():
        project: Project = project_entries[0].project
        total_min = sum(round_minutes(entry_minutes(e), policy) for e in project_entries)
        results.append(
            {
                "project_id": project_id,
                "project_name": project.name if project else "Untitled",
                "client_name": project.client.name if project and project.client else "No client",
                "total_min": total_min,
                "entry_count": len(project_entries),
                "recent_descriptions": [
                    (e.description or "").strip() or "No description" for e in project_entries[:3]
                ],
            }
        )
    results.sort(key=lambda row: row["total_min"], reverse=True)
    return results


def project_time_report(
    db: Session,
    user_id: int | None,
    project_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict:
    user_id = require_user_id(user_id)
    project = get_owned_project(db, user_id, project_id)
    entries = (
        _finished_entries_query(db, user_id, start, end)
        .filter(TimeEntry.project_id == project.id)
        .order_by(TimeEntry.start.desc(), TimeEntry.id.desc())
        .all()
    )
    total_min = sum(entry_minutes(e) for e in entries)
    avg_min = round(total_min / len(entries)) if entries else 0
    return {
        "project_id": project.id,
        "project_name": project.name,
        "client_name": project.client.name if project.client else "No client",
        "total_min": total_min,
        "entry_count": len(entries),
        "avg_min": avg_min,
        "entries": entries,
    }
