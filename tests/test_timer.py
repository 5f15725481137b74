from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from freelance_ledger.app.core.errors import ConflictError, NotFoundError, UnauthorizedError
from freelance_ledger.app.core.time import utc_now
from freelance_ledger.app.db.base import Base
from freelance_ledger.app.db.session import SessionLocal, engine, transaction
from freelance_ledger.app.models.client import Client
from freelance_ledger.app.models.project import Project
from freelance_ledger.app.models.time_entry import TimeEntry
from freelance_ledger.app.models.user import User
from freelance_ledger.app.services.timer import get_active_entry, start_timer, stop_timer


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def _create_user_project(db, email="timer@example.com"):
    user = User(email=email, hashed_password="x", is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    client = Client(user_id=user.id, name="Acme")
    db.add(client)
    db.commit()
    db.refresh(client)
    project = Project(user_id=user.id, client_id=client.id, name="Website", hourly_rate=Decimal("85.00"))
    db.add(project)
    db.commit()
    db.refresh(project)
    return user, project


def test_start_creates_running_entry():
    with SessionLocal() as db:
        user, project = _create_user_project(db)
        entry = start_timer(db, user.id, project.id, "Wireframes")
        assert entry.end is None
        assert entry.duration_min is None
        assert entry.billed is False
        assert get_active_entry(db, user.id).id == entry.id


def test_second_start_conflicts_and_keeps_single_running_entry():
    with SessionLocal() as db:
        user, project = _create_user_project(db)
        start_timer(db, user.id, project.id)
        with pytest.raises(ConflictError) as exc:
            start_timer(db, user.id, project.id)
        assert exc.value.message == "Timer already running"
        running = db.query(TimeEntry).filter(TimeEntry.user_id == user.id, TimeEntry.end.is_(None)).count()
        assert running == 1


def test_stop_bills_at_least_one_minute():
    with SessionLocal() as db:
        user, project = _create_user_project(db)
        entry = start_timer(db, user.id, project.id)
        stopped = stop_timer(db, user.id)
        assert stopped.id == entry.id
        assert stopped.end is not None
        assert stopped.duration_min == 1
        assert get_active_entry(db, user.id) is None


def test_stop_by_explicit_entry_id():
    with SessionLocal() as db:
        user, project = _create_user_project(db)
        entry = start_timer(db, user.id, project.id)
        assert stop_timer(db, user.id, entry.id).id == entry.id


def test_stop_without_running_entry_conflicts_and_changes_nothing():
    with SessionLocal() as db:
        user, project = _create_user_project(db)
        entry = start_timer(db, user.id, project.id)
        stop_timer(db, user.id)
        before = db.query(TimeEntry).count()
        with pytest.raises(ConflictError) as exc:
            stop_timer(db, user.id)
        assert exc.value.message == "No running timer"
        db.refresh(entry)
        assert db.query(TimeEntry).count() == before
        assert entry.duration_min == 1


def test_start_on_other_users_project_is_not_found():
    with SessionLocal() as db:
        _, project = _create_user_project(db, "owner@example.com")
        other, _ = _create_user_project(db, "other@example.com")
        with pytest.raises(NotFoundError):
            start_timer(db, other.id, project.id)


def test_missing_user_is_unauthorized():
    with SessionLocal() as db:
        _, project = _create_user_project(db)
        with pytest.raises(UnauthorizedError):
            start_timer(db, None, project.id)


def test_cancelled_project_rejects_timer():
    with SessionLocal() as db:
        user, project = _create_user_project(db)
        project.status = "CANCELLED_BY_CLIENT"
        db.commit()
        with pytest.raises(ConflictError):
            start_timer(db, user.id, project.id)


def test_running_index_rejects_second_open_entry():
    with SessionLocal() as db:
        user, project = _create_user_project(db)
        db.add(TimeEntry(user_id=user.id, project_id=project.id, start=utc_now()))
        db.commit()
        db.add(TimeEntry(user_id=user.id, project_id=project.id, start=utc_now()))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


def test_transaction_reports_index_violation_as_conflict():
    with SessionLocal() as db:
        user, project = _create_user_project(db)
        db.add(TimeEntry(user_id=user.id, project_id=project.id, start=utc_now()))
        db.commit()
        with pytest.raises(ConflictError):
            with transaction(db):
                db.add(TimeEntry(user_id=user.id, project_id=project.id, start=utc_now()))
        assert db.query(TimeEntry).count() == 1


def test_finished_entries_do_not_hit_running_index():
    with SessionLocal() as db:
        user, project = _create_user_project(db)
        for _ in range(3):
            start_timer(db, user.id, project.id)
            stop_timer(db, user.id)
        assert db.query(TimeEntry).filter(TimeEntry.user_id == user.id).count() == 3
