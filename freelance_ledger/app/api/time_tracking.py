"""Timer and time entry endpoints."""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from freelance_ledger.app.db.session import get_db
from freelance_ledger.app.dependencies.auth import get_current_user
from freelance_ledger.app.models.user import User
from freelance_ledger.app.schemas.time_entry import (
    ActiveEntryRead,
    ManualEntryCreate,
    ProjectTimeReport,
    ProjectTimeSummary,
    TimeEntryRead,
    TimerStart,
    TimerStop,
)
from freelance_ledger.app.services.time_ledger import (
    create_manual_entry,
    delete_entry,
    list_entries,
    project_time_report,
    summarize_by_project,
)
from freelance_ledger.app.services.timer import get_active_entry, start_timer, stop_timer

router = APIRouter(prefix="/time", tags=["time"])


@router.post("/start", response_model=TimeEntryRead, status_code=status.HTTP_201_CREATED)
async def start_timer_endpoint(
    payload: TimerStart, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return start_timer(db, current_user.id, payload.project_id, payload.description)


@router.post("/stop", response_model=TimeEntryRead)
async def stop_timer_endpoint(
    payload: TimerStop | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry_id = payload.entry_id if payload else None
    return stop_timer(db, current_user.id, entry_id)


@router.get("/active", response_model=ActiveEntryRead)
async def get_active_timer(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"active": get_active_entry(db, current_user.id)}


@router.get("/", response_model=List[TimeEntryRead])
async def list_time_entries(
    limit: int = 20, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return list_entries(db, current_user.id, limit=limit)


@router.post("/manual", response_model=TimeEntryRead, status_code=status.HTTP_201_CREATED)
async def create_manual_time_entry(
    payload: ManualEntryCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return create_manual_entry(
        db,
        current_user.id,
        payload.project_id,
        description=payload.description,
        start=payload.start,
        end=payload.end,
        duration_min=payload.duration_min,
    )


@router.get("/summary", response_model=List[ProjectTimeSummary])
async def get_time_summary(
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return summarize_by_project(db, current_user.id, start=from_date, end=to_date)


@router.get("/by-project/{project_id}", response_model=ProjectTimeReport)
async def get_project_time(
    project_id: int,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return project_time_report(db, current_user.id, project_id, start=from_date, end=to_date)


@router.delete("/{entry_id}")
async def delete_time_entry(entry_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    delete_entry(db, current_user.id, entry_id)
    return {"status": "deleted", "id": entry_id}
