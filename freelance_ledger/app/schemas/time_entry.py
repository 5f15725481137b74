"""Time entry schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class TimerStart(BaseModel):
    project_id: int
    description: Optional[str] = None


class TimerStop(BaseModel):
    entry_id: Optional[int] = None


class ManualEntryCreate(BaseModel):
    project_id: int
    description: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    duration_min: Optional[int] = None


class TimeEntryRead(BaseModel):
    id: int
    user_id: int
    project_id: int
    description: Optional[str] = None
    start: datetime
    end: Optional[datetime] = None
    duration_min: Optional[int] = None
    billed: bool
    invoice_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActiveEntryRead(BaseModel):
    active: Optional[TimeEntryRead] = None


class ProjectTimeSummary(BaseModel):
    project_id: int
    project_name: str
    client_name: str
    total_min: int
    entry_count: int
    recent_descriptions: List[str]


class ProjectTimeReport(BaseModel):
    project_id: int
    project_name: str
    client_name: str
    total_min: int
    entry_count: int
    avg_min: int
    entries: List[TimeEntryRead]
