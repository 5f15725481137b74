"""Project schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class ProjectCreate(BaseModel):
    client_id: int
    name: str
    billing_type: Optional[Literal["HOURLY", "FIXED"]] = None
    hourly_rate: Optional[Decimal] = None
    fixed_fee: Optional[Decimal] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    billing_type: Optional[Literal["HOURLY", "FIXED"]] = None
    hourly_rate: Optional[Decimal] = None
    fixed_fee: Optional[Decimal] = None


class ProjectStatusUpdate(BaseModel):
    status: str


class ProjectCancel(BaseModel):
    cancelled_by: str


class ProjectRead(BaseModel):
    id: int
    user_id: int
    client_id: int
    name: str
    billing_type: str
    hourly_rate: Optional[Decimal] = None
    fixed_fee: Optional[Decimal] = None
    status: str
    is_archived: bool
    handed_over_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProjectCancelResult(BaseModel):
    project: ProjectRead
    cancelled_by: str
    voided_invoice_ids: List[int]
    stopped_entry_ids: List[int]
