"""Client schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ClientCreate(BaseModel):
    name: str
    email: Optional[str] = None
    company: Optional[str] = None
    notes: Optional[str] = None


class ClientRead(ClientCreate):
    id: int
    user_id: int
    is_archived: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
