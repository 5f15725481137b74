"""Payment schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PaymentBase(BaseModel):
    amount: Decimal
    method: Optional[str] = None
    note: Optional[str] = None
    received_at: Optional[datetime] = None


class PaymentCreate(PaymentBase):
    pass


class PaymentRead(PaymentBase):
    id: int
    user_id: int
    invoice_id: int
    created_at: datetime
    is_auto_settlement: bool = False

    model_config = ConfigDict(from_attributes=True)
