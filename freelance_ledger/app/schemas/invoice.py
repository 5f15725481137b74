"""Invoice schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from freelance_ledger.app.schemas.invoice_item import InvoiceItemRead
from freelance_ledger.app.schemas.payment import PaymentRead


class InvoiceGenerate(BaseModel):
    project_id: int
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class InvoiceStatusUpdate(BaseModel):
    status: str


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    client_id: int
    project_id: Optional[int]

    number: int
    display_number: str
    issue_date: datetime
    due_date: datetime
    currency: str

    status: str
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    amount_paid: Decimal

    items: List[InvoiceItemRead] = []
    payments: List[PaymentRead] = []

    # Filled in at serialization time; OVERDUE is never stored.
    display_status: Optional[str] = None
    is_overdue: bool = False
    balance_due: Optional[Decimal] = None

    created_at: datetime
    updated_at: datetime
