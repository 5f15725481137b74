"""Invoice item schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class InvoiceItemRead(BaseModel):
    id: int
    invoice_id: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)
