"""User settings schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

RoundingPolicy = Literal["NONE", "NEAREST_5", "NEAREST_15"]
PaymentTerms = Literal["NET_7", "NET_15", "NET_30", "DUE_ON_RECEIPT"]
BillingType = Literal["HOURLY", "FIXED"]


class UserSettingsBase(BaseModel):
    currency: str = "USD"
    tax_rate: Decimal = Decimal("0.00")
    rounding: RoundingPolicy = "NONE"
    terms: PaymentTerms = "NET_15"
    invoice_prefix: str = ""
    next_number: int = 1
    default_billing: BillingType = "HOURLY"
    default_rate: Optional[Decimal] = None


class UserSettingsUpdate(BaseModel):
    """Whitelisted partial update; unknown keys are ignored."""

    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    rounding: Optional[RoundingPolicy] = None
    terms: Optional[PaymentTerms] = None
    invoice_prefix: Optional[str] = Field(default=None, max_length=20)
    next_number: Optional[int] = Field(default=None, ge=1)
    default_billing: Optional[BillingType] = None
    default_rate: Optional[Decimal] = Field(default=None, ge=0)


class UserSettingsRead(UserSettingsBase):
    id: int
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
