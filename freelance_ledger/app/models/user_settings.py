"""Per-user billing settings: currency, tax, rounding, terms and numbering."""

from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from freelance_ledger.app.core.time import utc_now
from freelance_ledger.app.db.base_class import Base

ROUNDING_POLICIES = ("NONE", "NEAREST_5", "NEAREST_15")
PAYMENT_TERMS = ("NET_7", "NET_15", "NET_30", "DUE_ON_RECEIPT")
DEFAULT_TERMS = "NET_15"


class UserSettings(Base):
    __tablename__ = "user_settings"
    __table_args__ = (UniqueConstraint("user_id", name="uq_user_settings_user"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    currency = Column(String(3), nullable=False, default="USD")
    tax_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    rounding = Column(String(20), nullable=False, default="NONE")
    terms = Column(String(20), nullable=False, default=DEFAULT_TERMS)
    invoice_prefix = Column(String(20), nullable=False, default="")
    next_number = Column(Integer, nullable=False, default=1)
    default_billing = Column(String(10), nullable=False, default="HOURLY")
    default_rate = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="settings")
