"""Payment model for invoice receipts. Payments are append-only."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from freelance_ledger.app.core.time import utc_now
from freelance_ledger.app.db.base_class import Base

AUTO_SETTLE_METHOD = "Manual Auto-Settle"


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String(50), nullable=True)
    note = Column(Text, nullable=True)
    received_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    invoice = relationship("Invoice", back_populates="payments")

    @property
    def is_auto_settlement(self) -> bool:
        return self.method == AUTO_SETTLE_METHOD
