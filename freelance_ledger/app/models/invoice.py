"""Invoice model for billing."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from freelance_ledger.app.core.time import utc_now
from freelance_ledger.app.db.base_class import Base

DRAFT = "DRAFT"
SENT = "SENT"
PARTIAL = "PARTIAL"
PAID = "PAID"
VOID = "VOID"
# Reported for unpaid invoices past their due date; never stored.
OVERDUE = "OVERDUE"

STORED_STATUSES = (DRAFT, SENT, PARTIAL, PAID, VOID)
REPORTED_STATUSES = STORED_STATUSES + (OVERDUE,)


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (UniqueConstraint("user_id", "number", name="uq_invoices_user_number"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)

    number = Column(Integer, nullable=False)
    display_number = Column(String(50), nullable=False)
    issue_date = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    due_date = Column(DateTime(timezone=True), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    status = Column(String(20), default=DRAFT, nullable=False)
    subtotal = Column(Numeric(10, 2), default=0.00, nullable=False)
    tax = Column(Numeric(10, 2), default=0.00, nullable=False)
    total = Column(Numeric(10, 2), default=0.00, nullable=False)
    amount_paid = Column(Numeric(10, 2), default=0.00, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    owner = relationship("User", back_populates="invoices")
    client = relationship("Client", back_populates="invoices")
    project = relationship("Project", back_populates="invoices")
    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan", order_by="InvoiceItem.id")
    payments = relationship("Payment", back_populates="invoice", order_by="Payment.id")
    time_entries = relationship("TimeEntry", back_populates="invoice")
