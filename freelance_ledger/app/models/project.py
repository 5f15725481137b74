"""Project model and its lifecycle states."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from freelance_ledger.app.core.time import utc_now
from freelance_ledger.app.db.base_class import Base

HOURLY = "HOURLY"
FIXED = "FIXED"
BILLING_TYPES = (HOURLY, FIXED)

OPEN_STATUSES = ("ACTIVE", "ON_HOLD", "COMPLETED", "HANDED_OVER")
CANCELLED_STATUSES = ("CANCELLED", "CANCELLED_BY_CLIENT", "CANCELLED_BY_FREELANCER")
PROJECT_STATUSES = OPEN_STATUSES + CANCELLED_STATUSES


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    billing_type = Column(String(10), nullable=False, default=HOURLY)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    fixed_fee = Column(Numeric(10, 2), nullable=True)
    status = Column(String(30), nullable=False, default="ACTIVE")
    is_archived = Column(Boolean, nullable=False, default=False)
    handed_over_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    owner = relationship("User", back_populates="projects")
    client = relationship("Client", back_populates="projects")
    time_entries = relationship("TimeEntry", back_populates="project", cascade="all, delete-orphan")
    invoices = relationship("Invoice", back_populates="project")

    @property
    def is_cancelled(self) -> bool:
        return self.status in CANCELLED_STATUSES
