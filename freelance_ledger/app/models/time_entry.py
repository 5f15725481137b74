"""Time entry model for tracked work sessions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import relationship

from freelance_ledger.app.core.time import utc_now
from freelance_ledger.app.db.base_class import Base


class TimeEntry(Base):
    __tablename__ = "time_entries"
    __table_args__ = (
        # One running timer (no end) per user.
        Index(
            "uq_time_entries_running_per_user",
            "user_id",
            unique=True,
            sqlite_where=text("end_time IS NULL"),
            postgresql_where=text("end_time IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    start = Column("start_time", DateTime(timezone=True), nullable=False)
    end = Column("end_time", DateTime(timezone=True), nullable=True)
    duration_min = Column(Integer, nullable=True)
    billed = Column(Boolean, nullable=False, default=False)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    owner = relationship("User", back_populates="time_entries")
    project = relationship("Project", back_populates="time_entries")
    invoice = relationship("Invoice", back_populates="time_entries")

    @property
    def is_running(self) -> bool:
        return self.end is None
