from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from freelance_ledger.app.db.base import Base
from freelance_ledger.app.db.session import SessionLocal, engine
from freelance_ledger.app.models.client import Client
from freelance_ledger.app.models.invoice import Invoice
from freelance_ledger.app.models.invoice_item import InvoiceItem
from freelance_ledger.app.models.payment import Payment
from freelance_ledger.app.models.project import Project
from freelance_ledger.app.models.time_entry import TimeEntry
from freelance_ledger.app.models.user import User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def test_user_model_has_columns():
    column_names = [column.name for column in User.__table__.columns]
    expected = {"id", "email", "full_name", "hashed_password", "is_active", "created_at", "updated_at"}
    assert expected.issubset(set(column_names))


def test_time_entry_columns_keep_sql_safe_names():
    column_names = {column.name for column in TimeEntry.__table__.columns}
    assert {"start_time", "end_time", "duration_min", "billed", "invoice_id"}.issubset(column_names)
    index_names = {index.name for index in TimeEntry.__table__.indexes}
    assert "uq_time_entries_running_per_user" in index_names


def _create_invoice(db, number=1):
    user = db.query(User).first()
    if user is None:
        user = User(email="owner@example.com", hashed_password="x", is_active=True)
        db.add(user)
        db.commit()
        db.refresh(user)
    client = Client(user_id=user.id, name="Acme")
    db.add(client)
    db.commit()
    db.refresh(client)
    project = Project(user_id=user.id, client_id=client.id, name="Website")
    db.add(project)
    db.commit()
    db.refresh(project)
    invoice = Invoice(
        user_id=user.id,
        client_id=client.id,
        project_id=project.id,
        number=number,
        display_number=str(number),
        due_date=datetime(2030, 1, 15, tzinfo=timezone.utc),
        subtotal=Decimal("80.00"),
        total=Decimal("80.00"),
    )
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return user, invoice


def test_invoice_defaults_and_relations():
    with SessionLocal() as db:
        user, invoice = _create_invoice(db)
        db.add(InvoiceItem(invoice_id=invoice.id, description="Work", quantity=Decimal("1"), unit_price=Decimal("80.00"), total=Decimal("80.00")))
        payment = Payment(user_id=user.id, invoice_id=invoice.id, amount=Decimal("80.00"), method="cash")
        db.add(payment)
        db.commit()
        db.refresh(invoice)
        db.refresh(payment)

        assert invoice.status == "DRAFT"
        assert invoice.currency == "USD"
        assert invoice.amount_paid == Decimal("0.00")
        assert invoice.issue_date is not None
        assert invoice.items[0].description == "Work"
        assert payment.invoice.id == invoice.id
        assert payment.received_at is not None
        assert invoice.payments[0].id == payment.id


def test_invoice_number_unique_per_user():
    with SessionLocal() as db:
        _create_invoice(db, number=5)
        with pytest.raises(IntegrityError):
            _create_invoice(db, number=5)
        db.rollback()
