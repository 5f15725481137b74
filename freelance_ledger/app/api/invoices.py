"""Invoice routes: generation from tracked time, payments and status changes."""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from freelance_ledger.app.core.time import utc_now
from freelance_ledger.app.db.session import get_db
from freelance_ledger.app.dependencies.auth import get_current_user
from freelance_ledger.app.models.invoice import Invoice
from freelance_ledger.app.models.user import User
from freelance_ledger.app.schemas.invoice import InvoiceGenerate, InvoiceRead, InvoiceStatusUpdate
from freelance_ledger.app.schemas.payment import PaymentCreate, PaymentRead
from freelance_ledger.app.services.billing import generate_invoice_for_project
from freelance_ledger.app.services.invoices import (
    balance_due,
    change_invoice_status,
    delete_invoice,
    effective_status,
    is_overdue,
    list_invoices,
    record_payment,
)
from freelance_ledger.app.services.lookups import get_owned_invoice

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _serialize_invoice(invoice: Invoice, now: datetime | None = None) -> InvoiceRead:
    check_date = now or utc_now()
    data = InvoiceRead.model_validate(invoice)
    data.display_status = effective_status(invoice, check_date)
    data.is_overdue = is_overdue(invoice, check_date)
    data.balance_due = balance_due(invoice)
    return data


@router.post("/generate-project", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
async def generate_project_invoice(
    payload: InvoiceGenerate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    invoice = generate_invoice_for_project(db, current_user.id, payload.project_id, start=payload.start, end=payload.end)
    return _serialize_invoice(invoice)


@router.get("/", response_model=List[InvoiceRead])
async def list_invoices_endpoint(
    status: str | None = None,
    project_id: int | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    now = utc_now()
    invoices = list_invoices(db, current_user.id, status=status, project_id=project_id, now=now)
    return [_serialize_invoice(invoice, now) for invoice in invoices]


@router.get("/{invoice_id}", response_model=InvoiceRead)
async def get_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _serialize_invoice(get_owned_invoice(db, current_user.id, invoice_id))


@router.delete("/{invoice_id}")
async def delete_invoice_endpoint(
    invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    delete_invoice(db, current_user.id, invoice_id)
    return {"status": "deleted", "id": invoice_id}


@router.post("/{invoice_id}/payments", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
async def add_payment(
    invoice_id: int,
    payment_in: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return record_payment(
        db,
        current_user.id,
        invoice_id,
        payment_in.amount,
        method=payment_in.method,
        note=payment_in.note,
        received_at=payment_in.received_at,
    )


@router.post("/{invoice_id}/status", response_model=InvoiceRead)
async def update_invoice_status(
    invoice_id: int,
    payload: InvoiceStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice = change_invoice_status(db, current_user.id, invoice_id, payload.status)
    return _serialize_invoice(invoice)
