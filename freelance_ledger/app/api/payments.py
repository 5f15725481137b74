"""Payment listing endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from freelance_ledger.app.db.session import get_db
from freelance_ledger.app.dependencies.auth import get_current_user
from freelance_ledger.app.models.user import User
from freelance_ledger.app.schemas.payment import PaymentRead
from freelance_ledger.app.services.invoices import list_payments

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("/", response_model=List[PaymentRead])
async def list_payments_endpoint(
    invoice_id: int | None = None,
    auto_settled: bool | None = None,
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return list_payments(db, current_user.id, invoice_id=invoice_id, auto_settled=auto_settled, limit=limit)
