"""Invoice payments, status transitions and deletion.

Stored statuses move DRAFT -> SENT -> PARTIAL/PAID, and any invoice without
payments can be voided. VOID is terminal. OVERDUE is never stored: it is
reported for SENT or PARTIAL invoices whose due date has passed, through
is_overdue() for single rows and overdue_clause() for queries.

amount_paid is always re-summed from the payments table after a write, so
concurrent payments cannot leave a stale running total behind.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from freelance_ledger.app.core.errors import ConflictError, ValidationError, require_user_id
from freelance_ledger.app.core.time import ensure_utc, utc_now
from freelance_ledger.app.db.session import transaction
from freelance_ledger.app.models.invoice import DRAFT, OVERDUE, PAID, PARTIAL, SENT, VOID, Invoice
from freelance_ledger.app.models.payment import AUTO_SETTLE_METHOD, Payment
from freelance_ledger.app.services.billing import to_money
from freelance_ledger.app.services.lookups import get_owned_invoice
from freelance_ledger.app.services.time_ledger import MAX_LIST_LIMIT, unlink_invoice_entries

logger = logging.getLogger(__name__)

OVERDUE_CANDIDATES = (SENT, PARTIAL)
CANCELLATION_VOIDABLE = (DRAFT, SENT)


def payments_total(db: Session, invoice_id: int) -> Decimal:
    paid = db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(Payment.invoice_id == invoice_id).scalar()
    return to_money(paid)


def payment_count(db: Session, invoice_id: int) -> int:
    return db.query(func.count(Payment.id)).filter(Payment.invoice_id == invoice_id).scalar()


def determine_invoice_status(invoice: Invoice) -> str:
    if invoice.status == VOID:
        return VOID
    paid = Decimal(str(invoice.amount_paid or 0))
    if paid >= Decimal(str(invoice.total)):
        return PAID
    if paid > 0:
        return PARTIAL
    return invoice.status


def recalculate_invoice_totals(db: Session, invoice: Invoice) -> None:
    db.flush()
    invoice.amount_paid = payments_total(db, invoice.id)
    invoice.status = determine_invoice_status(invoice)


def balance_due(invoice: Invoice) -> Decimal:
    remaining = Decimal(str(invoice.total)) - Decimal(str(invoice.amount_paid or 0))
    return max(Decimal("0.00"), to_money(remaining))


def is_overdue(invoice: Invoice, now: datetime | None = None) -> bool:
    check_date = now or utc_now()
    if invoice.status not in OVERDUE_CANDIDATES or invoice.due_date is None:
        return False
    return ensure_utc(invoice.due_date) < ensure_utc(check_date)


def effective_status(invoice: Invoice, now: datetime | None = None) -> str:
    return OVERDUE if is_overdue(invoice, now) else invoice.status


def overdue_clause(now: datetime | None = None):
    return and_(Invoice.status.in_(OVERDUE_CANDIDATES), Invoice.due_date < (now or utc_now()))


def list_invoices(
    db: Session,
    user_id: int | None,
    status: str | None = None,
    project_id: int | None = None,
    now: datetime | None = None,
) -> List[Invoice]:
    user_id = require_user_id(user_id)
    query = db.query(Invoice).filter(Invoice.user_id == user_id)
    if status == OVERDUE:
        query = query.filter(overdue_clause(now))
    elif status:
        query = query.filter(Invoice.status == status)
    if project_id is not None:
        query = query.filter(Invoice.project_id == project_id)
    return query.order_by(Invoice.issue_date.desc(), Invoice.number.desc()).all()


def list_payments(
    db: Session,
    user_id: int | None,
    invoice_id: int | None = None,
    auto_settled: bool | None = None,
    limit: int = 50,
) -> List[Payment]:
    """Payments received by the user, newest first.

    `auto_settled` separates the balancing payments written by mark_paid from
    money actually recorded against an invoice.
    """
    user_id = require_user_id(user_id)
    query = db.query(Payment).filter(Payment.user_id == user_id)
    if invoice_id is not None:
        query = query.filter(Payment.invoice_id == get_owned_invoice(db, user_id, invoice_id).id)
    if auto_settled is True:
        query = query.filter(Payment.method == AUTO_SETTLE_METHOD)
    elif auto_settled is False:
        query = query.filter(or_(Payment.method.is_(None), Payment.method != AUTO_SETTLE_METHOD))
    limit = min(max(limit, 1), MAX_LIST_LIMIT)
    return query.order_by(Payment.received_at.desc(), Payment.id.desc()).limit(limit).all()


def record_payment(
    db: Session,
    user_id: int | None,
    invoice_id: int,
    amount: Decimal | float | str,
    method: str | None = None,
    note: str | None = None,
    received_at: datetime | None = None,
) -> Payment:
    user_id = require_user_id(user_id)
    payment_amount = to_money(amount)
    if payment_amount <= 0:
        raise ValidationError("amount must be > 0")

    with transaction(db):
        invoice = get_owned_invoice(db, user_id, invoice_id, for_update=True)
        if invoice.status == VOID:
            raise ConflictError("Cannot apply a payment to a void invoice.")
        payment = Payment(
            user_id=user_id,
            invoice_id=invoice.id,
            amount=payment_amount,
            method=method,
            note=note,
            received_at=ensure_utc(received_at) or utc_now(),
        )
        db.add(payment)
        recalculate_invoice_totals(db, invoice)
    db.refresh(payment)
    db.refresh(invoice)
    logger.info(
        "Payment %s of %s recorded on invoice %s; paid %s of %s, status %s",
        payment.id,
        payment.amount,
        invoice.id,
        invoice.amount_paid,
        invoice.total,
        invoice.status,
    )
    return payment


def mark_sent(db: Session, user_id: int | None, invoice_id: int) -> Invoice:
    user_id = require_user_id(user_id)
    with transaction(db):
        invoice = get_owned_invoice(db, user_id, invoice_id, for_update=True)
        if invoice.status == VOID:
            raise ConflictError("A void invoice cannot be sent.")
        if payment_count(db, invoice.id) > 0:
            raise ConflictError("This invoice already has payments; its status follows the amount paid.")
        invoice.status = SENT
    db.refresh(invoice)
    logger.info("Invoice %s marked SENT", invoice.id)
    return invoice


def mark_void(db: Session, user_id: int | None, invoice_id: int) -> Invoice:
    user_id = require_user_id(user_id)
    with transaction(db):
        invoice = get_owned_invoice(db, user_id, invoice_id, for_update=True)
        if payment_count(db, invoice.id) > 0:
            logger.warning("Refused to void invoice %s: it has payments", invoice.id)
            raise ConflictError("Cannot VOID an invoice that has payments. Refund first, or mark PAID.")
        invoice.status = VOID
    db.refresh(invoice)
    logger.info("Invoice %s marked VOID", invoice.id)
    return invoice


def mark_paid(db: Session, user_id: int | None, invoice_id: int) -> Invoice:
    """Settle the remaining balance with a synthetic payment, then mark PAID."""
    user_id = require_user_id(user_id)
    with transaction(db):
        invoice = get_owned_invoice(db, user_id, invoice_id, for_update=True)
        if invoice.status == VOID:
            raise ConflictError("A void invoice cannot be marked paid.")
        remaining = to_money(Decimal(str(invoice.total)) - payments_total(db, invoice.id))
        if remaining > 0:
            db.add(
                Payment(
                    user_id=user_id,
                    invoice_id=invoice.id,
                    amount=remaining,
                    method=AUTO_SETTLE_METHOD,
                )
            )
        recalculate_invoice_totals(db, invoice)
        invoice.status = PAID
    db.refresh(invoice)
    logger.info("Invoice %s marked PAID (auto-settled %s)", invoice.id, max(remaining, Decimal("0.00")))
    return invoice


STATUS_ACTIONS = {
    SENT: mark_sent,
    VOID: mark_void,
    PAID: mark_paid,
}


def change_invoice_status(db: Session, user_id: int | None, invoice_id: int, status: str) -> Invoice:
    action = STATUS_ACTIONS.get(status)
    if action is None:
        raise ValidationError("Invalid status")
    return action(db, user_id, invoice_id)


def purge_invoice(db: Session, invoice: Invoice) -> None:
    """Unlink the invoice's time, then delete its items and the invoice itself.

    Runs inside the caller's transaction; the caller has checked payments.
    """
    unlinked = unlink_invoice_entries(db, invoice.id)
    # Items are removed by the delete-orphan cascade in the same flush.
    db.delete(invoice)
    logger.info("Invoice %s deleted; %s time entries returned to unbilled", invoice.id, unlinked)


def delete_invoice(db: Session, user_id: int | None, invoice_id: int) -> None:
    user_id = require_user_id(user_id)
    with transaction(db):
        invoice = get_owned_invoice(db, user_id, invoice_id, for_update=True)
        if payment_count(db, invoice.id) > 0:
            logger.warning("Refused to delete invoice %s: it has payments", invoice.id)
            raise ConflictError("Cannot delete an invoice that has payments. Refund + VOID it instead.")
        purge_invoice(db, invoice)


def void_open_invoices_for_project(db: Session, project_id: int) -> List[int]:
    """Void a project's DRAFT/SENT invoices that carry no payments.

    Cascade step for a freelancer-side cancellation; runs inside the caller's
    transaction. PARTIAL and PAID invoices are left for collection.
    """
    invoices = (
        db.query(Invoice)
        .filter(Invoice.project_id == project_id, Invoice.status.in_(CANCELLATION_VOIDABLE))
        .with_for_update()
        .all()
    )
    voided = []
    for invoice in invoices:
        if payment_count(db, invoice.id) > 0:
            continue
        invoice.status = VOID
        voided.append(invoice.id)
    return voided
