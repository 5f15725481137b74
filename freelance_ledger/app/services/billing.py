"""Invoice generation from unbilled time or a fixed fee."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List

from sqlalchemy import update
from sqlalchemy.orm import Session

from freelance_ledger.app.core.errors import EmptyInvoiceError, require_user_id
from freelance_ledger.app.core.time import utc_now
from freelance_ledger.app.db.session import transaction
from freelance_ledger.app.models.invoice import DRAFT, Invoice
from freelance_ledger.app.models.invoice_item import InvoiceItem
from freelance_ledger.app.models.project import FIXED, HOURLY, Project
from freelance_ledger.app.models.time_entry import TimeEntry
from freelance_ledger.app.models.user_settings import DEFAULT_TERMS, UserSettings
from freelance_ledger.app.services.lookups import get_owned_project
from freelance_ledger.app.services.time_ledger import entry_minutes, get_unbilled_entries, mark_entries_billed
from freelance_ledger.app.services.user_settings import find_user_settings, highest_invoice_number

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
TERM_DAYS = {
    "NET_7": 7,
    "NET_15": 15,
    "NET_30": 30,
    "DUE_ON_RECEIPT": 0,
}


@dataclass
class LineItem:
    description: str
    quantity: Decimal
    unit_price: Decimal
    total: Decimal


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def minutes_to_hours(minutes: int) -> Decimal:
    return (Decimal(minutes) / Decimal("60")).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_due_date(issue_date: datetime, terms: str | None) -> datetime:
    """Unknown or missing terms fall back to due on receipt."""
    return issue_date + timedelta(days=TERM_DAYS.get(terms or "", 0))


def compute_tax(subtotal: Decimal, tax_rate: Decimal | float | None) -> Decimal:
    rate = Decimal(str(tax_rate or 0))
    return to_money(subtotal * rate / Decimal("100"))


def build_line_items(project: Project, entries: List[TimeEntry]) -> List[LineItem]:
    items: List[LineItem] = []
    if project.billing_type == HOURLY:
        minutes = sum(entry_minutes(entry) for entry in entries)
        hours = minutes_to_hours(minutes)
        rate = Decimal(str(project.hourly_rate or 0))
        if hours > 0 and rate > 0:
            rate = to_money(rate)
            items.append(
                LineItem(
                    description=f"{project.name} - {hours}h @ {rate}/h",
                    quantity=hours,
                    unit_price=rate,
                    total=to_money(hours * rate),
                )
            )
    elif project.billing_type == FIXED and project.fixed_fee is not None:
        fee = to_money(project.fixed_fee)
        if fee > 0:
            items.append(
                LineItem(
                    description=f"{project.name} - Fixed fee",
                    quantity=Decimal("1"),
                    unit_price=fee,
                    total=fee,
                )
            )
    return items


def allocate_invoice_number(db: Session, user_id: int) -> int:
    """Issue the next invoice number for a user inside the caller's transaction.

    The increment is a single UPDATE, so it holds the settings row lock until
    commit and concurrent generators queue behind it; the issued number is the
    value before the increment. Users without a settings row continue from
    their highest existing number.
    """
    result = db.execute(
        update(UserSettings)
        .where(UserSettings.user_id == user_id)
        .values(next_number=UserSettings.next_number + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        next_number = (
            db.query(UserSettings.next_number).filter(UserSettings.user_id == user_id).scalar()
        )
        return next_number - 1
    return highest_invoice_number(db, user_id) + 1


def generate_invoice_for_project(
    db: Session,
    user_id: int | None,
    project_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
) -> Invoice:
    user_id = require_user_id(user_id)
    project = get_owned_project(db, user_id, project_id)
    settings = find_user_settings(db, user_id)

    currency = settings.currency if settings else "USD"
    tax_rate = settings.tax_rate if settings else Decimal("0")
    terms = settings.terms if settings else DEFAULT_TERMS
    prefix = settings.invoice_prefix if settings else ""

    with transaction(db):
        entries = get_unbilled_entries(db, user_id, project.id, start, end) if project.billing_type == HOURLY else []
        items = build_line_items(project, entries)
        if not items:
            raise EmptyInvoiceError("Nothing to invoice for this project")

        subtotal = sum((item.total for item in items), Decimal("0.00"))
        tax = compute_tax(subtotal, tax_rate)
        issue_date = utc_now()
        number = allocate_invoice_number(db, user_id)

        invoice = Invoice(
            user_id=user_id,
            client_id=project.client_id,
            project_id=project.id,
            number=number,
            display_number=f"{prefix}{number}",
            issue_date=issue_date,
            due_date=compute_due_date(issue_date, terms),
            currency=currency,
            status=DRAFT,
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            amount_paid=Decimal("0.00"),
        )
        db.add(invoice)
        db.flush()  # obtain invoice id for items and entry links
        for item in items:
            db.add(
                InvoiceItem(
                    invoice_id=invoice.id,
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total=item.total,
                )
            )
        mark_entries_billed(db, entries, invoice.id)
    db.refresh(invoice)
    logger.info(
        "Invoice %s (#%s) generated for project %s: %s entries, total %s",
        invoice.id,
        invoice.display_number,
        project.id,
        len(entries),
        invoice.total,
    )
    return invoice
