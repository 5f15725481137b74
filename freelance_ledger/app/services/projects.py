"""Project registry and lifecycle: status changes, cancellation and deletion."""

import logging
from decimal import Decimal
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from freelance_ledger.app.core.errors import ConflictError, ValidationError, require_user_id
from freelance_ledger.app.core.time import utc_now
from freelance_ledger.app.db.session import transaction
from freelance_ledger.app.models.invoice import Invoice
from freelance_ledger.app.models.payment import Payment
from freelance_ledger.app.models.project import BILLING_TYPES, OPEN_STATUSES, Project
from freelance_ledger.app.models.time_entry import TimeEntry
from freelance_ledger.app.schemas.project import ProjectCreate, ProjectUpdate
from freelance_ledger.app.services.invoices import purge_invoice, void_open_invoices_for_project
from freelance_ledger.app.services.lookups import get_owned_client, get_owned_project
from freelance_ledger.app.services.timer import finish_entry
from freelance_ledger.app.services.user_settings import find_user_settings

logger = logging.getLogger(__name__)

HANDED_OVER = "HANDED_OVER"
CANCELLED_BY = {
    "client": "CANCELLED_BY_CLIENT",
    "freelancer": "CANCELLED_BY_FREELANCER",
}


def _check_billing(billing_type: str, hourly_rate, fixed_fee) -> None:
    if billing_type not in BILLING_TYPES:
        raise ValidationError("billing_type must be HOURLY or FIXED")
    if hourly_rate is not None and Decimal(str(hourly_rate)) < 0:
        raise ValidationError("hourly_rate cannot be negative")
    if fixed_fee is not None and Decimal(str(fixed_fee)) < 0:
        raise ValidationError("fixed_fee cannot be negative")


def create_project(db: Session, user_id: int | None, payload: ProjectCreate) -> Project:
    user_id = require_user_id(user_id)
    client = get_owned_client(db, user_id, payload.client_id)
    if not payload.name.strip():
        raise ValidationError("name is required")
    settings = find_user_settings(db, user_id)
    billing_type = payload.billing_type or (settings.default_billing if settings else "HOURLY")
    hourly_rate = payload.hourly_rate
    if hourly_rate is None and settings is not None:
        hourly_rate = settings.default_rate
    _check_billing(billing_type, hourly_rate, payload.fixed_fee)

    with transaction(db):
        project = Project(
            user_id=user_id,
            client_id=client.id,
            name=payload.name.strip(),
            billing_type=billing_type,
            hourly_rate=hourly_rate,
            fixed_fee=payload.fixed_fee,
            status="ACTIVE",
            is_archived=False,
        )
        db.add(project)
    db.refresh(project)
    logger.info("Project %s created for client %s", project.id, client.id)
    return project


def list_projects(db: Session, user_id: int | None, include_archived: bool = True) -> List[Project]:
    user_id = require_user_id(user_id)
    query = db.query(Project).filter(Project.user_id == user_id)
    if not include_archived:
        query = query.filter(Project.is_archived.is_(False))
    return query.order_by(Project.is_archived.asc(), Project.created_at.desc(), Project.id.desc()).all()


def update_project(db: Session, user_id: int | None, project_id: int, payload: ProjectUpdate) -> Project:
    """Edit name and billing terms. Status and archive flags change only via the lifecycle."""
    user_id = require_user_id(user_id)
    project = get_owned_project(db, user_id, project_id)
    update_data = payload.model_dump(exclude_unset=True)
    if "name" in update_data and not (update_data["name"] or "").strip():
        raise ValidationError("name is required")
    _check_billing(
        update_data.get("billing_type") or project.billing_type,
        update_data.get("hourly_rate", project.hourly_rate),
        update_data.get("fixed_fee", project.fixed_fee),
    )
    with transaction(db):
        for field, value in update_data.items():
            if field == "billing_type" and value is None:
                continue
            setattr(project, field, value)
    db.refresh(project)
    return project


def set_project_status(db: Session, user_id: int | None, project_id: int, target: str) -> Project:
    """Move between ACTIVE, ON_HOLD, COMPLETED and HANDED_OVER in any order.

    Only HANDED_OVER archives the project; leaving it clears the handover
    timestamp and un-archives. Cancelled projects stay cancelled.
    """
    user_id = require_user_id(user_id)
    if target not in OPEN_STATUSES:
        raise ValidationError("Invalid status")
    with transaction(db):
        project = get_owned_project(db, user_id, project_id, for_update=True)
        if project.is_cancelled:
            raise ConflictError("A cancelled project cannot change status.")
        project.status = target
        project.is_archived = target == HANDED_OVER
        project.handed_over_at = utc_now() if target == HANDED_OVER else None
    db.refresh(project)
    logger.info("Project %s moved to %s", project.id, project.status)
    return project


def cancel_project(db: Session, user_id: int | None, project_id: int, cancelled_by: str) -> dict:
    """Cancel a project and apply the matching cascade in one transaction.

    A freelancer cancellation voids the project's DRAFT/SENT invoices that have
    no payments. A client cancellation leaves every invoice in place so
    invoiced work can still be collected. Either way a running timer on the
    project is stopped.
    """
    user_id = require_user_id(user_id)
    new_status = CANCELLED_BY.get(cancelled_by)
    if new_status is None:
        raise ValidationError("Invalid cancel type")

    with transaction(db):
        project = get_owned_project(db, user_id, project_id, for_update=True)
        if project.is_cancelled:
            raise ConflictError("Project is already cancelled.")
        voided = void_open_invoices_for_project(db, project.id) if cancelled_by == "freelancer" else []
        running = (
            db.query(TimeEntry)
            .filter(TimeEntry.project_id == project.id, TimeEntry.end.is_(None))
            .with_for_update()
            .all()
        )
        for entry in running:
            finish_entry(entry)
        project.status = new_status
        project.is_archived = True
    db.refresh(project)
    logger.info(
        "Project %s cancelled by %s; voided invoices %s, stopped %s timer(s)",
        project.id,
        cancelled_by,
        voided,
        len(running),
    )
    return {
        "project": project,
        "cancelled_by": cancelled_by,
        "voided_invoice_ids": voided,
        "stopped_entry_ids": [entry.id for entry in running],
    }


def delete_project(db: Session, user_id: int | None, project_id: int) -> None:
    """Hard-delete a project with its invoices and time, unless money was received."""
    user_id = require_user_id(user_id)
    with transaction(db):
        project = get_owned_project(db, user_id, project_id, for_update=True)
        paid_invoices = (
            db.query(func.count(Payment.id))
            .join(Invoice, Payment.invoice_id == Invoice.id)
            .filter(Invoice.project_id == project.id)
            .scalar()
        )
        if paid_invoices:
            logger.warning("Refused to delete project %s: its invoices have payments", project.id)
            raise ConflictError("Cannot delete a project whose invoices have payments.")
        for invoice in db.query(Invoice).filter(Invoice.project_id == project.id).all():
            purge_invoice(db, invoice)
        db.flush()
        # Time entries go with the project through the delete-orphan cascade.
        db.delete(project)
    logger.info("Project %s deleted", project_id)
