"""Client registry: the minimum needed to attach projects and invoices."""

import logging
from typing import List

from sqlalchemy.orm import Session

from freelance_ledger.app.core.errors import ConflictError, ValidationError, require_user_id
from freelance_ledger.app.db.session import transaction
from freelance_ledger.app.models.client import Client
from freelance_ledger.app.models.invoice import PAID, VOID, Invoice
from freelance_ledger.app.models.project import Project
from freelance_ledger.app.schemas.client import ClientCreate
from freelance_ledger.app.services.lookups import get_owned_client

logger = logging.getLogger(__name__)


def create_client(db: Session, user_id: int | None, payload: ClientCreate) -> Client:
    user_id = require_user_id(user_id)
    if not payload.name.strip():
        raise ValidationError("name is required")
    with transaction(db):
        client = Client(user_id=user_id, **payload.model_dump())
        client.name = client.name.strip()
        db.add(client)
    db.refresh(client)
    return client


def list_clients(db: Session, user_id: int | None) -> List[Client]:
    user_id = require_user_id(user_id)
    return (
        db.query(Client)
        .filter(Client.user_id == user_id)
        .order_by(Client.created_at.desc(), Client.id.desc())
        .all()
    )


def archive_client(db: Session, user_id: int | None, client_id: int) -> Client:
    """Archive a client and all of its projects once nothing is left to collect."""
    user_id = require_user_id(user_id)
    with transaction(db):
        client = get_owned_client(db, user_id, client_id)
        pending = (
            db.query(Invoice.id)
            .filter(Invoice.client_id == client.id, Invoice.status.notin_([PAID, VOID]))
            .order_by(Invoice.id)
            .all()
        )
        if pending:
            ids = ", ".join(str(row.id) for row in pending)
            raise ConflictError(
                "Cannot archive client with active or unpaid invoices. "
                f"Please mark them as PAID or VOID first (invoices {ids})."
            )
        db.query(Project).filter(Project.client_id == client.id).update(
            {Project.is_archived: True}, synchronize_session="fetch"
        )
        client.is_archived = True
    db.refresh(client)
    logger.info("Client %s archived", client.id)
    return client
