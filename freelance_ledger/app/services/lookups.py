"""Owner-scoped lookups. Another user's row is reported exactly like a missing one."""

from sqlalchemy.orm import Session

from freelance_ledger.app.core.errors import NotFoundError
from freelance_ledger.app.models.client import Client
from freelance_ledger.app.models.invoice import Invoice
from freelance_ledger.app.models.project import Project


def get_owned_client(db: Session, user_id: int, client_id: int) -> Client:
    client = db.query(Client).filter(Client.id == client_id, Client.user_id == user_id).first()
    if not client:
        raise NotFoundError("Client not found")
    return client


def get_owned_project(db: Session, user_id: int, project_id: int, for_update: bool = False) -> Project:
    query = db.query(Project).filter(Project.id == project_id, Project.user_id == user_id)
    if for_update:
        query = query.with_for_update()
    project = query.first()
    if not project:
        raise NotFoundError("Project not found")
    return project


def get_owned_invoice(db: Session, user_id: int, invoice_id: int, for_update: bool = False) -> Invoice:
    query = db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.user_id == user_id)
    if for_update:
        query = query.with_for_update()
    invoice = query.first()
    if not invoice:
        raise NotFoundError("Invoice not found")
    return invoice
