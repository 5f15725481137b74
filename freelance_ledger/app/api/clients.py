"""Client endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from freelance_ledger.app.db.session import get_db
from freelance_ledger.app.dependencies.auth import get_current_user
from freelance_ledger.app.models.user import User
from freelance_ledger.app.schemas.client import ClientCreate, ClientRead
from freelance_ledger.app.services.clients import archive_client, create_client, list_clients

router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("/", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client_endpoint(
    payload: ClientCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return create_client(db, current_user.id, payload)


@router.get("/", response_model=List[ClientRead])
async def list_clients_endpoint(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return list_clients(db, current_user.id)


@router.post("/{client_id}/archive", response_model=ClientRead)
async def archive_client_endpoint(
    client_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return archive_client(db, current_user.id, client_id)
