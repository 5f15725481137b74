"""Project endpoints: registry plus lifecycle transitions."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from freelance_ledger.app.db.session import get_db
from freelance_ledger.app.dependencies.auth import get_current_user
from freelance_ledger.app.models.user import User
from freelance_ledger.app.schemas.project import (
    ProjectCancel,
    ProjectCancelResult,
    ProjectCreate,
    ProjectRead,
    ProjectStatusUpdate,
    ProjectUpdate,
)
from freelance_ledger.app.services.lookups import get_owned_project
from freelance_ledger.app.services.projects import (
    cancel_project,
    create_project,
    delete_project,
    list_projects,
    set_project_status,
    update_project,
)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project_endpoint(
    payload: ProjectCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return create_project(db, current_user.id, payload)


@router.get("/", response_model=List[ProjectRead])
async def list_projects_endpoint(
    include_archived: bool = True,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return list_projects(db, current_user.id, include_archived=include_archived)


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_owned_project(db, current_user.id, project_id)


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project_endpoint(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return update_project(db, current_user.id, project_id, payload)


@router.patch("/{project_id}/status", response_model=ProjectRead)
async def update_project_status(
    project_id: int,
    payload: ProjectStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return set_project_status(db, current_user.id, project_id, payload.status)


@router.post("/{project_id}/cancel", response_model=ProjectCancelResult)
async def cancel_project_endpoint(
    project_id: int,
    payload: ProjectCancel,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return cancel_project(db, current_user.id, project_id, payload.cancelled_by)


@router.delete("/{project_id}")
async def delete_project_endpoint(
    project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    delete_project(db, current_user.id, project_id)
    return {"status": "deleted", "id": project_id}
