from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from freelance_ledger.app.db.session import get_db
from freelance_ledger.app.dependencies.auth import get_current_user
from freelance_ledger.app.models.user import User
from freelance_ledger.app.schemas.user_settings import UserSettingsRead, UserSettingsUpdate
from freelance_ledger.app.services.user_settings import get_or_create_user_settings, update_user_settings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/", response_model=UserSettingsRead)
async def get_user_settings(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_or_create_user_settings(db, current_user.id)


@router.patch("/", response_model=UserSettingsRead)
async def patch_user_settings(
    payload: UserSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return update_user_settings(db, current_user.id, payload)
