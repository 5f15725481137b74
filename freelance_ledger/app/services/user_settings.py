"""Per-user billing settings: lazy creation and whitelisted updates."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from freelance_ledger.app.core.errors import ValidationError, require_user_id
from freelance_ledger.app.db.session import transaction
from freelance_ledger.app.models.invoice import Invoice
from freelance_ledger.app.models.user_settings import UserSettings
from freelance_ledger.app.schemas.user_settings import UserSettingsUpdate

logger = logging.getLogger(__name__)


def find_user_settings(db: Session, user_id: int) -> UserSettings | None:
    return db.query(UserSettings).filter(UserSettings.user_id == user_id).first()


def highest_invoice_number(db: Session, user_id: int) -> int:
    return db.query(func.max(Invoice.number)).filter(Invoice.user_id == user_id).scalar() or 0


def get_or_create_user_settings(db: Session, user_id: int | None) -> UserSettings:
    """Return the user's settings, creating them on first access.

    A user who invoiced before having a settings row already holds numbers
    1..N, so the counter starts after the highest one.
    """
    user_id = require_user_id(user_id)
    settings = find_user_settings(db, user_id)
    if settings:
        return settings
    with transaction(db):
        settings = UserSettings(user_id=user_id, next_number=highest_invoice_number(db, user_id) + 1)
        db.add(settings)
    db.refresh(settings)
    return settings


def update_user_settings(db: Session, user_id: int | None, payload: UserSettingsUpdate) -> UserSettings:
    settings = get_or_create_user_settings(db, user_id)
    # Unknown keys never reach here; the schema only carries whitelisted fields.
    update_data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "next_number" in update_data:
        highest = highest_invoice_number(db, settings.user_id)
        if update_data["next_number"] <= highest:
            raise ValidationError(f"Next invoice number must be greater than {highest}, the last number issued")
    with transaction(db):
        for field, value in update_data.items():
            setattr(settings, field, value)
    db.refresh(settings)
    logger.info("Settings updated for user %s: %s", settings.user_id, sorted(update_data))
    return settings
