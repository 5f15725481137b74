"""Authentication dependencies for retrieving the current user."""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from freelance_ledger.app.core.errors import UnauthorizedError
from freelance_ledger.app.core.security import decode_access_token
from freelance_ledger.app.db.session import get_db
from freelance_ledger.app.models.user import User


def get_current_user(db: Session = Depends(get_db), authorization: str | None = Header(default=None)) -> User:
    # Expect Authorization: Bearer <token>
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Not authenticated")
    token = authorization.split(" ", 1)[1]
    try:
        payload = decode_access_token(token)
    except ValueError:
        raise UnauthorizedError("Not authenticated")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Not authenticated")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise UnauthorizedError("Not authenticated")
    return user
