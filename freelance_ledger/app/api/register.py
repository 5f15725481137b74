"""Handles user registration."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from freelance_ledger.app.core.security import get_password_hash
from freelance_ledger.app.db.session import get_db
from freelance_ledger.app.models.user import User
from freelance_ledger.app.schemas.user import UserCreate, UserRead

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserRead)
def register_user(user_in: UserCreate, db: Session = Depends(get_db)):
    existing = db.query(User).filter(User.email == user_in.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    hashed_password = get_password_hash(user_in.password)  # Hash password before storing
    user = User(email=user_in.email, full_name=user_in.full_name, hashed_password=hashed_password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
