import logging
import os
from decimal import Decimal

from sqlalchemy.orm import Session

from freelance_ledger.app.core.security import get_password_hash
from freelance_ledger.app.models.client import Client
from freelance_ledger.app.models.project import Project
from freelance_ledger.app.models.user import User
from freelance_ledger.app.models.user_settings import UserSettings

logger = logging.getLogger(__name__)

DEFAULT_DEV_PASSWORD = "Secret123!"
DEFAULT_DEV_EMAIL = "freelancer@test.com"
DEMO_CLIENTS = [
    ("Acme Studio", "billing@acme.example.com", [("Website redesign", "HOURLY", Decimal("85.00"), None)]),
    ("Northwind", "ap@northwind.example.com", [("Brand kit", "FIXED", None, Decimal("1200.00"))]),
]


def ensure_demo_workspace(db: Session) -> None:
    """
    Create a demo freelancer with settings, two clients and a project each for local development.
    Skips execution when running under pytest to avoid altering test expectations.
    """
    if os.getenv("PYTEST_CURRENT_TEST"):
        return

    if db.query(User).filter(User.email == DEFAULT_DEV_EMAIL).first():
        return

    user = User(
        email=DEFAULT_DEV_EMAIL,
        full_name="Demo Freelancer",
        hashed_password=get_password_hash(DEFAULT_DEV_PASSWORD),
        is_active=True,
    )
    db.add(user)
    db.flush()
    db.add(UserSettings(user_id=user.id, tax_rate=Decimal("13.00"), rounding="NEAREST_15", invoice_prefix="INV-"))
    for client_name, email, projects in DEMO_CLIENTS:
        client = Client(user_id=user.id, name=client_name, email=email)
        db.add(client)
        db.flush()
        for name, billing_type, rate, fee in projects:
            db.add(
                Project(
                    user_id=user.id,
                    client_id=client.id,
                    name=name,
                    billing_type=billing_type,
                    hourly_rate=rate,
                    fixed_fee=fee,
                )
            )
    db.commit()
    logger.info("Seeded demo workspace for %s", DEFAULT_DEV_EMAIL)
