from freelance_ledger.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from freelance_ledger.app.models.user import User  # noqa: F401
from freelance_ledger.app.models.user_settings import UserSettings  # noqa: F401
from freelance_ledger.app.models.client import Client  # noqa: F401
from freelance_ledger.app.models.project import Project  # noqa: F401
from freelance_ledger.app.models.time_entry import TimeEntry  # noqa: F401
from freelance_ledger.app.models.invoice import Invoice  # noqa: F401
from freelance_ledger.app.models.invoice_item import InvoiceItem  # noqa: F401
from freelance_ledger.app.models.payment import Payment  # noqa: F401
