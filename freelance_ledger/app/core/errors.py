"""Domain errors raised by the ledger services.

Every error carries a user-facing message and the HTTP status it maps to; the
application registers a single handler that renders them like HTTPException.
"""

from fastapi import status


class LedgerError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(LedgerError):
    """Malformed or out-of-range input. Never retried automatically."""

    status_code = status.HTTP_400_BAD_REQUEST


class EmptyInvoiceError(ValidationError):
    """Invoice generation found nothing billable."""


class ConflictError(LedgerError):
    """The current state forbids the operation; resolve it before retrying."""

    status_code = status.HTTP_409_CONFLICT


class NotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(LedgerError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


def require_user_id(user_id: int | None) -> int:
    """Fail closed when the identity gate did not resolve a user."""
    if user_id is None:
        raise UnauthorizedError()
    return user_id
