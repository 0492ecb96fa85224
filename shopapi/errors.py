# shopapi/errors.py
import enum
from contextlib import contextmanager
from typing import Any, Optional


# Closed set of failure kinds. Callers branch on `error.kind`, never on message text.
class ErrorKind(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    UNAUTHORIZED = "UNAUTHORIZED"
    ORDER_NOT_PENDING = "ORDER_NOT_PENDING"
    TERMINAL_STATE = "TERMINAL_STATE"
    VALIDATION = "VALIDATION"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"


class ShopError(Exception):
    kind = ErrorKind.INTERNAL
    default_message = "unexpected error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def wrap(self, operation: str) -> "ShopError":
        """Same kind of error, with the failing operation prefixed to the message."""
        return type(self)(f"{operation}: {self.message}", self.details)


class NotFoundError(ShopError):
    kind = ErrorKind.NOT_FOUND
    default_message = "not found"


class InsufficientStockError(ShopError):
    kind = ErrorKind.INSUFFICIENT_STOCK
    default_message = "insufficient stock"


class UnauthorizedError(ShopError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "unauthorized action"


class OrderNotPendingError(ShopError):
    kind = ErrorKind.ORDER_NOT_PENDING
    default_message = "order is not in pending status"


class TerminalStateError(ShopError):
    kind = ErrorKind.TERMINAL_STATE
    default_message = "order is in a terminal state"


class ValidationError(ShopError):
    kind = ErrorKind.VALIDATION
    default_message = "invalid input"


class EmailTakenError(ShopError):
    kind = ErrorKind.EMAIL_TAKEN
    default_message = "email already taken"


class InvalidCredentialsError(ShopError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "invalid credentials"


class ConflictError(ShopError):
    kind = ErrorKind.CONFLICT
    default_message = "conflicting state"


class StoreError(ShopError):
    kind = ErrorKind.INTERNAL
    default_message = "database error"


@contextmanager
def operation(name: str):
    # Prefix any ShopError raised inside the block with the operation name
    try:
        yield
    except ShopError as exc:
        raise exc.wrap(name) from exc
