from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "validation_error"
    AUTH_REQUIRED = "auth_required"
    NOT_FOUND = "not_found"
    INCOMPLETE_INPUT = "incomplete_input"
    INSUFFICIENT_STOCK = "insufficient_stock"
    PROCESSOR_DECLINED = "processor_declined"
    USER_CANCELLED = "user_cancelled"
    CAPTURE_ERROR = "capture_error"
    CONFIGURATION_ERROR = "configuration_error"
    NETWORK_ERROR = "network_error"
    PAYMENT_DECLINED = "payment_declined"
    PAYMENT_CANCELLED = "payment_cancelled"
    PARTIAL_WRITE_ERROR = "partial_write_error"


class StorefrontError(Exception):
    kind: ErrorKind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, *, kind: Optional[ErrorKind] = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class ValidationError(StorefrontError):
    kind = ErrorKind.VALIDATION_ERROR


class NotFoundError(StorefrontError):
    kind = ErrorKind.NOT_FOUND


class InsufficientStockError(StorefrontError):
    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Product {product_id} has {available} in stock, {requested} requested"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class OrderWriteError(StorefrontError):
    kind = ErrorKind.PARTIAL_WRITE_ERROR


class PartialWriteError(OrderWriteError):
    def __init__(self, message: str, *, order_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.order_id = order_id
