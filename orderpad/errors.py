"""
Application Exceptions

Raised by the storage layer and the order service, translated to HTTP
responses by the exception handlers registered in orderpad.main:

    OrderNotFoundError -> 404
    OrderStateError    -> 409
    StorageError       -> 500
"""

from typing import Optional


class OrderPadError(Exception):
    """Base class for all application errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OrderNotFoundError(OrderPadError):
    """No order exists with the requested order number."""

    status_code = 404

    def __init__(self, order_number: str):
        super().__init__(f"Order {order_number} not found")
        self.order_number = order_number


class OrderStateError(OrderPadError):
    """The order is in a status that does not allow the operation."""

    status_code = 409

    def __init__(self, order_number: str, status: str, action: str):
        super().__init__(f"Cannot {action} order {order_number}: order is {status}")
        self.order_number = order_number
        self.status = status
        self.action = action


class StorageError(OrderPadError):
    """The storage backend failed unexpectedly."""

    status_code = 500

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original
