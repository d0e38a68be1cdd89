# services/errors.py
from typing import Any, Optional


class ServiceError(Exception):
    """Business rule failure raised by the service layer.

    The HTTP layer renders it as an error envelope with ``status_code``.
    """

    status_code = 422

    def __init__(self, message: str, errors: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class AuthenticationError(ServiceError):
    status_code = 401


class StockAdjustmentError(ServiceError):
    pass


class CheckoutError(ServiceError):
    pass


class InsufficientPaymentError(CheckoutError):
    pass
