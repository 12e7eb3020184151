"""Domain exceptions shared by the store and payments services.

Services raise these; the HTTP boundary maps them to status codes in
``libs.common.error_handler``.
"""


class ShopError(Exception):
    """Base exception for all commerce errors."""

    status_code = 500
    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ShopError):
    """Raised for bad or missing input (non-positive quantity, missing address)."""

    status_code = 400


class StateError(ValidationError):
    """Raised when an order or return is not in a status that allows the action."""

    status_code = 409


class NotFoundError(ShopError):
    """Raised when an entity is absent or not owned by the caller."""

    status_code = 404


class StockError(ShopError):
    """Raised when inventory cannot cover the requested quantity."""

    status_code = 409

    def __init__(self, message: str, product_id=None):
        self.product_id = product_id
        super().__init__(message)


class ProviderError(ShopError):
    """Raised when a payment-provider call fails. Safe to retry."""

    status_code = 502
    retryable = True

    def __init__(
        self, message: str, status_code: int = None, response_data: dict = None
    ):
        self.provider_status = status_code
        self.response_data = response_data or {}
        super().__init__(message)


class PersistenceError(ShopError):
    """Raised when a store operation fails."""

    status_code = 500


class SignatureError(ShopError):
    """Raised when a webhook signature cannot be verified."""

    status_code = 400
