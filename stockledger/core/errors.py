class InventoryError(Exception):
    """Base for errors raised by the inventory core.

    Carries the transport status it maps to; only the HTTP boundary reads it.
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError):
    """Malformed or missing input. Raised before any transaction is opened."""

    status_code = 400
    code = "bad_request"


class StorageError(InventoryError):
    """Transaction or I/O failure. The in-flight transaction has been rolled back."""

    status_code = 500
    code = "storage_error"
