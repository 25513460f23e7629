"""Custom exceptions for the position ledger."""


class LedgerError(Exception):
    """Base exception for ledger operations."""

    status_code = 500
    code = "LEDGER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(LedgerError):
    """Raised when a requested position or record is not found."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: int | str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} with id {resource_id} not found")


class InvalidQuantityError(LedgerError):
    """Raised when a close quantity is <= 0 or exceeds the open quantity."""

    status_code = 400
    code = "INVALID_QUANTITY"

    def __init__(self, requested, available=None):
        self.requested = requested
        self.available = available
        if available is None:
            message = f"Invalid quantity {requested}"
        else:
            message = f"Invalid quantity {requested}: {available} available"
        super().__init__(message)


class ValidationError(LedgerError):
    """Raised when validation fails."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class ImportParseError(LedgerError):
    """Raised when an import file cannot be parsed at all."""

    status_code = 400
    code = "IMPORT_PARSE_ERROR"


class StorageError(LedgerError):
    """Raised when the persistence layer fails or a lock times out."""

    status_code = 500
    code = "STORAGE_ERROR"

    def __init__(self, message: str, original_error: Exception | None = None):
        self.original_error = original_error
        super().__init__(message)


class AuthenticationError(LedgerError):
    """Raised when a username/password pair does not match a user."""

    status_code = 401
    code = "AUTHENTICATION_FAILED"

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class ConflictError(LedgerError):
    """Raised when a record changed between choosing its locks and taking them."""

    status_code = 409
    code = "CONFLICT"
