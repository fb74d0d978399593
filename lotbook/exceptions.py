"""Custom exceptions for lotbook."""


class LotbookError(Exception):
    """Base exception for portfolio computation errors."""


class InvalidCostBasisConfigError(LotbookError):
    """Raised when a cost-basis method is requested with unusable settings."""

    def __init__(self, method: str, message: str):
        self.method = method
        super().__init__(f"Invalid cost-basis configuration for {method}: {message}")


class DataValidationError(LotbookError):
    """Raised when input data fails validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error on '{field}': {message}")


class TransactionImportError(LotbookError):
    """Raised when a transaction file cannot be read."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Import error from {source}: {message}")
