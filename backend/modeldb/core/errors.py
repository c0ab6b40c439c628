"""Driver exception types.

None of these are recovered inside the driver; every one reaches the caller
of the CRUD operation unchanged.
"""


class DriverError(Exception):
    """Base exception for driver errors."""


class ModelValidationError(DriverError, ValueError):
    """Raised when a model fails its own validity check (before any I/O)."""


class PreconditionError(DriverError):
    """Raised when an operation needs an identity the model does not carry."""


class PoolConnectionError(DriverError, ConnectionError):
    """Raised when no connection can be checked out (pool exhausted or connect failed)."""


class QueryError(DriverError):
    """Raised when the store rejects a statement. The driver exception is ``__cause__``."""


class UnsupportedOperationError(DriverError):
    """Raised when the configured dialect lacks a capability (e.g. native arrays)."""
