"""
modeldb: persist application models to relational tables through a bounded
connection pool (MySQL, PostgreSQL, SQLite).
"""

from modeldb.core.errors import (
    DriverError,
    ModelValidationError,
    PoolConnectionError,
    PreconditionError,
    QueryError,
    UnsupportedOperationError,
)
from modeldb.driver import create_driver, init_driver
from modeldb.engines import CrudDriver, PoolExecutor, QueryResult
from modeldb.models import Model, ModelLike, ValidationResult

__all__ = [
    "CrudDriver",
    "DriverError",
    "Model",
    "ModelLike",
    "ModelValidationError",
    "PoolConnectionError",
    "PoolExecutor",
    "PreconditionError",
    "QueryError",
    "QueryResult",
    "UnsupportedOperationError",
    "ValidationResult",
    "create_driver",
    "init_driver",
]
