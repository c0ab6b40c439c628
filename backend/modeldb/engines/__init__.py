"""
Engines: PoolExecutor (one statement per pooled connection) and CrudDriver
(model operations translated to parameterized SQL).
"""

from modeldb.engines.crud import CrudDriver
from modeldb.engines.dialect import Dialect, get_dialect
from modeldb.engines.executor import PoolExecutor, QueryResult

__all__ = [
    "CrudDriver",
    "Dialect",
    "PoolExecutor",
    "QueryResult",
    "get_dialect",
]
