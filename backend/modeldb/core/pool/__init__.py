"""
DB connection and bounded connection pool.

No driver layer of our own: psycopg, pymysql and sqlite3 provide DB-API connections;
DatabaseConfig (product_type, host, ...) is enough.
"""

from .connect import connect, cursor_to_dicts, execute
from .health import health_check
from .manager import PoolManager

__all__ = [
    "connect",
    "execute",
    "cursor_to_dicts",
    "health_check",
    "PoolManager",
]
