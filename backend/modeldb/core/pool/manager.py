"""
Bounded connection pool for one database.

Reuses idle connections to avoid open/close on every statement. At most
``max_connections`` connections are checked out at once; checkout beyond that
fails immediately instead of waiting. Includes health-check on checkout and
max-age eviction.
"""

import logging
import threading
import time
from typing import Any, NamedTuple

from modeldb.core.config import DatabaseConfig
from modeldb.core.errors import PoolConnectionError

from .connect import connect
from .health import health_check

_log = logging.getLogger(__name__)

_PING_IDLE_THRESHOLD = 30.0  # only ping connections idle longer than this (seconds)


class _PoolEntry(NamedTuple):
    conn: Any
    created_at: float  # time.monotonic() when the connection was opened
    last_used: float   # time.monotonic() when last returned to pool


class PoolManager:
    """Fixed-capacity pool with health-check and max-age."""

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._idle: list[_PoolEntry] = []
        self._created: dict[int, float] = {}
        self._in_use = 0
        self._lock = threading.Lock()
        self._max_connections: int = config.max_connections
        self._max_age: float = float(config.pool_max_age_sec)

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    def get_connection(self) -> Any:
        """Check out a healthy connection (from pool or freshly opened).

        Raises PoolConnectionError when the pool is exhausted or the connect fails.
        """
        with self._lock:
            if self._in_use >= self._max_connections:
                raise PoolConnectionError(
                    f"Connection pool exhausted ({self._max_connections} in use)"
                )
            self._in_use += 1

        try:
            return self._checkout()
        except Exception as e:
            with self._lock:
                self._in_use -= 1
            if isinstance(e, PoolConnectionError):
                raise
            raise PoolConnectionError(f"Could not connect to database: {e}") from e

    def release(self, conn: Any) -> None:
        """Return a connection to the pool (or close it if it is broken or too old)."""
        try:
            self._release(conn)
        finally:
            with self._lock:
                self._in_use = max(0, self._in_use - 1)

    def dispose(self) -> None:
        """Close all idle connections."""
        with self._lock:
            entries = list(self._idle)
            self._idle.clear()
        for e in entries:
            self._forget(e.conn)
            self._close_quiet(e.conn)

    def stats(self) -> dict[str, int]:
        """Return pool statistics for monitoring."""
        with self._lock:
            return {
                "in_use": self._in_use,
                "idle_connections": len(self._idle),
                "max_connections": self._max_connections,
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _checkout(self) -> Any:
        now = time.monotonic()
        while True:
            entry = self._pop()
            if entry is None:
                break
            if self._is_expired(entry.created_at):
                self._forget(entry.conn)
                self._close_quiet(entry.conn)
                continue
            idle_sec = now - entry.last_used
            if idle_sec > _PING_IDLE_THRESHOLD and not health_check(entry.conn):
                self._forget(entry.conn)
                self._close_quiet(entry.conn)
                continue
            return entry.conn

        conn = connect(self._config)
        with self._lock:
            self._created[id(conn)] = time.monotonic()
        _log.debug("Opened new %s connection", self._config.product_type.value)
        return conn

    def _release(self, conn: Any) -> None:
        try:
            conn.rollback()
        except Exception:
            self._forget(conn)
            self._close_quiet(conn)
            return

        with self._lock:
            created_at = self._created.get(id(conn), time.monotonic())
            if not self._is_expired(created_at) and len(self._idle) < self._max_connections:
                self._idle.append(
                    _PoolEntry(conn=conn, created_at=created_at, last_used=time.monotonic())
                )
                return

        self._forget(conn)
        self._close_quiet(conn)

    def _pop(self) -> _PoolEntry | None:
        with self._lock:
            if self._idle:
                return self._idle.pop()
        return None

    def _forget(self, conn: Any) -> None:
        with self._lock:
            self._created.pop(id(conn), None)

    def _is_expired(self, created_at: float) -> bool:
        return (time.monotonic() - created_at) > self._max_age

    @staticmethod
    def _close_quiet(conn: Any) -> None:
        try:
            conn.close()
        except Exception:
            pass
