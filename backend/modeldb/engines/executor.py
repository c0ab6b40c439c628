"""
Execute one parameterized statement on a pooled connection.

- Statement with a result set (SELECT, ... RETURNING): returns list[dict]
- Otherwise (INSERT/UPDATE/DELETE): returns QueryResult(last_insert_id, rowcount)

The blocking DB-API call runs in a worker thread so callers can await it.
"""

import asyncio
import logging
import sqlite3
from typing import Any

import psycopg
import pymysql
from pydantic import BaseModel, ConfigDict

from modeldb.core.errors import PoolConnectionError, QueryError
from modeldb.core.pool import PoolManager, cursor_to_dicts, execute

_log = logging.getLogger(__name__)

Row = dict[str, Any]


class QueryResult(BaseModel):
    """Result descriptor for statements that return no rows."""

    model_config = ConfigDict(frozen=True)

    last_insert_id: Any
    rowcount: int


class PoolExecutor:
    """
    execute(sql, values) -> list[Row] | QueryResult

    Every call checks out exactly one connection and always releases it.
    """

    def __init__(
        self,
        pool_manager: PoolManager,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._pm = pool_manager
        self._log = logger or _log
        self._config = pool_manager.config
        self._tag = f"Drivers - {self._config.product_type.value}"

    @property
    def pool(self) -> PoolManager:
        return self._pm

    async def execute(
        self, sql: str, values: list | tuple | None = None
    ) -> list[Row] | QueryResult:
        """Run *sql* with positional *values* without blocking the event loop."""
        return await asyncio.to_thread(self.execute_sync, sql, values)

    def execute_sync(
        self, sql: str, values: list | tuple | None = None
    ) -> list[Row] | QueryResult:
        try:
            conn = self._pm.get_connection()
        except PoolConnectionError as e:
            self._log.error("[%s] %s", self._tag, e)
            raise

        try:
            cur = execute(
                conn,
                sql,
                list(values) if values is not None else None,
                product_type=self._config.product_type,
                timeout_sec=self._config.statement_timeout_sec,
            )
            try:
                if cur.description:
                    out: list[Row] | QueryResult = cursor_to_dicts(cur)
                else:
                    out = QueryResult(
                        last_insert_id=getattr(cur, "lastrowid", None),
                        rowcount=cur.rowcount if cur.rowcount is not None else 0,
                    )
            finally:
                cur.close()
            conn.commit()
            return out
        except psycopg.errors.QueryCanceled as e:
            self._rollback_quiet(conn)
            self._log.warning("[%s] query timed out: %s", self._tag, e)
            raise QueryError(f"SQL query timed out (statement_timeout): {e}") from e
        except (psycopg.Error, pymysql.Error, sqlite3.Error) as e:
            self._rollback_quiet(conn)
            self._log.error("[%s] %s. SQL: %s", self._tag, e, sql)
            raise QueryError(f"SQL execution failed: {e}") from e
        except Exception as e:
            self._rollback_quiet(conn)
            self._log.error("[%s] %s. SQL: %s", self._tag, e, sql, exc_info=True)
            raise QueryError(f"SQL execution failed: {e}") from e
        finally:
            self._pm.release(conn)

    @staticmethod
    def _rollback_quiet(conn: Any) -> None:
        try:
            conn.rollback()
        except Exception:
            pass
