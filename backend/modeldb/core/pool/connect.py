"""
DB connection helpers for the driver pool.

Uses pymysql (MySQL), psycopg (PostgreSQL) or sqlite3 (SQLite) based on product_type.
"""

import sqlite3
from typing import Any

import psycopg
import pymysql

from modeldb.core.config import DatabaseConfig, ProductTypeEnum


def connect(config: DatabaseConfig) -> Any:
    """
    Open a DB-API connection described by *config*.

    - MySQL / PostgreSQL: host, user and database are required.
    - SQLite: database is a file path; the connection may be used from worker threads.
    """
    pt = config.product_type
    if pt == ProductTypeEnum.SQLITE:
        return sqlite3.connect(
            config.database,
            timeout=config.connect_timeout,
            check_same_thread=False,
        )

    for name, val in [
        ("host", config.host),
        ("database", config.database),
        ("user", config.user),
    ]:
        if val is None:
            raise ValueError(f"config must provide {name}")

    if pt == ProductTypeEnum.POSTGRES:
        return psycopg.connect(
            host=config.host,
            port=config.resolved_port,
            dbname=config.database,
            user=config.user,
            password=config.password,
            connect_timeout=config.connect_timeout,
        )
    if pt == ProductTypeEnum.MYSQL:
        return pymysql.connect(
            host=config.host,
            port=config.resolved_port,
            database=config.database,
            user=config.user,
            password=config.password,
            connect_timeout=config.connect_timeout,
        )
    raise ValueError(f"Unsupported product_type: {pt}")


def execute(
    conn: Any,
    sql: str,
    params: list | tuple | None = None,
    *,
    product_type: ProductTypeEnum | None = None,
    timeout_sec: float | None = None,
) -> Any:
    """
    Execute SQL and return the cursor. Caller uses cursor_to_dicts(cursor) or cursor.rowcount.

    - timeout_sec: when set with product_type, applies a statement timeout in ms before
      the query (Postgres: statement_timeout, MySQL: max_execution_time) and resets after.
      SQLite has no per-statement timeout and ignores it.
    """
    apply_timeout = (
        timeout_sec is not None
        and timeout_sec > 0
        and product_type in (ProductTypeEnum.POSTGRES, ProductTypeEnum.MYSQL)
    )

    if apply_timeout:
        timeout_ms = int(timeout_sec * 1000)
        cur_set = conn.cursor()
        try:
            if product_type == ProductTypeEnum.POSTGRES:
                cur_set.execute("SET statement_timeout = %s", (str(timeout_ms),))
            else:
                cur_set.execute("SET SESSION max_execution_time = %s", (timeout_ms,))
        finally:
            try:
                cur_set.close()
            except Exception:
                pass

    cur = conn.cursor()
    try:
        if params is not None:
            cur.execute(sql, params)
        else:
            cur.execute(sql)
    finally:
        if apply_timeout:
            try:
                cur_reset = conn.cursor()
                if product_type == ProductTypeEnum.POSTGRES:
                    cur_reset.execute("SET statement_timeout = 0")
                else:
                    cur_reset.execute("SET SESSION max_execution_time = 0")
                cur_reset.close()
            except Exception:
                pass

    return cur


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. Works for psycopg, pymysql and sqlite3."""
    desc = cursor.description
    if not desc:
        return []
    names = [d[0] for d in desc]
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]
