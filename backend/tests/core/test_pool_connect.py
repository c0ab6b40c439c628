"""
Unit tests for core.pool: connect, health_check, execute, cursor_to_dicts.

MySQL / PostgreSQL drivers are mocked; SQLite runs for real against a temp file.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from modeldb.core.config import DatabaseConfig, ProductTypeEnum
from modeldb.core.pool import connect, cursor_to_dicts, execute, health_check
from tests.utils.models import sqlite_config


def _server_config(product_type: ProductTypeEnum, **overrides) -> DatabaseConfig:
    data = {
        "product_type": product_type,
        "host": "db.local",
        "user": "app",
        "password": "secret",
        "database": "app",
    }
    data.update(overrides)
    return DatabaseConfig.model_validate(data)


# --- connect ---


@patch("pymysql.connect")
def test_connect_mysql_default_port(mock_connect: MagicMock) -> None:
    connect(_server_config(ProductTypeEnum.MYSQL))
    mock_connect.assert_called_once_with(
        host="db.local",
        port=3306,
        database="app",
        user="app",
        password="secret",
        connect_timeout=10,
    )


@patch("psycopg.connect")
def test_connect_postgres(mock_connect: MagicMock) -> None:
    connect(_server_config(ProductTypeEnum.POSTGRES, port=6543))
    mock_connect.assert_called_once_with(
        host="db.local",
        port=6543,
        dbname="app",
        user="app",
        password="secret",
        connect_timeout=10,
    )


def test_connect_requires_host() -> None:
    cfg = _server_config(ProductTypeEnum.MYSQL, host=None)
    with pytest.raises(ValueError, match="host"):
        connect(cfg)


def test_connect_sqlite(tmp_path: Path) -> None:
    conn = connect(sqlite_config(tmp_path / "c.db"))
    try:
        assert health_check(conn) is True
        cur = execute(conn, "SELECT ? AS n", [1])
        rows = cursor_to_dicts(cur)
        cur.close()
        assert rows == [{"n": 1}]
    finally:
        conn.close()


def test_health_check_fails_on_closed_connection(tmp_path: Path) -> None:
    conn = connect(sqlite_config(tmp_path / "c.db"))
    conn.close()
    assert health_check(conn) is False


# --- execute ---


def _recording_conn() -> tuple[MagicMock, list[tuple[str, tuple]]]:
    calls: list[tuple[str, tuple]] = []
    mock_cur = MagicMock()
    mock_cur.execute = lambda s, p=None: calls.append((s, p if p is not None else ()))
    mock_conn = MagicMock()
    mock_conn.cursor.return_value = mock_cur
    return mock_conn, calls


def test_execute_applies_statement_timeout_postgres() -> None:
    """With timeout_sec, execute() runs SET statement_timeout before the query and resets after."""
    conn, calls = _recording_conn()

    execute(
        conn,
        "SELECT 1 AS n",
        product_type=ProductTypeEnum.POSTGRES,
        timeout_sec=5,
    )

    assert "statement_timeout" in calls[0][0]
    assert "5000" in str(calls[0][1])
    assert calls[1][0] == "SELECT 1 AS n"
    assert calls[2][0] == "SET statement_timeout = 0"


def test_execute_applies_statement_timeout_mysql() -> None:
    conn, calls = _recording_conn()

    execute(
        conn,
        "SELECT %s",
        [1],
        product_type=ProductTypeEnum.MYSQL,
        timeout_sec=1.5,
    )

    assert calls[0] == ("SET SESSION max_execution_time = %s", (1500,))
    assert calls[1] == ("SELECT %s", [1])
    assert calls[2][0] == "SET SESSION max_execution_time = 0"


def test_execute_without_timeout_runs_only_statement() -> None:
    conn, calls = _recording_conn()
    execute(conn, "SELECT 1", product_type=ProductTypeEnum.SQLITE, timeout_sec=5)
    assert calls == [("SELECT 1", ())]


def test_cursor_to_dicts_without_description() -> None:
    cur = MagicMock()
    cur.description = None
    assert cursor_to_dicts(cur) == []
