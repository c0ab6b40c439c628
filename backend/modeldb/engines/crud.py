"""
CRUD driver: translate model operations into parameterized SQL.

save / read / update / delete build one statement each, dispatch it through
the PoolExecutor and rehydrate the model body from the returned row.
array_append / array_remove work on native array columns (PostgreSQL).
"""

import logging
import re
from typing import Any

from modeldb.core.config import InsertStrategyEnum
from modeldb.core.errors import (
    ModelValidationError,
    PreconditionError,
    QueryError,
    UnsupportedOperationError,
)
from modeldb.engines.dialect import Dialect
from modeldb.engines.executor import PoolExecutor, QueryResult, Row
from modeldb.engines.values import decode_row, encode_value, encode_values
from modeldb.models import ModelLike

_log = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _validate_identifier(name: str) -> str:
    """Allow only ASCII letters, digits and underscores, not starting with a digit."""
    if not _IDENTIFIER_RE.fullmatch(name):
        raise ValueError(f"Unsafe SQL identifier: {name!r}")
    return name


def _require_id(model: ModelLike, action: str) -> Any:
    if model.id is None:
        raise PreconditionError(f"Cannot {action} an item without an 'id'")
    return model.id


class CrudDriver:
    """
    save(model) -> model, read(model) -> model | None, update(model) -> model | None,
    delete(model) -> bool, execute(sql, values) -> rows | QueryResult.
    """

    def __init__(
        self,
        executor: PoolExecutor,
        dialect: Dialect,
        *,
        insert_strategy: InsertStrategyEnum = InsertStrategyEnum.COLUMNS,
        logger: logging.Logger | None = None,
    ) -> None:
        if insert_strategy == InsertStrategyEnum.SET and not dialect.supports_set_insert:
            raise ValueError(
                f"Insert strategy 'set' is not supported by {dialect.product_type.value}"
            )
        self._executor = executor
        self._dialect = dialect
        self._insert_strategy = insert_strategy
        self._log = logger or _log

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def stats(self) -> dict[str, int]:
        return self._executor.pool.stats()

    def close(self) -> None:
        """Close idle pooled connections."""
        self._executor.pool.dispose()

    async def execute(self, sql: str, values: list | tuple | None = None) -> Any:
        """Run a raw parameterized statement; no translation or rehydration."""
        return await self._executor.execute(sql, values)

    async def save(self, model: ModelLike) -> ModelLike | None:
        if not model.valid():
            raise ModelValidationError(model.validate().error)

        table = _validate_identifier(model.table_name)
        body = model.body()
        if body.get("id") is None:
            body.pop("id", None)
        columns = [_validate_identifier(k) for k in body]
        values = encode_values(body.values())

        sql = self._insert_sql(table, columns)
        result = await self._executor.execute(sql, values)

        if "id" in body:
            new_id = body["id"]
        elif isinstance(result, QueryResult):
            new_id = result.last_insert_id
        else:
            new_id = result[0]["id"] if result else None
        if new_id is None:
            raise QueryError(f"INSERT into {table} did not report an 'id'")

        model.body({"id": new_id})
        self._log.debug("Inserted %s id=%s", table, new_id)
        return await self.read(model)

    async def read(self, model: ModelLike) -> ModelLike | None:
        item_id = _require_id(model, "read")
        table = _validate_identifier(model.table_name)
        p = self._dialect.placeholder

        rows = await self._executor.execute(
            f"SELECT * FROM {table} WHERE id = {p}", [item_id]  # noqa: S608
        )
        if not rows or isinstance(rows, QueryResult):
            return None
        self._merge(model, rows[0])
        return model

    async def update(self, model: ModelLike) -> ModelLike | None:
        item_id = _require_id(model, "update")
        table = _validate_identifier(model.table_name)
        p = self._dialect.placeholder

        updates: list[str] = []
        values: list[Any] = []
        for key, value in model.body().items():
            if key == "id":
                continue
            updates.append(f"{_validate_identifier(key)} = {p}")
            values.append(encode_value(value))

        if updates:
            values.append(item_id)
            sql = f"UPDATE {table} SET {', '.join(updates)} WHERE id = {p}"  # noqa: S608
            await self._executor.execute(sql, values)

        return await self.read(model)

    async def delete(self, model: ModelLike) -> bool:
        item_id = _require_id(model, "delete")
        table = _validate_identifier(model.table_name)
        p = self._dialect.placeholder

        result = await self._executor.execute(
            f"DELETE FROM {table} WHERE id = {p}", [item_id]  # noqa: S608
        )
        return isinstance(result, QueryResult) and result.rowcount > 0

    async def array_append(
        self, model: ModelLike, column: str, value: Any
    ) -> ModelLike | None:
        """Append *value* to array *column* unless it is already present."""
        self._require_arrays("array_append")
        item_id = _require_id(model, "update")
        table = _validate_identifier(model.table_name)
        col = _validate_identifier(column)
        p = self._dialect.placeholder

        sql = (
            f"UPDATE {table} SET {col} = array_append({col}, {p}) "  # noqa: S608
            f"WHERE id = {p} AND {p} <> ALL(COALESCE({col}, '{{}}')) RETURNING *"
        )
        rows = await self._executor.execute(sql, [value, item_id, value])
        return await self._merge_returned(model, rows)

    async def array_remove(
        self, model: ModelLike, column: str, value: Any
    ) -> ModelLike | None:
        """Remove every occurrence of *value* from array *column*."""
        self._require_arrays("array_remove")
        item_id = _require_id(model, "update")
        table = _validate_identifier(model.table_name)
        col = _validate_identifier(column)
        p = self._dialect.placeholder

        sql = (
            f"UPDATE {table} SET {col} = array_remove({col}, {p}) "  # noqa: S608
            f"WHERE id = {p} RETURNING *"
        )
        rows = await self._executor.execute(sql, [value, item_id])
        return await self._merge_returned(model, rows)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _insert_sql(self, table: str, columns: list[str]) -> str:
        p = self._dialect.placeholder
        if self._insert_strategy == InsertStrategyEnum.SET:
            if not columns:
                raise ValueError(f"Cannot insert an empty row into {table}")
            assignments = ", ".join(f"{c} = {p}" for c in columns)
            sql = f"INSERT INTO {table} SET {assignments}"  # noqa: S608
        elif columns:
            sql = (
                f"INSERT INTO {table} ({', '.join(columns)}) "  # noqa: S608
                f"VALUES ({self._dialect.placeholders(len(columns))})"
            )
        else:
            sql = f"INSERT INTO {table} {self._dialect.empty_insert}"  # noqa: S608
        if self._dialect.insert_returning_id:
            sql += " RETURNING id"
        return sql

    def _require_arrays(self, op: str) -> None:
        if not self._dialect.supports_arrays:
            raise UnsupportedOperationError(
                f"{op} needs native array columns; "
                f"{self._dialect.product_type.value} has none"
            )

    async def _merge_returned(
        self, model: ModelLike, rows: list[Row] | QueryResult
    ) -> ModelLike | None:
        if rows and not isinstance(rows, QueryResult):
            self._merge(model, rows[0])
            return model
        # guard rejected the update (value already present) or the row is gone
        return await self.read(model)

    def _merge(self, model: ModelLike, row: Row) -> None:
        model.body(decode_row(row, model.json_fields, model.body()))
