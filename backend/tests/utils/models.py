"""Test models and an SQLite-backed driver."""

import sqlite3
from pathlib import Path

from pydantic import BaseModel

from modeldb.core.config import DatabaseConfig, ProductTypeEnum
from modeldb.driver import create_driver
from modeldb.engines.crud import CrudDriver
from modeldb.models import Model

USERS_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    firstname TEXT,
    lastname TEXT,
    favorites TEXT
)
"""


class UserSchema(BaseModel):
    firstname: str
    lastname: str | None = None
    favorites: list | None = None


class User(Model):
    type = "user"
    json_fields = frozenset({"favorites"})


class StrictUser(User):
    schema = UserSchema


class Person(Model):
    type = "person"
    table = "people"


def sqlite_config(db_path: Path, **overrides) -> DatabaseConfig:
    data = {
        "product_type": ProductTypeEnum.SQLITE,
        "database": str(db_path),
        "max_connections": 10,
    }
    data.update(overrides)
    return DatabaseConfig.model_validate(data)


def create_sqlite_driver(db_path: Path, **overrides) -> CrudDriver:
    """Create the users table in *db_path* and return a driver for it."""
    conn = sqlite3.connect(db_path)
    try:
        conn.execute(USERS_DDL)
        conn.commit()
    finally:
        conn.close()
    return create_driver(sqlite_config(db_path, **overrides))
