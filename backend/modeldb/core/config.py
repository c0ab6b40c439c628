"""
Driver settings, read from the environment (or a ``.env`` file).

Settings are read lazily (get_settings) so a bad environment never breaks an
import. ``Settings.db_config`` is ``None`` when the database section is incomplete;
the bootstrap treats that as "driver disabled" rather than a fatal error.
"""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProductTypeEnum(str, Enum):
    """Supported database product types (mysql, postgres, sqlite)."""

    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLITE = "sqlite"


class InsertStrategyEnum(str, Enum):
    """How save() lays out the INSERT statement."""

    COLUMNS = "columns"  # INSERT INTO t (a, b) VALUES (?, ?)
    SET = "set"  # INSERT INTO t SET a = ?, b = ? (MySQL only)


_DEFAULT_PORTS = {
    ProductTypeEnum.MYSQL: 3306,
    ProductTypeEnum.POSTGRES: 5432,
}


class DatabaseConfig(BaseModel):
    """Connection parameters for one pool."""

    product_type: ProductTypeEnum = ProductTypeEnum.MYSQL
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str = ""
    database: str
    max_connections: int = Field(
        default=1000,
        gt=0,
        validation_alias=AliasChoices("max_connections", "maxConnections"),
    )
    connect_timeout: int = 10
    statement_timeout_sec: float | None = None
    pool_max_age_sec: float = 600.0
    insert_strategy: InsertStrategyEnum = InsertStrategyEnum.COLUMNS

    @property
    def resolved_port(self) -> int | None:
        return self.port or _DEFAULT_PORTS.get(self.product_type)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "modeldb"
    LOG_LEVEL: str = "INFO"

    DB_PRODUCT_TYPE: ProductTypeEnum = ProductTypeEnum.MYSQL
    DB_HOST: str | None = None
    DB_PORT: int | None = None
    DB_USER: str | None = None
    DB_PASSWORD: str = ""
    DB_DATABASE: str | None = None
    DB_MAX_CONNECTIONS: int = 1000
    DB_CONNECT_TIMEOUT: int = 10
    # Per-statement timeout in seconds; None or 0 = no timeout
    DB_STATEMENT_TIMEOUT: float | None = None
    DB_POOL_MAX_AGE_SEC: float = 600.0
    DB_INSERT_STRATEGY: InsertStrategyEnum = InsertStrategyEnum.COLUMNS

    @property
    def db_config(self) -> DatabaseConfig | None:
        """Build the pool config, or None when required values are missing."""
        if not self.DB_DATABASE:
            return None
        if self.DB_PRODUCT_TYPE != ProductTypeEnum.SQLITE and not (
            self.DB_HOST and self.DB_USER
        ):
            return None
        data: dict[str, Any] = {
            "product_type": self.DB_PRODUCT_TYPE,
            "host": self.DB_HOST,
            "port": self.DB_PORT,
            "user": self.DB_USER,
            "password": self.DB_PASSWORD,
            "database": self.DB_DATABASE,
            "max_connections": self.DB_MAX_CONNECTIONS,
            "connect_timeout": self.DB_CONNECT_TIMEOUT,
            "statement_timeout_sec": self.DB_STATEMENT_TIMEOUT,
            "pool_max_age_sec": self.DB_POOL_MAX_AGE_SEC,
            "insert_strategy": self.DB_INSERT_STRATEGY,
        }
        return DatabaseConfig.model_validate(data)


def get_settings() -> Settings:
    """Read settings from the environment; raises pydantic ValidationError on bad values."""
    return Settings()  # type: ignore[call-arg]
