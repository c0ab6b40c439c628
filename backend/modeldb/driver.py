"""
Driver bootstrap: build pool, executor and CRUD driver from settings.

A missing or invalid database config is not fatal: init_driver logs it and
returns None so the host application can run without the driver.
"""

import logging

from pydantic import ValidationError

from modeldb.core.config import DatabaseConfig, Settings, get_settings
from modeldb.core.pool import PoolManager
from modeldb.engines.crud import CrudDriver
from modeldb.engines.dialect import get_dialect
from modeldb.engines.executor import PoolExecutor

_log = logging.getLogger(__name__)


def create_driver(
    config: DatabaseConfig, *, logger: logging.Logger | None = None
) -> CrudDriver:
    pool = PoolManager(config)
    executor = PoolExecutor(pool, logger=logger)
    return CrudDriver(
        executor,
        get_dialect(config.product_type),
        insert_strategy=config.insert_strategy,
        logger=logger,
    )


def init_driver(
    settings: Settings | None = None, *, logger: logging.Logger | None = None
) -> CrudDriver | None:
    log = logger or _log
    product = "database"
    try:
        s = settings or get_settings()
        product = s.DB_PRODUCT_TYPE.value
        config = s.db_config
        if config is None:
            raise ValueError("required values are missing")
        driver = create_driver(config, logger=logger)
    except (ValidationError, ValueError) as e:
        log.error("Drivers: Can not init %s, no valid config: %s", product, e)
        return None
    log.info(
        "Drivers: %s driver ready (max %d connections)",
        config.product_type.value,
        config.max_connections,
    )
    return driver
