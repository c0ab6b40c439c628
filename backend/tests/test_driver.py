"""Unit tests for driver bootstrap (init_driver / create_driver)."""

import asyncio
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from modeldb.core import config as config_module
from modeldb.core.config import Settings
from modeldb.driver import init_driver
from modeldb.engines.crud import CrudDriver
from tests.utils.models import USERS_DDL, User


def test_init_driver_without_config_logs_and_returns_none(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.ERROR):
        driver = init_driver(Settings(_env_file=None, DB_PRODUCT_TYPE="mysql"))
    assert driver is None
    assert "Can not init mysql, no valid config" in caplog.text


def test_init_driver_sqlite(tmp_path: Path) -> None:
    settings = Settings(
        _env_file=None,
        DB_PRODUCT_TYPE="sqlite",
        DB_DATABASE=str(tmp_path / "app.db"),
        DB_MAX_CONNECTIONS=3,
    )
    driver = init_driver(settings)
    assert isinstance(driver, CrudDriver)
    assert driver.stats()["max_connections"] == 3

    async def run() -> User | None:
        await driver.execute(USERS_DDL)
        return await driver.save(User({"firstname": "boot"}))

    user = asyncio.run(run())
    assert user is not None and user.data["firstname"] == "boot"
    driver.close()


@pytest.mark.parametrize(
    "overrides",
    [
        {"DB_MAX_CONNECTIONS": 0},
        {"DB_INSERT_STRATEGY": "set"},
    ],
)
def test_init_driver_invalid_sqlite_config_returns_none(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, overrides: dict
) -> None:
    settings = Settings(
        _env_file=None,
        DB_PRODUCT_TYPE="sqlite",
        DB_DATABASE=str(tmp_path / "app.db"),
        **overrides,
    )
    with caplog.at_level(logging.ERROR):
        assert init_driver(settings) is None
    assert "Can not init sqlite, no valid config" in caplog.text


def test_init_driver_unknown_product_in_environment_returns_none(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("DB_PRODUCT_TYPE", "oracle")
    monkeypatch.setenv("DB_DATABASE", "app")
    with caplog.at_level(logging.ERROR):
        assert init_driver() is None
    assert "no valid config" in caplog.text


def test_config_module_reads_environment_lazily(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_PRODUCT_TYPE", "oracle")
    assert not hasattr(config_module, "settings")
    with pytest.raises(ValidationError):
        config_module.get_settings()
