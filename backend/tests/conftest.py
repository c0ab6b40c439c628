from collections.abc import Generator
from pathlib import Path

import pytest

from modeldb.engines.crud import CrudDriver
from tests.utils.models import create_sqlite_driver


@pytest.fixture
def sqlite_driver(tmp_path: Path) -> Generator[CrudDriver, None, None]:
    driver = create_sqlite_driver(tmp_path / "test.db")
    yield driver
    driver.close()
