"""
Per-product SQL conventions used by the CRUD driver.

Each dialect uses exactly one placeholder style: the DB-API paramstyle of
its driver (pymysql/psycopg: ``%s``, sqlite3: ``?``).
"""

from pydantic import BaseModel, ConfigDict

from modeldb.core.config import ProductTypeEnum


class Dialect(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_type: ProductTypeEnum
    placeholder: str
    # INSERT needs "RETURNING id" to report the generated identity
    insert_returning_id: bool = False
    # native array columns (array_append / array_remove)
    supports_arrays: bool = False
    # INSERT INTO t SET a = ?, b = ?
    supports_set_insert: bool = False
    # INSERT of a row with no explicit columns
    empty_insert: str = "DEFAULT VALUES"

    def placeholders(self, n: int) -> str:
        return ", ".join([self.placeholder] * n)


MYSQL = Dialect(
    product_type=ProductTypeEnum.MYSQL,
    placeholder="%s",
    supports_set_insert=True,
    empty_insert="() VALUES ()",
)
POSTGRES = Dialect(
    product_type=ProductTypeEnum.POSTGRES,
    placeholder="%s",
    insert_returning_id=True,
    supports_arrays=True,
)
SQLITE = Dialect(product_type=ProductTypeEnum.SQLITE, placeholder="?")

_DIALECTS = {d.product_type: d for d in (MYSQL, POSTGRES, SQLITE)}


def get_dialect(product_type: ProductTypeEnum | str) -> Dialect:
    if isinstance(product_type, str):
        product_type = ProductTypeEnum(product_type)
    try:
        return _DIALECTS[product_type]
    except KeyError:
        raise ValueError(f"Unsupported product_type: {product_type}") from None
