"""
Model base: an entity with a table name, an identity and a key-value body.

``ModelLike`` is the capability contract the CRUD driver consumes; ``Model``
is a ready-made implementation applications subclass::

    class User(Model):
        type = "user"                 # table "users"
        json_fields = frozenset({"favorites"})
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

if TYPE_CHECKING:
    from modeldb.engines.crud import CrudDriver


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    error: str | None = None


@runtime_checkable
class ModelLike(Protocol):
    """What the CRUD driver needs from a model."""

    json_fields: frozenset[str]

    @property
    def id(self) -> Any: ...

    @property
    def table_name(self) -> str: ...

    def valid(self) -> bool: ...

    def validate(self) -> ValidationResult: ...

    def body(self, partial: Mapping[str, Any] | None = None) -> dict[str, Any]: ...


class Model:
    type: ClassVar[str] = ""
    table: ClassVar[str | None] = None
    json_fields: ClassVar[frozenset[str]] = frozenset()
    # optional pydantic model the body must satisfy
    schema: ClassVar[type[BaseModel] | None] = None

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        driver: CrudDriver | None = None,
    ) -> None:
        self.data: dict[str, Any] = dict(data) if data else {}
        self.driver = driver

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data!r})"

    @property
    def id(self) -> Any:
        return self.data.get("id")

    @property
    def table_name(self) -> str:
        """Explicit ``table``, else ``type + "s"``."""
        if self.table:
            return self.table
        if not self.type:
            raise ValueError(f"{type(self).__name__} defines neither table nor type")
        return f"{self.type}s"

    def body(self, partial: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return a copy of the body, merging *partial* into it first when given."""
        if partial:
            self.data.update(partial)
        return dict(self.data)

    def validate(self) -> ValidationResult:
        if self.schema is None:
            return ValidationResult()
        try:
            self.schema.model_validate(self.data)
        except PydanticValidationError as e:
            msg = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            return ValidationResult(error=msg)
        return ValidationResult()

    def valid(self) -> bool:
        return self.validate().error is None

    # ------------------------------------------------------------------
    # Shortcuts through the bound driver
    # ------------------------------------------------------------------

    def _require_driver(self) -> CrudDriver:
        if self.driver is None:
            raise RuntimeError(f"{type(self).__name__} is not bound to a driver")
        return self.driver

    async def save(self) -> Model | None:
        return await self._require_driver().save(self)

    async def read(self) -> Model | None:
        return await self._require_driver().read(self)

    async def update(self) -> Model | None:
        return await self._require_driver().update(self)

    async def delete(self) -> bool:
        return await self._require_driver().delete(self)
