"""
Body value encoding.

A body value is either scalar (bound as-is) or structured (dict, list, tuple),
which is stored as a JSON string and decoded again on read.
"""

import json
from collections.abc import Iterable, Mapping
from typing import Any

STRUCTURED_TYPES = (dict, list, tuple)


def is_structured(value: Any) -> bool:
    return isinstance(value, STRUCTURED_TYPES)


def encode_value(value: Any) -> Any:
    """JSON-encode structured values; pass scalars (None included) through."""
    if is_structured(value):
        return json.dumps(value, default=str)
    return value


def encode_values(values: Iterable[Any]) -> list[Any]:
    return [encode_value(v) for v in values]


def decode_row(
    row: Mapping[str, Any],
    json_fields: Iterable[str] = (),
    current: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Decode JSON text in *row* for structured columns.

    A column is structured when it is listed in *json_fields* or its value in
    *current* (the in-memory body before the read) is a dict/list/tuple. Values
    the driver already decoded (e.g. psycopg json/jsonb) are left alone.
    """
    fields = set(json_fields)
    if current:
        fields.update(k for k, v in current.items() if is_structured(v))

    out = dict(row)
    for key in fields:
        raw = out.get(key)
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        if not isinstance(raw, str):
            continue
        try:
            out[key] = json.loads(raw)
        except ValueError:
            pass  # plain text in a column that usually holds JSON
    return out
