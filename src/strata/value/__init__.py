"""
Value: the configuration tree data model.

Example:
    >>> from strata.value import Value
    >>> tree = Value.from_python({"database": {"host": "a", "port": 5432}})
    >>> tree.get("database.port")
    Value(integer, 5432)
"""

from strata.value._coerce import (
    looks_like_float,
    looks_like_integer,
    parse_scalar,
    to_bool,
    to_float,
    to_int,
    to_str,
)
from strata.value._core import KeyOrder, Origin, Value, ValueKind, integer_kind

__all__ = [
    "KeyOrder",
    "Origin",
    "Value",
    "ValueKind",
    "integer_kind",
    "looks_like_float",
    "looks_like_integer",
    "parse_scalar",
    "to_bool",
    "to_float",
    "to_int",
    "to_str",
]
