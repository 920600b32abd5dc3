"""
Scalar coercion between value kinds.

Coercions are lossy-aware: a conversion that would silently drop
information (a fractional float to an integer, a boolean to a number)
is refused with a DeserializationError instead.

Rules:
- String "true"/"false" (any case) -> boolean
- Numeric-looking string -> integer or float
- Integer -> float (widening)
- Integral float -> integer
- Boolean, integer, float -> string
- Boolean never becomes a number, numbers never become booleans
"""

from __future__ import annotations

import re as _re
import typing as _typing

import strata.errors as errors
import strata.value._core as _core

_INTEGER_RE = _re.compile(r"[+-]?\d+")
_FLOAT_RE = _re.compile(
    r"[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|inf|infinity|nan)",
    _re.IGNORECASE,
)

Scalar: _typing.TypeAlias = "bool | int | float | str"


def _refuse(value: _core.Value, expected: str) -> errors.DeserializationError:
    return errors.DeserializationError(
        f"invalid type: {value.describe()}, expected {expected}",
        origin=value.origin,
    )


def looks_like_integer(text: str) -> bool:
    return _INTEGER_RE.fullmatch(text.strip()) is not None


def looks_like_float(text: str) -> bool:
    return _FLOAT_RE.fullmatch(text.strip()) is not None


def to_bool(value: _core.Value) -> bool:
    """Coerce to a boolean."""
    if value.kind is _core.ValueKind.BOOLEAN:
        return bool(value.data)
    if value.kind is _core.ValueKind.STRING:
        lowered = value.data.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise _refuse(value, "a boolean")


def to_int(value: _core.Value) -> int:
    """Coerce to an integer of any width."""
    kind = value.kind
    if kind.is_integer:
        return int(value.data)
    if kind is _core.ValueKind.FLOAT:
        if value.data.is_integer():
            return int(value.data)
    elif kind is _core.ValueKind.STRING:
        text = value.data.strip()
        if looks_like_integer(text):
            return int(text)
        if looks_like_float(text):
            number = float(text)
            if number.is_integer():
                return int(number)
    raise _refuse(value, "an integer")


def to_float(value: _core.Value) -> float:
    """Coerce to a float, widening integers."""
    kind = value.kind
    if kind is _core.ValueKind.FLOAT:
        return float(value.data)
    if kind.is_integer:
        return float(value.data)
    if kind is _core.ValueKind.STRING and looks_like_float(value.data):
        return float(value.data.strip())
    raise _refuse(value, "a floating point number")


def to_str(value: _core.Value) -> str:
    """Coerce a scalar to its string form."""
    kind = value.kind
    if kind is _core.ValueKind.STRING:
        return str(value.data)
    if kind is _core.ValueKind.BOOLEAN:
        return "true" if value.data else "false"
    if kind.is_integer or kind is _core.ValueKind.FLOAT:
        return str(value.data)
    raise _refuse(value, "a string")


def parse_scalar(text: str) -> Scalar:
    """
    Guess the scalar a raw string stands for.

    Used by sources that only ever see text (environment variables) when
    they are asked to parse. Booleans are tried first, then integers,
    then floats; anything else stays a string.
    """
    lowered = text.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if looks_like_integer(text):
        return int(text.strip())
    if looks_like_float(text) and lowered not in ("nan", "inf", "infinity", "+inf", "-inf"):
        return float(text.strip())
    return text
