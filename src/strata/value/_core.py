"""
The dynamically-typed configuration tree.

A Value is a closed tagged union: its ValueKind says which payload it
carries and only the matching payload type is ever stored. Every node,
leaf or container, carries the Origin of the source that produced it.
Origins are diagnostics only and never take part in equality.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import datetime as _datetime
import enum as _enum
import typing as _typing

if _typing.TYPE_CHECKING:
    import strata.path as _path

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_I128_MIN = -(2**127)
_I128_MAX = 2**127 - 1
_U128_MAX = 2**128 - 1


@_dataclasses.dataclass(frozen=True, slots=True)
class Origin:
    """
    Where a value came from.

    Attributes:
        label: Source description: a file path, "environment", "override", ...
        line: 1-indexed line inside the source, when the decoder knows it.
        column: 1-indexed column inside the source, when known.
    """

    label: str
    line: int | None = None
    column: int | None = None

    def at(self, line: int, column: int | None = None) -> Origin:
        """Return the same origin pointing at a position inside it."""
        return Origin(self.label, line, column)

    def __str__(self) -> str:
        if self.line is None:
            return self.label
        if self.column is None:
            return f"{self.label}:{self.line}"
        return f"{self.label}:{self.line}:{self.column}"


class ValueKind(_enum.Enum):
    """The variants a Value can take."""

    NIL = "nil"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    INTEGER_128 = "i128"
    UNSIGNED_128 = "u128"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    TABLE = "table"

    @property
    def is_integer(self) -> bool:
        return self in (ValueKind.INTEGER, ValueKind.INTEGER_128, ValueKind.UNSIGNED_128)

    @property
    def is_container(self) -> bool:
        return self in (ValueKind.ARRAY, ValueKind.TABLE)

    @property
    def family(self) -> ValueKind:
        """Kind used for equality: the three integer widths compare as one."""
        return ValueKind.INTEGER if self.is_integer else self


class KeyOrder(_enum.Enum):
    """
    Table key ordering mode.

    INSERTION keeps keys in the order sources produced them. SORTED is the
    unordered mode: iteration order is lexicographic and therefore does not
    depend on which source introduced a key first.
    """

    INSERTION = "insertion"
    SORTED = "sorted"


def integer_kind(number: int) -> ValueKind:
    """
    Pick the narrowest integer kind that holds ``number``.

    Raises:
        ValueError: If the number does not fit in 128 bits.
    """
    if _I64_MIN <= number <= _I64_MAX:
        return ValueKind.INTEGER
    if _I128_MIN <= number <= _I128_MAX:
        return ValueKind.INTEGER_128
    if 0 <= number <= _U128_MAX:
        return ValueKind.UNSIGNED_128
    raise ValueError(f"integer {number} does not fit in 128 bits")


_PAYLOAD_TYPES: dict[ValueKind, type | tuple[type, ...]] = {
    ValueKind.NIL: type(None),
    ValueKind.BOOLEAN: bool,
    ValueKind.INTEGER: int,
    ValueKind.INTEGER_128: int,
    ValueKind.UNSIGNED_128: int,
    ValueKind.FLOAT: float,
    ValueKind.STRING: str,
    ValueKind.ARRAY: list,
    ValueKind.TABLE: dict,
}


class Value:
    """
    A node of the configuration tree.

    Build values with the factory classmethods (``Value.table(...)``,
    ``Value.string(...)``) or from plain Python data with
    ``Value.from_python(...)``.

    Example:
        >>> v = Value.from_python({"server": {"port": 8080}})
        >>> v.get("server.port")
        Value(integer, 8080)
    """

    __slots__ = ("_kind", "_data", "origin")

    def __init__(
        self,
        kind: ValueKind,
        data: _typing.Any = None,
        origin: Origin | None = None,
    ) -> None:
        expected = _PAYLOAD_TYPES[kind]
        if kind is ValueKind.FLOAT and isinstance(data, int) and not isinstance(data, bool):
            data = float(data)
        if not isinstance(data, expected) or (
            kind.is_integer and isinstance(data, bool)
        ):
            raise TypeError(
                f"{kind.value} value cannot hold {type(data).__name__} payload"
            )
        if kind.is_integer and integer_kind(data) is not kind:
            kind = integer_kind(data)
        self._kind = kind
        self._data = data
        self.origin = origin

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def nil(cls, origin: Origin | None = None) -> Value:
        return cls(ValueKind.NIL, None, origin)

    @classmethod
    def boolean(cls, flag: bool, origin: Origin | None = None) -> Value:
        return cls(ValueKind.BOOLEAN, flag, origin)

    @classmethod
    def integer(cls, number: int, origin: Origin | None = None) -> Value:
        return cls(integer_kind(number), number, origin)

    @classmethod
    def floating(cls, number: float, origin: Origin | None = None) -> Value:
        return cls(ValueKind.FLOAT, number, origin)

    @classmethod
    def string(cls, text: str, origin: Origin | None = None) -> Value:
        return cls(ValueKind.STRING, text, origin)

    @classmethod
    def array(
        cls,
        items: _abc.Iterable[Value] = (),
        origin: Origin | None = None,
    ) -> Value:
        return cls(ValueKind.ARRAY, list(items), origin)

    @classmethod
    def table(
        cls,
        entries: _abc.Mapping[str, Value] | None = None,
        origin: Origin | None = None,
    ) -> Value:
        return cls(ValueKind.TABLE, dict(entries or {}), origin)

    @classmethod
    def from_python(cls, obj: _typing.Any, origin: Origin | None = None) -> Value:
        """
        Convert plain Python data into a Value tree.

        Mappings become tables (keys are converted with ``str``), lists and
        tuples become arrays, dates and times become ISO-8601 strings.
        Existing Value nodes are copied and keep their own origin unless
        they have none.

        Args:
            obj: Data to convert.
            origin: Origin stamped on every created node.

        Raises:
            TypeError: If ``obj`` contains an unsupported type.
        """
        if isinstance(obj, Value):
            copied = obj.copy()
            if copied.origin is None and origin is not None:
                copied._stamp(origin)
            return copied
        if obj is None:
            return cls.nil(origin)
        if isinstance(obj, bool):
            return cls.boolean(obj, origin)
        if isinstance(obj, int):
            return cls.integer(obj, origin)
        if isinstance(obj, float):
            return cls.floating(obj, origin)
        if isinstance(obj, str):
            return cls.string(obj, origin)
        if isinstance(obj, _enum.Enum):
            return cls.from_python(obj.value, origin)
        if isinstance(obj, (_datetime.datetime, _datetime.date, _datetime.time)):
            return cls.string(obj.isoformat(), origin)
        if isinstance(obj, _abc.Mapping):
            return cls.table(
                {str(key): cls.from_python(item, origin) for key, item in obj.items()},
                origin,
            )
        if isinstance(obj, (list, tuple, _abc.Set)):
            return cls.array((cls.from_python(item, origin) for item in obj), origin)
        raise TypeError(f"cannot convert {type(obj).__name__} to a configuration value")

    # =========================================================================
    # Inspection
    # =========================================================================

    @property
    def kind(self) -> ValueKind:
        return self._kind

    @property
    def data(self) -> _typing.Any:
        """
        The raw payload: None, bool, int, float, str, list[Value] or
        dict[str, Value] depending on the kind.
        """
        return self._data

    @property
    def is_nil(self) -> bool:
        return self._kind is ValueKind.NIL

    @property
    def is_table(self) -> bool:
        return self._kind is ValueKind.TABLE

    @property
    def is_array(self) -> bool:
        return self._kind is ValueKind.ARRAY

    def describe(self) -> str:
        """Short description of this value for error messages."""
        kind = self._kind
        if kind is ValueKind.NIL:
            return "unit value"
        if kind is ValueKind.BOOLEAN:
            return f"boolean `{'true' if self._data else 'false'}`"
        if kind.is_integer:
            return f"integer `{self._data}`"
        if kind is ValueKind.FLOAT:
            return f"floating point `{self._data}`"
        if kind is ValueKind.STRING:
            return f'string "{self._data}"'
        if kind is ValueKind.ARRAY:
            return "sequence"
        return "map"

    # =========================================================================
    # Conversion
    # =========================================================================

    def to_python(self) -> _typing.Any:
        """Convert back to plain Python data (dicts, lists and scalars)."""
        if self._kind is ValueKind.TABLE:
            return {key: item.to_python() for key, item in self._data.items()}
        if self._kind is ValueKind.ARRAY:
            return [item.to_python() for item in self._data]
        return self._data

    def copy(self) -> Value:
        """Deep copy; origins are shared (they are immutable)."""
        if self._kind is ValueKind.TABLE:
            data: _typing.Any = {key: item.copy() for key, item in self._data.items()}
        elif self._kind is ValueKind.ARRAY:
            data = [item.copy() for item in self._data]
        else:
            data = self._data
        return Value(self._kind, data, self.origin)

    def sorted(self) -> Value:
        """Deep copy with every table's keys in lexicographic order."""
        if self._kind is ValueKind.TABLE:
            return Value.table(
                {key: self._data[key].sorted() for key in sorted(self._data)},
                self.origin,
            )
        if self._kind is ValueKind.ARRAY:
            return Value.array((item.sorted() for item in self._data), self.origin)
        return self.copy()

    def _stamp(self, origin: Origin) -> None:
        """Set ``origin`` on this node and every descendant without one."""
        if self.origin is None:
            self.origin = origin
        if self._kind is ValueKind.TABLE:
            children: _abc.Iterable[Value] = self._data.values()
        elif self._kind is ValueKind.ARRAY:
            children = self._data
        else:
            return
        for child in children:
            child._stamp(origin)

    # =========================================================================
    # Path access
    # =========================================================================

    def get(self, path: _path.Path | str) -> Value | None:
        """
        Look up a descendant, returning None instead of raising.

        Missing keys, out-of-range indices and wrong container kinds all
        produce None. Use ``strata.path.Path.evaluate`` for diagnostics.

        Raises:
            PathSyntaxError: If ``path`` is a string that cannot be parsed.
        """
        import strata.errors as errors
        import strata.path as path_mod

        parsed = path_mod.Path.coerce(path)
        try:
            return parsed.evaluate(self)
        except (errors.NotFoundError, errors.TypeMismatchError):
            return None

    def set(self, path: _path.Path | str, value: _typing.Any) -> None:
        """
        Store ``value`` at ``path``, creating containers along the way.

        Missing intermediate tables and arrays are created; a non-container
        node in the way is replaced; arrays are padded with nil values when
        the index lies past their end, by at most ``MAX_PADDING`` elements
        (``ValueError`` beyond that). Plain Python data is converted with
        ``Value.from_python``.
        """
        import strata.path as path_mod

        path_mod.Path.coerce(path).assign(self, value)

    def _replace_with(self, other: Value) -> None:
        """Turn this node into ``other`` in place (used for the root)."""
        self._kind = other._kind
        self._data = other._data
        self.origin = other.origin

    # =========================================================================
    # Dunder
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._kind.family is other._kind.family and bool(self._data == other._data)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self._kind is ValueKind.NIL:
            return "Value(nil)"
        return f"Value({self._kind.value}, {self._data!r})"
