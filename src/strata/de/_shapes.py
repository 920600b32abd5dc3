"""
Shapes: what a deserialization target expects.

A target never exposes its type to the bridge. Instead it declares a
shape built from this closed set of variants, and the bridge converts a
Value into that shape:

- Scalar: a boolean, integer, float or string (optionally post-built,
  e.g. into a pathlib.Path)
- Optional: nil becomes None, anything else the inner shape
- Sequence: an array of one item shape (optionally of fixed length)
- Tuple: an array with one shape per position
- Mapping: a table with one value shape
- Record: a table with named fields
- Enumeration: a string naming a variant, or a single-key table selecting
  a data-carrying variant
- Raw: the Value itself
- Dynamic: plain Python data

Types take part by implementing the capability classmethod
``__strata_shape__`` (see Deserializable). Shapes for builtins,
dataclasses, enums and pydantic models are derived automatically.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import typing as _typing


# Helper function to reconstruct the MISSING singleton during unpickle
def _get_missing_singleton() -> _MissingType:
    """Return the MISSING singleton. Called by pickle to reconstruct."""
    return MISSING


class _MissingType:
    """Sentinel type marking a field without an explicit default."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"

    def __reduce__(self) -> tuple[_typing.Callable[[], _MissingType], tuple[()]]:
        """Pickle support: ensure singleton is preserved."""
        return (_get_missing_singleton, ())


MISSING = _MissingType()


class ScalarKind(_enum.Enum):
    BOOL = "a boolean"
    INT = "an integer"
    FLOAT = "a floating point number"
    STR = "a string"


@_dataclasses.dataclass(frozen=True)
class Shape:
    """Base class of all shapes."""

    def expecting(self) -> str:
        """What this shape expects, for error messages."""
        return "a value"


@_dataclasses.dataclass(frozen=True)
class Scalar(Shape):
    kind: ScalarKind
    build: _typing.Callable[[_typing.Any], _typing.Any] | None = None

    def expecting(self) -> str:
        return self.kind.value


@_dataclasses.dataclass(frozen=True)
class Optional(Shape):
    inner: Shape

    def expecting(self) -> str:
        return f"an optional {self.inner.expecting()}"


@_dataclasses.dataclass(frozen=True)
class Sequence(Shape):
    item: Shape
    length: int | None = None
    build: _typing.Callable[[list[_typing.Any]], _typing.Any] = list

    def expecting(self) -> str:
        if self.length is not None:
            return f"a sequence of {self.length} elements"
        return "a sequence"


@_dataclasses.dataclass(frozen=True)
class Tuple(Shape):
    items: tuple[Shape, ...]
    build: _typing.Callable[[list[_typing.Any]], _typing.Any] = tuple

    def expecting(self) -> str:
        return f"a tuple of size {len(self.items)}"


@_dataclasses.dataclass(frozen=True)
class Mapping(Shape):
    value: Shape
    key: Shape = Scalar(ScalarKind.STR)
    build: _typing.Callable[[dict[_typing.Any, _typing.Any]], _typing.Any] = dict

    def expecting(self) -> str:
        return "a map"


@_dataclasses.dataclass(frozen=True)
class Field:
    """
    A named record field.

    Attributes:
        name: Keyword passed to the record's build callable.
        shape: Shape of the field's value.
        required: Whether the field must be present. Optional fields that
            are absent take ``default``, ``default_factory()``, or are left
            out of the build call so the target applies its own default.
        default: Explicit default for an absent optional field.
        default_factory: Factory for an absent optional field.
        alias: Key looked up in the table, when it differs from ``name``.
    """

    name: str
    shape: Shape
    required: bool = True
    default: _typing.Any = MISSING
    default_factory: _typing.Callable[[], _typing.Any] | None = None
    alias: str | None = None

    @property
    def key(self) -> str:
        return self.alias if self.alias is not None else self.name


@_dataclasses.dataclass(frozen=True)
class Record(Shape):
    """
    A table with named fields.

    ``build`` receives a dict of field name to converted value. ``strict``
    overrides the bridge-wide unknown-key policy for this record only.
    """

    name: str
    fields: tuple[Field, ...]
    build: _typing.Callable[[dict[str, _typing.Any]], _typing.Any] = dict
    strict: bool | None = None

    def expecting(self) -> str:
        return f"struct {self.name}"


@_dataclasses.dataclass(frozen=True)
class Variant:
    """
    One variant of an enumeration.

    A unit variant (``payload`` is None) is built with ``build()``; a
    data-carrying variant with ``build(converted_payload)``. Without a
    build callable a unit variant yields its name and a data variant the
    pair ``(name, payload)``.
    """

    name: str
    payload: Shape | None = None
    build: _typing.Callable[..., _typing.Any] | None = None
    aliases: tuple[str, ...] = ()

    @property
    def is_unit(self) -> bool:
        return self.payload is None

    def make(self, *payload: _typing.Any) -> _typing.Any:
        if self.build is not None:
            return self.build(*payload)
        if self.payload is None:
            return self.name
        return (self.name, payload[0])


@_dataclasses.dataclass(frozen=True)
class Enumeration(Shape):
    name: str
    variants: tuple[Variant, ...]

    def expecting(self) -> str:
        return f"enum {self.name}"

    @property
    def variant_names(self) -> tuple[str, ...]:
        return tuple(variant.name for variant in self.variants)


@_dataclasses.dataclass(frozen=True)
class Raw(Shape):
    """The Value subtree itself, copied."""

    def expecting(self) -> str:
        return "any value"


@_dataclasses.dataclass(frozen=True)
class Dynamic(Shape):
    """Plain Python data (dicts, lists, scalars)."""

    def expecting(self) -> str:
        return "any value"


@_typing.runtime_checkable
class Deserializable(_typing.Protocol):
    """
    Capability implemented by types that declare their own shape.

    Example:
        >>> class Port(int):
        ...     @classmethod
        ...     def __strata_shape__(cls) -> Shape:
        ...         return Scalar(ScalarKind.INT, build=cls)
    """

    @classmethod
    def __strata_shape__(cls) -> Shape: ...
