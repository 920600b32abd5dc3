"""
The deserialization bridge.

Converts a Value subtree into whatever a shape describes. Conversion is
fail-fast: the first failing field or element along a path raises, and
the error names the full path to it.

Matching rules:
- Record fields are looked up exactly, then case-insensitively. Unknown
  keys are ignored unless strict mode is on.
- Enumeration variants are matched case-insensitively, after passing
  both sides through the optional case strategy.
- Scalars are coerced only when the value's kind is not already the one
  requested (see strata.value coercion rules).
- A scalar where a sequence is expected is a one-element sequence; a
  table whose keys are exactly the indices 0 to n-1 is a sequence in
  index order. Gaps are an error.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import strata.de._derive as _derive
import strata.de._shapes as shapes
import strata.errors as errors
import strata.path as path
import strata.value as value

CaseStrategy: _typing.TypeAlias = _typing.Callable[[str], str]

_SCALAR_COERCIONS: dict[shapes.ScalarKind, _typing.Callable[[value.Value], _typing.Any]] = {
    shapes.ScalarKind.BOOL: value.to_bool,
    shapes.ScalarKind.INT: value.to_int,
    shapes.ScalarKind.FLOAT: value.to_float,
    shapes.ScalarKind.STR: value.to_str,
}


def _invalid_type(
    node: value.Value,
    shape: shapes.Shape,
    at: path.Path,
) -> errors.DeserializationError:
    return errors.DeserializationError(
        f"invalid type: {node.describe()}, expected {shape.expecting()}",
        at,
        node.origin,
    )


def _index_list(entries: _abc.Mapping[str, _typing.Any]) -> str:
    keys = sorted(entries, key=lambda key: (len(key), key))
    shown = ", ".join(keys[:5])
    return f"[{shown}, ...]" if len(keys) > 5 else f"[{shown}]"


class Deserializer:
    """
    Converts Values into targets.

    Args:
        strict: Reject table keys that a record does not declare.
        case_strategy: Applied to enumeration variant names and inputs
            before their case-insensitive comparison.

    Example:
        >>> Deserializer().deserialize(Value.from_python({"port": "8080"}), Server)
        Server(port=8080)
    """

    def __init__(
        self,
        *,
        strict: bool = False,
        case_strategy: CaseStrategy | None = None,
    ) -> None:
        self.strict = strict
        self.case_strategy = case_strategy

    def deserialize(
        self,
        tree: value.Value,
        target: _typing.Any,
        at: path.Path | None = None,
    ) -> _typing.Any:
        """
        Convert ``tree`` into ``target``.

        Args:
            tree: The Value to convert.
            target: A Shape or anything ``shape_of`` understands.
            at: Where ``tree`` lives in the full configuration, used to
                prefix error paths.

        Raises:
            DeserializationError, MissingFieldError, UnknownFieldError: On
                the first conversion failure.
            TypeError: If no shape can be derived for ``target``.
        """
        shape = _derive.shape_of(target)
        return self._convert(tree, shape, at if at is not None else path.Path.root())

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _convert(self, node: value.Value, shape: shapes.Shape, at: path.Path) -> _typing.Any:
        if isinstance(shape, shapes.Raw):
            return node.copy()
        if isinstance(shape, shapes.Dynamic):
            return node.to_python()
        if isinstance(shape, shapes.Optional):
            if node.is_nil:
                return None
            return self._convert(node, shape.inner, at)
        if isinstance(shape, shapes.Scalar):
            return self._scalar(node, shape, at)
        if isinstance(shape, shapes.Sequence):
            return self._sequence(node, shape, at)
        if isinstance(shape, shapes.Tuple):
            return self._tuple(node, shape, at)
        if isinstance(shape, shapes.Mapping):
            return self._mapping(node, shape, at)
        if isinstance(shape, shapes.Record):
            return self._record(node, shape, at)
        if isinstance(shape, shapes.Enumeration):
            return self._enumeration(node, shape, at)
        raise TypeError(f"unknown shape type: {type(shape).__name__}")

    # =========================================================================
    # Scalars
    # =========================================================================

    def _scalar(self, node: value.Value, shape: shapes.Scalar, at: path.Path) -> _typing.Any:
        try:
            result = _SCALAR_COERCIONS[shape.kind](node)
        except errors.DeserializationError as e:
            raise e.at(at) from None
        if shape.build is None:
            return result
        try:
            return shape.build(result)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise errors.DeserializationError(
                f"invalid value: {node.describe()}, {e}", at, node.origin
            ) from e

    # =========================================================================
    # Sequences
    # =========================================================================

    def _elements(
        self,
        node: value.Value,
        shape: shapes.Shape,
        at: path.Path,
    ) -> list[value.Value]:
        if node.is_array:
            return list(node.data)
        if node.is_table:
            entries: dict[str, value.Value] = node.data
            if not entries:
                return []
            if all(key.isascii() and key.isdigit() for key in entries):
                indexed = {int(key): item for key, item in entries.items()}
                # Indices must be exactly 0..n-1
                if len(indexed) == len(entries) and max(indexed) == len(indexed) - 1:
                    return [indexed[position] for position in range(len(indexed))]
                raise errors.DeserializationError(
                    f"invalid sequence indices {_index_list(entries)}, "
                    f"expected 0 to {len(entries) - 1}",
                    at,
                    node.origin,
                )
            raise _invalid_type(node, shape, at)
        if node.is_nil:
            raise _invalid_type(node, shape, at)
        return [node]

    def _sequence(
        self,
        node: value.Value,
        shape: shapes.Sequence,
        at: path.Path,
    ) -> _typing.Any:
        elements = self._elements(node, shape, at)
        if shape.length is not None and len(elements) != shape.length:
            raise errors.DeserializationError(
                f"invalid length {len(elements)}, expected {shape.expecting()}",
                at,
                node.origin,
            )
        items = [
            self._convert(element, shape.item, at.child(position))
            for position, element in enumerate(elements)
        ]
        return shape.build(items)

    def _tuple(self, node: value.Value, shape: shapes.Tuple, at: path.Path) -> _typing.Any:
        elements = self._elements(node, shape, at)
        if len(elements) != len(shape.items):
            raise errors.DeserializationError(
                f"invalid length {len(elements)}, expected {shape.expecting()}",
                at,
                node.origin,
            )
        items = [
            self._convert(element, item_shape, at.child(position))
            for position, (element, item_shape) in enumerate(zip(elements, shape.items))
        ]
        return shape.build(items)

    # =========================================================================
    # Tables
    # =========================================================================

    def _mapping(self, node: value.Value, shape: shapes.Mapping, at: path.Path) -> _typing.Any:
        if not node.is_table:
            raise _invalid_type(node, shape, at)
        plain_keys = isinstance(shape.key, shapes.Scalar) and (
            shape.key.kind is shapes.ScalarKind.STR and shape.key.build is None
        )
        result: dict[_typing.Any, _typing.Any] = {}
        for key, item in node.data.items():
            child = at.child(key)
            if plain_keys:
                converted_key: _typing.Any = key
            else:
                converted_key = self._convert(value.Value.string(key, item.origin), shape.key, child)
            result[converted_key] = self._convert(item, shape.value, child)
        return shape.build(result)

    def _record(self, node: value.Value, shape: shapes.Record, at: path.Path) -> _typing.Any:
        if not node.is_table:
            raise _invalid_type(node, shape, at)

        entries: dict[str, value.Value] = node.data
        folded: dict[str, str] = {}
        for key in entries:
            folded.setdefault(key.casefold(), key)

        used: set[str] = set()
        data: dict[str, _typing.Any] = {}
        for field in shape.fields:
            key = field.key
            actual = key if key in entries else folded.get(key.casefold())
            item = entries.get(actual) if actual is not None else None
            if actual is not None:
                used.add(actual)

            absent = item is None or (
                item.is_nil and not field.required and not isinstance(field.shape, shapes.Optional)
            )
            if absent:
                if field.required:
                    if isinstance(field.shape, shapes.Optional):
                        data[field.name] = None
                        continue
                    raise errors.MissingFieldError(key, node.origin, at)
                if field.default is not shapes.MISSING:
                    data[field.name] = field.default
                elif field.default_factory is not None:
                    data[field.name] = field.default_factory()
                continue

            assert item is not None and actual is not None
            data[field.name] = self._convert(item, field.shape, at.child(actual))

        strict = shape.strict if shape.strict is not None else self.strict
        if strict:
            for key in entries:
                if key not in used:
                    raise errors.UnknownFieldError(
                        key,
                        node.origin,
                        at,
                        expected=[field.key for field in shape.fields],
                    )

        try:
            return shape.build(data)
        except errors.ConfigError:
            raise
        except (TypeError, ValueError) as e:
            raise errors.DeserializationError(
                f"invalid {shape.expecting()}: {e}", at, node.origin
            ) from e

    # =========================================================================
    # Enumerations
    # =========================================================================

    def _normalize(self, name: str) -> str:
        if self.case_strategy is not None:
            name = self.case_strategy(name)
        return name.casefold()

    def _variant(
        self,
        name: str,
        node: value.Value,
        shape: shapes.Enumeration,
        at: path.Path,
    ) -> shapes.Variant:
        wanted = self._normalize(name)
        for variant in shape.variants:
            if self._normalize(variant.name) == wanted:
                return variant
            if any(self._normalize(alias) == wanted for alias in variant.aliases):
                return variant
        allowed = ", ".join(f"`{variant}`" for variant in shape.variant_names)
        raise errors.DeserializationError(
            f"unknown variant `{name}` of enum {shape.name}, expected one of {allowed}",
            at,
            node.origin,
        )

    def _enumeration(
        self,
        node: value.Value,
        shape: shapes.Enumeration,
        at: path.Path,
    ) -> _typing.Any:
        if node.is_table and len(node.data) == 1:
            ((key, item),) = node.data.items()
            variant = self._variant(key, node, shape, at)
            if variant.payload is None:
                if item.is_nil or (item.is_table and not item.data):
                    return variant.make()
                raise errors.DeserializationError(
                    f"unit variant `{variant.name}` of enum {shape.name} takes no value",
                    at.child(key),
                    item.origin,
                )
            return variant.make(self._convert(item, variant.payload, at.child(key)))

        if node.is_table or node.is_array or node.is_nil:
            raise errors.DeserializationError(
                f"value of enum {shape.name} should be represented by either "
                "string or table with exactly one key",
                at,
                node.origin,
            )

        variant = self._variant(value.to_str(node), node, shape, at)
        if variant.payload is None:
            return variant.make()
        if isinstance(variant.payload, shapes.Optional):
            return variant.make(None)
        raise errors.DeserializationError(
            f"variant `{variant.name}` of enum {shape.name} requires a value",
            at,
            node.origin,
        )


def deserialize(
    tree: value.Value,
    target: _typing.Any,
    *,
    strict: bool = False,
    case_strategy: CaseStrategy | None = None,
) -> _typing.Any:
    """
    Convert ``tree`` into ``target`` with a one-off Deserializer.

    Example:
        >>> deserialize(Value.string("Active"), Status)
        <Status.Active: 1>
    """
    return Deserializer(strict=strict, case_strategy=case_strategy).deserialize(tree, target)
