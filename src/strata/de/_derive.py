"""
Deriving shapes from Python types.

The bridge only understands shapes. This module maps the types callers
usually write (builtins, typing generics, dataclasses, enums, pydantic
models) onto them so that ``deserialize(tree, MyConfig)`` works without
hand-written shapes. Types that implement ``__strata_shape__`` always
take precedence.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import datetime as _datetime
import decimal as _decimal
import enum as _enum
import pathlib as _pathlib
import types as _types
import typing as _typing

import pydantic as _pydantic

import strata.de._shapes as shapes
import strata.value as value

_SCALARS: dict[type, shapes.Scalar] = {
    bool: shapes.Scalar(shapes.ScalarKind.BOOL),
    int: shapes.Scalar(shapes.ScalarKind.INT),
    float: shapes.Scalar(shapes.ScalarKind.FLOAT),
    str: shapes.Scalar(shapes.ScalarKind.STR),
    _decimal.Decimal: shapes.Scalar(shapes.ScalarKind.STR, build=_decimal.Decimal),
    _datetime.datetime: shapes.Scalar(
        shapes.ScalarKind.STR, build=_datetime.datetime.fromisoformat
    ),
    _datetime.date: shapes.Scalar(shapes.ScalarKind.STR, build=_datetime.date.fromisoformat),
    _datetime.time: shapes.Scalar(shapes.ScalarKind.STR, build=_datetime.time.fromisoformat),
}

_SEQUENCE_ORIGINS: dict[_typing.Any, _typing.Callable[[list[_typing.Any]], _typing.Any]] = {
    list: list,
    _abc.Sequence: list,
    _abc.MutableSequence: list,
    _abc.Iterable: list,
    _abc.Collection: list,
    set: set,
    _abc.Set: frozenset,
    _abc.MutableSet: set,
    frozenset: frozenset,
}

_MAPPING_ORIGINS = (dict, _abc.Mapping, _abc.MutableMapping)

_UNION_TYPES: tuple[_typing.Any, ...] = (_typing.Union, _types.UnionType)

_cache: dict[_typing.Any, shapes.Shape] = {}


def shape_of(target: _typing.Any) -> shapes.Shape:
    """
    Return the shape describing ``target``.

    Args:
        target: A Shape, a type implementing ``__strata_shape__``, or a
            type/typing construct strata knows how to describe.

    Raises:
        TypeError: If no shape can be derived.
    """
    if isinstance(target, shapes.Shape):
        return target
    try:
        return _cache[target]
    except KeyError:
        pass
    except TypeError:
        # Unhashable typing construct; derive without caching
        return _derive(target)
    shape = _derive(target)
    _cache[target] = shape
    return shape


def _derive(target: _typing.Any) -> shapes.Shape:
    declared = getattr(target, "__strata_shape__", None)
    if declared is not None and callable(declared):
        shape = declared()
        if not isinstance(shape, shapes.Shape):
            raise TypeError(
                f"{target!r}.__strata_shape__() returned {type(shape).__name__}, not a Shape"
            )
        return shape

    if target is _typing.Any or target is object:
        return shapes.Dynamic()
    if target is value.Value:
        return shapes.Raw()
    if target in _SCALARS:
        return _SCALARS[target]

    origin = _typing.get_origin(target)
    args = _typing.get_args(target)

    if origin is _typing.Annotated:
        return shape_of(args[0])
    if origin in _UNION_TYPES:
        return _union(target, args)
    if origin is _typing.Literal:
        return _literal(args)
    if origin is not None:
        return _generic(target, origin, args)

    if isinstance(target, type):
        if issubclass(target, _enum.Enum):
            return _enumeration(target)
        if issubclass(target, _pydantic.BaseModel):
            return _pydantic_record(target)
        if _dataclasses.is_dataclass(target):
            return _dataclass_record(target)
        if issubclass(target, _pathlib.PurePath):
            return shapes.Scalar(shapes.ScalarKind.STR, build=target)
        if target in (list, tuple, set, frozenset):
            return shapes.Sequence(shapes.Dynamic(), build=target)
        if target is dict:
            return shapes.Mapping(shapes.Dynamic())
        for scalar_type, scalar in _SCALARS.items():
            # Subclasses of scalars (IntEnum handled above, NewType-like classes)
            if issubclass(target, scalar_type):
                return shapes.Scalar(scalar.kind, build=target)

    raise TypeError(f"cannot derive a configuration shape for {target!r}")


def _union(target: _typing.Any, args: tuple[_typing.Any, ...]) -> shapes.Shape:
    members = [arg for arg in args if arg is not type(None)]
    if len(members) == 1 and len(args) == 2:
        return shapes.Optional(shape_of(members[0]))
    raise TypeError(
        f"cannot derive a configuration shape for {target!r}: "
        "only unions with None are supported"
    )


def _literal(args: tuple[_typing.Any, ...]) -> shapes.Enumeration:
    return shapes.Enumeration(
        "literal",
        tuple(
            shapes.Variant(str(arg), build=lambda arg=arg: arg)
            for arg in args
        ),
    )


def _generic(
    target: _typing.Any,
    origin: _typing.Any,
    args: tuple[_typing.Any, ...],
) -> shapes.Shape:
    if origin is tuple:
        if not args:
            return shapes.Sequence(shapes.Dynamic(), build=tuple)
        if len(args) == 2 and args[1] is Ellipsis:
            return shapes.Sequence(shape_of(args[0]), build=tuple)
        if args == ((),):
            return shapes.Tuple(())
        return shapes.Tuple(tuple(shape_of(arg) for arg in args))
    if origin in _SEQUENCE_ORIGINS:
        item = shape_of(args[0]) if args else shapes.Dynamic()
        return shapes.Sequence(item, build=_SEQUENCE_ORIGINS[origin])
    if origin in _MAPPING_ORIGINS:
        if not args:
            return shapes.Mapping(shapes.Dynamic())
        return shapes.Mapping(shape_of(args[1]), key=shape_of(args[0]))
    raise TypeError(f"cannot derive a configuration shape for {target!r}")


def _enumeration(target: type[_enum.Enum]) -> shapes.Enumeration:
    variants = []
    for member in target:
        aliases: tuple[str, ...] = ()
        if isinstance(member.value, (str, int)) and not isinstance(member.value, bool):
            aliases = (str(member.value),)
        variants.append(
            shapes.Variant(member.name, build=lambda member=member: member, aliases=aliases)
        )
    return shapes.Enumeration(target.__name__, tuple(variants))


def _dataclass_record(target: type) -> shapes.Record:
    hints = _typing.get_type_hints(target, include_extras=True)
    fields = []
    for field in _dataclasses.fields(target):
        if not field.init:
            continue
        has_default = (
            field.default is not _dataclasses.MISSING
            or field.default_factory is not _dataclasses.MISSING
        )
        fields.append(
            shapes.Field(
                field.name,
                shape_of(hints.get(field.name, _typing.Any)),
                required=not has_default,
                alias=field.metadata.get("alias"),
            )
        )
    return shapes.Record(
        target.__name__,
        tuple(fields),
        build=lambda data: target(**data),
    )


def _pydantic_record(target: type[_pydantic.BaseModel]) -> shapes.Record:
    fields = []
    for name, info in target.model_fields.items():
        annotation = info.annotation if info.annotation is not None else _typing.Any
        # model_validate accepts the alias when one is declared
        key = info.alias or name
        fields.append(shapes.Field(key, shape_of(annotation), required=info.is_required()))
    strict = target.model_config.get("extra") == "forbid"
    return shapes.Record(
        target.__name__,
        tuple(fields),
        build=target.model_validate,
        strict=True if strict else None,
    )
