"""
The merge algebra for configuration trees.

merge(base, overlay) combines two trees:

- Table + Table: keys are unioned. A key present on both sides is merged
  recursively; a key present on one side is copied with its origin.
- Anything else: the overlay replaces the base for that whole subtree,
  origin included.

Arrays are replaced, not concatenated:

    >>> merge(Value.from_python({"l": [1, 2]}), Value.from_python({"l": [3]}))
    Value(table, {'l': Value(array, [Value(integer, 3)])})

Folding merge over sources in registration order is deterministic: it is
idempotent on unchanged inputs and associative, but not commutative.
"""

from __future__ import annotations

import typing as _typing

import strata.value as value


def merge(base: value.Value, overlay: value.Value) -> value.Value:
    """
    Merge ``overlay`` on top of ``base``.

    Neither input is modified; the result shares no mutable state with
    them.

    Args:
        base: The lower-precedence tree.
        overlay: The higher-precedence tree.

    Returns:
        New merged tree.
    """
    if not (base.is_table and overlay.is_table):
        return overlay.copy()

    upper: dict[str, value.Value] = overlay.data
    result: dict[str, value.Value] = {}
    for key, item in base.data.items():
        result[key] = merge(item, upper[key]) if key in upper else item.copy()
    for key, item in upper.items():
        if key not in result:
            result[key] = item.copy()
    return value.Value.table(result, overlay.origin if upper else base.origin)


def merge_all(
    trees: _typing.Iterable[value.Value],
    origin: value.Origin | None = None,
) -> value.Value:
    """
    Fold ``merge`` over ``trees`` left to right, starting from an empty table.

    Later trees take precedence over earlier ones.
    """
    result = value.Value.table(origin=origin)
    for tree in trees:
        result = merge(result, tree)
    return result
