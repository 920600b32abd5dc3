"""In-memory source."""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import strata.sources.base as base
import strata.value as value


class MemorySource(base.Source):
    """
    Configuration supplied directly as a mapping or a Value.

    The data is converted once, at construction, so later changes to the
    caller's mapping are not observed. Collecting always succeeds and
    returns a fresh copy.

    Example:
        >>> MemorySource({"database": {"host": "localhost"}})
    """

    default_label = "memory"

    def __init__(
        self,
        data: _abc.Mapping[str, _typing.Any] | value.Value | None = None,
        *,
        origin: value.Origin | str | None = None,
    ) -> None:
        super().__init__(required=True, origin=origin)
        tree = value.Value.from_python({} if data is None else data, self.origin)
        if not tree.is_table:
            raise TypeError(f"memory source needs a mapping, got {tree.describe()}")
        self._tree = tree

    @property
    def tree(self) -> value.Value:
        return self._tree

    def set(self, key: str, item: _typing.Any) -> None:
        """Store ``item`` at path ``key`` inside this source."""
        self._tree.set(key, value.Value.from_python(item, self.origin))

    def collect(self) -> value.Value:
        return self._tree.copy()
