"""
Base classes for configuration sources.

A source contributes one Value tree (a table) to a Config. Sources come
in two flavors:

- Source: ``collect()`` blocks the calling thread until data is ready.
- AsyncSource: ``collect()`` is a coroutine that suspends at its I/O
  boundary (file read, network fetch).

Both carry an ``origin`` (used to tag every value they produce) and a
``required`` flag. A source that is not required and cannot find its
input contributes an empty table instead of failing.
"""

from __future__ import annotations

import abc as _abc
import typing as _typing

import strata.value as value


class _SourceBase(_abc.ABC):
    """State shared by blocking and suspending sources."""

    #: Label used when the caller does not supply one.
    default_label: _typing.ClassVar[str] = "source"

    def __init__(
        self,
        *,
        required: bool = True,
        origin: value.Origin | str | None = None,
    ) -> None:
        self.required = required
        if origin is None:
            origin = self.default_label
        self._origin = origin if isinstance(origin, value.Origin) else value.Origin(origin)

    @property
    def origin(self) -> value.Origin:
        """Where this source's data comes from."""
        return self._origin

    def _empty(self) -> value.Value:
        """The contribution of a source with nothing to say."""
        return value.Value.table(origin=self._origin)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(origin={str(self._origin)!r}, required={self.required})"


class Source(_SourceBase):
    """
    A blocking source.

    Subclasses implement ``collect()``.
    """

    is_async: _typing.ClassVar[bool] = False

    @_abc.abstractmethod
    def collect(self) -> value.Value:
        """
        Produce this source's tree.

        Returns:
            A table Value.

        Raises:
            SourceError: If the data cannot be produced.
        """
        ...


class AsyncSource(_SourceBase):
    """
    A suspending source.

    Subclasses implement ``async def collect()``. A Config awaits async
    sources one at a time, in registration order.
    """

    is_async: _typing.ClassVar[bool] = True

    @_abc.abstractmethod
    async def collect(self) -> value.Value:
        """
        Produce this source's tree.

        Raises:
            SourceError: If the data cannot be produced.
        """
        ...


AnySource: _typing.TypeAlias = Source | AsyncSource
