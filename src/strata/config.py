"""
The Config aggregator.

A Config owns an ordered list of sources and a cached snapshot: the
merge of every source's tree, folded in registration order on top of an
empty table. Layers, lowest to highest precedence:

1. Defaults set with ``set_default``
2. Registered sources, in the order they were added
3. Overrides set with ``set_override``

The snapshot is built lazily on first access and replaced only when a
rebuild completes. A failed or cancelled build leaves the previous
snapshot in place.

Example:
    >>> config = (
    ...     Config()
    ...     .add_source(FileSource("config/app", required=False))
    ...     .add_source(EnvironmentSource("APP", separator="__"))
    ... )
    >>> config.build()
    >>> config.get_int("server.port")
    8080
"""

from __future__ import annotations

import logging as _logging
import typing as _typing

import strata.de as de
import strata.errors as errors
import strata.merging as merging
import strata.path as path
import strata.sources as sources
import strata.value as value

_logger = _logging.getLogger(__name__)

_T = _typing.TypeVar("_T")

DEFAULTS_ORIGIN = value.Origin("default")
OVERRIDES_ORIGIN = value.Origin("override")


class Config:
    """
    Layered configuration built from ordered sources.

    Args:
        key_order: INSERTION keeps table keys in the order sources produced
            them; SORTED makes every table iterate lexicographically,
            independent of source order.
        strict: Reject table keys that a target record does not declare
            when deserializing.
        case_strategy: Applied to enumeration variant names and inputs
            before they are compared.
    """

    def __init__(
        self,
        *,
        key_order: value.KeyOrder = value.KeyOrder.INSERTION,
        strict: bool = False,
        case_strategy: de.CaseStrategy | None = None,
    ) -> None:
        self.key_order = key_order
        self._sources: list[sources.AnySource] = []
        self._defaults = value.Value.table(origin=DEFAULTS_ORIGIN)
        self._overrides = value.Value.table(origin=OVERRIDES_ORIGIN)
        self._deserializer = de.Deserializer(strict=strict, case_strategy=case_strategy)
        self._snapshot: value.Value | None = None

    # =========================================================================
    # Sources
    # =========================================================================

    @property
    def sources(self) -> tuple[sources.AnySource, ...]:
        """Registered sources, in registration order."""
        return tuple(self._sources)

    def add_source(self, source: sources.AnySource) -> Config:
        """
        Register ``source`` above every source added before it.

        Returns:
            This Config, for chaining.
        """
        if not isinstance(source, (sources.Source, sources.AsyncSource)):
            raise TypeError(f"expected a Source, got {type(source).__name__}")
        self._sources.append(source)
        self._snapshot = None
        return self

    def remove_source(self, index: int) -> sources.AnySource:
        """Unregister and return the source at ``index``."""
        source = self._sources.pop(index)
        self._snapshot = None
        return source

    def set_default(self, key: path.Path | str, item: _typing.Any) -> Config:
        """
        Set ``key`` to ``item`` below every source.

        Returns:
            This Config, for chaining.
        """
        self._defaults.set(key, value.Value.from_python(item, DEFAULTS_ORIGIN))
        self._snapshot = None
        return self

    def set_override(self, key: path.Path | str, item: _typing.Any) -> Config:
        """
        Set ``key`` to ``item`` above every source.

        Returns:
            This Config, for chaining.
        """
        self._overrides.set(key, value.Value.from_python(item, OVERRIDES_ORIGIN))
        self._snapshot = None
        return self

    # =========================================================================
    # Building
    # =========================================================================

    def _collected(self, index: int, source: sources.AnySource, tree: value.Value) -> value.Value:
        if not tree.is_table:
            raise errors.SourceError(
                source.origin,
                f"expected a table, got {tree.describe()}",
                index,
            )
        _logger.debug("Collected source #%d (%s)", index, source.origin)
        return tree

    def _failed(
        self,
        index: int,
        source: sources.AnySource,
        error: Exception,
    ) -> errors.SourceError:
        if isinstance(error, errors.SourceError):
            return error.with_index(index)
        return errors.SourceError(source.origin, error, index)

    def _finish(self, trees: list[value.Value]) -> value.Value:
        result = merging.merge_all([self._defaults, *trees, self._overrides])
        if self.key_order is value.KeyOrder.SORTED:
            result = result.sorted()
        _logger.debug("Merged %d source(s)", len(trees))
        return result

    def _build(self) -> value.Value:
        trees: list[value.Value] = []
        for index, source in enumerate(self._sources):
            if isinstance(source, sources.AsyncSource):
                raise errors.SourceError(
                    source.origin,
                    "asynchronous source cannot be collected by build(); use build_async()",
                    index,
                )
            try:
                tree = source.collect()
            except Exception as e:
                raise self._failed(index, source, e) from e
            trees.append(self._collected(index, source, tree))
        return self._finish(trees)

    async def _build_async(self) -> value.Value:
        trees: list[value.Value] = []
        for index, source in enumerate(self._sources):
            try:
                if isinstance(source, sources.AsyncSource):
                    tree = await source.collect()
                else:
                    tree = source.collect()
            except Exception as e:
                raise self._failed(index, source, e) from e
            trees.append(self._collected(index, source, tree))
        return self._finish(trees)

    def build(self) -> None:
        """
        Collect every source in order and replace the snapshot.

        Raises:
            SourceError: The first source that failed, annotated with its
                registration index. The previous snapshot is kept.
        """
        self._snapshot = self._build()

    async def build_async(self) -> None:
        """
        Like ``build()``, awaiting asynchronous sources one at a time in
        registration order. Blocking sources are collected inline.

        Cancelling the call leaves the previous snapshot in place.
        """
        self._snapshot = await self._build_async()

    def refresh(self) -> None:
        """Rebuild from the current sources (same as ``build()``)."""
        self.build()

    async def refresh_async(self) -> None:
        """Rebuild from the current sources (same as ``build_async()``)."""
        await self.build_async()

    @property
    def is_built(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> value.Value:
        """
        The merged tree, built on first access.

        Do not mutate it; it is shared by every reader until the next
        rebuild.
        """
        if self._snapshot is None:
            self.build()
        assert self._snapshot is not None
        return self._snapshot

    # =========================================================================
    # Access
    # =========================================================================

    def get(self, key: path.Path | str) -> value.Value:
        """
        A copy of the node at ``key``.

        Changing the returned Value never affects the snapshot.

        Raises:
            NotFoundError: If the path does not exist.
            TypeMismatchError: If the path crosses a node of the wrong kind.
            PathSyntaxError: If ``key`` cannot be parsed.
        """
        return path.Path.coerce(key).evaluate(self.snapshot).copy()

    def try_get(self, key: path.Path | str, target: type[_T] | _typing.Any) -> _T:
        """
        Deserialize the node at ``key`` into ``target``.

        Errors are reported with paths relative to the configuration root.
        """
        location = path.Path.coerce(key)
        node = location.evaluate(self.snapshot)
        return _typing.cast(_T, self._deserializer.deserialize(node, target, location))

    def try_deserialize(self, target: type[_T] | _typing.Any) -> _T:
        """Deserialize the whole snapshot into ``target``."""
        return _typing.cast(_T, self._deserializer.deserialize(self.snapshot, target))

    def get_string(self, key: path.Path | str) -> str:
        return _typing.cast(str, self.try_get(key, str))

    def get_int(self, key: path.Path | str) -> int:
        return _typing.cast(int, self.try_get(key, int))

    def get_float(self, key: path.Path | str) -> float:
        return _typing.cast(float, self.try_get(key, float))

    def get_bool(self, key: path.Path | str) -> bool:
        return _typing.cast(bool, self.try_get(key, bool))

    def get_table(self, key: path.Path | str) -> dict[str, value.Value]:
        """The table at ``key`` as a dict of child nodes."""
        return _typing.cast(
            dict[str, value.Value],
            self.try_get(key, de.Mapping(de.Raw())),
        )

    def get_array(self, key: path.Path | str) -> list[value.Value]:
        """The array at ``key`` as a list of child nodes."""
        return _typing.cast(list[value.Value], self.try_get(key, de.Sequence(de.Raw())))

    def to_dict(self) -> dict[str, _typing.Any]:
        """The snapshot as plain Python data."""
        return _typing.cast(dict[str, _typing.Any], self.snapshot.to_python())

    def __repr__(self) -> str:
        return f"Config(sources={len(self._sources)}, built={self.is_built})"
