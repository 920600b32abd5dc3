"""
Environment variable source.

Variables are mapped onto paths by stripping a prefix and splitting the
rest of the name on a separator:

    APP__SERVER__PORT=8080   (prefix="APP", separator="__")
    -> server.port = "8080"

All-digit segments stay table keys: ``APP__HOSTS__0=a`` and
``APP__HOSTS__1=b`` build ``hosts = {"0": "a", "1": "b"}``, which the
deserialization bridge reads back as the sequence ``["a", "b"]``.

Values stay strings unless ``try_parsing`` is set. Reconciling a string
with the type the caller finally asks for is the deserialization
bridge's job, not this source's.

This module is the only place strata reads the process environment.
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import os as _os
import typing as _typing

import strata.path as path
import strata.sources.base as base
import strata.value as value

_logger = _logging.getLogger(__name__)

CaseStrategy: _typing.TypeAlias = _typing.Callable[[str], str]


class EnvironmentSource(base.Source):
    """
    Configuration read from environment variables.

    Args:
        prefix: Only variables starting with ``prefix + prefix_separator``
            are kept (matched case-insensitively unless ``case_sensitive``).
        separator: Splits the remaining name into path segments. Without
            one, every variable is a single top-level key.
        prefix_separator: Separator between the prefix and the name.
            Defaults to ``separator``, or ``"_"`` when that is unset.
        list_separator: Split values containing it into arrays of strings.
        list_parse_keys: When given, only these keys (dotted paths, after
            prefix stripping) are split on ``list_separator``, and they are
            always arrays, even with a single element.
        try_parsing: Parse booleans, integers and floats instead of keeping
            raw strings.
        ignore_empty: Treat empty values as unset.
        keep_prefix: Keep the prefix as the first key segment.
        case_sensitive: Keep key case instead of lower-casing.
        convert_case: Strategy applied to each key segment (e.g. to turn
            ``max_conn`` into ``max-conn``).
        environ: Variables to read instead of ``os.environ``.
        required: Accepted for symmetry; reading the environment cannot fail.
    """

    default_label = "environment"

    def __init__(
        self,
        prefix: str | None = None,
        *,
        separator: str | None = None,
        prefix_separator: str | None = None,
        list_separator: str | None = None,
        list_parse_keys: _abc.Iterable[str] | None = None,
        try_parsing: bool = False,
        ignore_empty: bool = False,
        keep_prefix: bool = False,
        case_sensitive: bool = False,
        convert_case: CaseStrategy | None = None,
        environ: _abc.Mapping[str, str] | None = None,
        required: bool = True,
    ) -> None:
        super().__init__(required=required)
        if separator == "":
            raise ValueError("separator must not be empty")
        self.prefix = prefix
        self.separator = separator
        self.prefix_separator = prefix_separator
        self.list_separator = list_separator
        self.list_parse_keys = (
            None
            if list_parse_keys is None
            else frozenset(key if case_sensitive else key.lower() for key in list_parse_keys)
        )
        self.try_parsing = try_parsing
        self.ignore_empty = ignore_empty
        self.keep_prefix = keep_prefix
        self.case_sensitive = case_sensitive
        self.convert_case = convert_case
        self.environ = environ

    def _fold(self, text: str) -> str:
        return text if self.case_sensitive else text.lower()

    def _prefix_pattern(self) -> str | None:
        if self.prefix is None:
            return None
        if self.prefix_separator is not None:
            joiner = self.prefix_separator
        elif self.separator is not None:
            joiner = self.separator
        else:
            joiner = "_"
        return self._fold(self.prefix + joiner)

    def _segments(self, name: str) -> list[str]:
        parts = name.split(self.separator) if self.separator else [name]
        if self.convert_case is None:
            return parts
        return [self.convert_case(part) for part in parts]

    def _leaf(self, key: str, raw: str) -> value.Value:
        origin = self.origin
        if self.list_separator is not None:
            if self.list_parse_keys is not None:
                split = key in self.list_parse_keys
            else:
                split = self.list_separator in raw
            if split:
                return value.Value.array(
                    (value.Value.string(item, origin) for item in raw.split(self.list_separator)),
                    origin,
                )
        if self.try_parsing:
            return value.Value.from_python(value.parse_scalar(raw), origin)
        return value.Value.string(raw, origin)

    def collect(self) -> value.Value:
        environ = self.environ if self.environ is not None else _os.environ
        pattern = self._prefix_pattern()
        tree = self._empty()

        for name, raw in sorted(environ.items()):
            if self.ignore_empty and raw == "":
                continue

            key = self._fold(name)
            kept = ""
            if pattern is not None:
                if not key.startswith(pattern):
                    continue
                key = key[len(pattern) :]
                if self.keep_prefix:
                    kept = pattern
            if not key:
                _logger.debug("Ignoring environment variable %s: no key after prefix", name)
                continue

            segments = self._segments(key)
            dotted = ".".join(segments)
            if kept:
                # The kept prefix is glued to the first key, not split off
                if self.convert_case is not None:
                    kept = self.convert_case(kept)
                segments[0] = kept + segments[0]
            path.Path([path.Key(segment) for segment in segments]).assign(
                tree, self._leaf(dotted, raw)
            )

        return tree
