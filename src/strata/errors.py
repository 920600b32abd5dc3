"""
Error types raised by strata.

Every failure the library reports derives from ConfigError. The set is
closed: callers can handle configuration problems with a single
``except ConfigError`` and dispatch on the concrete subclass when they
need the details.

Error kinds:
- NotFoundError: a path addresses a key or index that does not exist
- TypeMismatchError: a path walks into a node of the wrong container kind
- PathSyntaxError: a path string could not be parsed
- SourceError: a source failed to produce data (I/O, decode, ...)
- MissingFieldError: a required record field is absent
- UnknownFieldError: a table carries a key the record does not declare
  (strict mode only)
- DeserializationError: a value could not be converted to the target shape

Errors that know where they happened render as
``<reason> for key `<path>```, mirroring how the path was written.
"""

from __future__ import annotations

import typing as _typing

if _typing.TYPE_CHECKING:
    import strata.path as _path
    import strata.value as _value


def _describe_origin(origin: _value.Origin | None) -> str:
    return f" (from {origin})" if origin is not None else ""


def _describe_path(path: _path.Path | None) -> str:
    if path is None or path.is_root:
        return ""
    return f" for key `{path}`"


class ConfigError(Exception):
    """Base class for all strata errors."""

    pass


class NotFoundError(ConfigError, KeyError):
    """A key or index addressed by a path does not exist."""

    def __init__(
        self,
        path: _path.Path,
        origin: _value.Origin | None = None,
    ) -> None:
        self.path = path
        self.origin = origin
        super().__init__(path)

    def __str__(self) -> str:
        return f"configuration property `{self.path}` not found{_describe_origin(self.origin)}"


class TypeMismatchError(ConfigError):
    """A path expected one container kind and found another."""

    def __init__(
        self,
        path: _path.Path,
        expected: str,
        found: str,
        origin: _value.Origin | None = None,
    ) -> None:
        self.path = path
        self.expected = expected
        self.found = found
        self.origin = origin
        super().__init__(
            f"invalid type: {found}, expected {expected}"
            f"{_describe_path(path)}{_describe_origin(origin)}"
        )


class PathSyntaxError(ConfigError, ValueError):
    """A path string is not valid path syntax."""

    def __init__(self, text: str, offset: int, message: str) -> None:
        self.text = text
        self.offset = offset
        self.message = message
        super().__init__(f"invalid path {text!r} at offset {offset}: {message}")


class SourceError(ConfigError):
    """
    A source could not produce its data.

    Attributes:
        origin: Origin label of the failing source.
        cause: The underlying exception (also chained as __cause__).
        index: Registration index of the source inside a Config, set when
            the error is raised from Config.build().
    """

    def __init__(
        self,
        origin: _value.Origin | str | None,
        cause: BaseException | str,
        index: int | None = None,
    ) -> None:
        self.origin = origin
        self.cause = cause
        self.index = index
        super().__init__(self._render())

    def _render(self) -> str:
        where = f" #{self.index}" if self.index is not None else ""
        origin = f" `{self.origin}`" if self.origin is not None else ""
        return f"source{where}{origin} failed: {self.cause}"

    def with_index(self, index: int) -> SourceError:
        """Return a copy of this error annotated with a source index."""
        error = SourceError(self.origin, self.cause, index)
        error.__cause__ = self.__cause__ or (
            self.cause if isinstance(self.cause, BaseException) else None
        )
        return error


class MissingFieldError(ConfigError):
    """A required record field has no value."""

    def __init__(
        self,
        field: str,
        origin: _value.Origin | None = None,
        path: _path.Path | None = None,
    ) -> None:
        self.field = field
        self.origin = origin
        self.path = path
        super().__init__(
            f"missing field `{field}`{_describe_path(path)}{_describe_origin(origin)}"
        )


class UnknownFieldError(ConfigError):
    """A table holds a key that the strict target record does not declare."""

    def __init__(
        self,
        field: str,
        origin: _value.Origin | None = None,
        path: _path.Path | None = None,
        expected: _typing.Sequence[str] = (),
    ) -> None:
        self.field = field
        self.origin = origin
        self.path = path
        self.expected = tuple(expected)
        known = ", ".join(f"`{name}`" for name in self.expected)
        suffix = f", expected one of {known}" if known else ""
        super().__init__(
            f"unknown field `{field}`{suffix}{_describe_path(path)}{_describe_origin(origin)}"
        )


class DeserializationError(ConfigError):
    """A value could not be converted into the requested shape."""

    def __init__(
        self,
        reason: str,
        path: _path.Path | None = None,
        origin: _value.Origin | None = None,
    ) -> None:
        self.reason = reason
        self.path = path
        self.origin = origin
        super().__init__(f"{reason}{_describe_path(path)}")

    def at(self, path: _path.Path) -> DeserializationError:
        """Return a copy located at ``path`` (used once the caller knows it)."""
        error = DeserializationError(self.reason, path, self.origin)
        error.__cause__ = self.__cause__
        return error
