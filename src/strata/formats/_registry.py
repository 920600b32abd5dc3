"""
Registry of configuration formats.

A format pairs a name and its file extensions with a decoder (text to
Value) and, optionally, an encoder (Value to text). File and string
sources only ever talk to formats through this registry, so callers can
plug in formats of their own:

    >>> register_format("props", ["properties"], decode_properties)
"""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import os as _os
import pathlib as _pathlib
import typing as _typing

import strata.value as value

Decoder: _typing.TypeAlias = _typing.Callable[[str, value.Origin], value.Value]
Encoder: _typing.TypeAlias = _typing.Callable[[value.Value], str]


class FileFormat(str, _enum.Enum):
    """Names of the built-in formats."""

    JSON = "json"
    YAML = "yaml"
    TOML = "toml"
    INI = "ini"
    DOTENV = "dotenv"

    def __str__(self) -> str:
        return self.value


@_dataclasses.dataclass(frozen=True)
class Format:
    """A registered format."""

    name: str
    extensions: tuple[str, ...]
    decoder: Decoder
    encoder: Encoder | None = None

    def decode(self, text: str, origin: value.Origin) -> value.Value:
        """
        Decode ``text`` into a table.

        Raises:
            ValueError: If the decoded document is not a table. Decoder
                specific exceptions (json.JSONDecodeError, yaml.YAMLError, ...)
                propagate unchanged.
        """
        tree = self.decoder(text, origin)
        if tree.is_nil:
            return value.Value.table(origin=origin)
        if not tree.is_table:
            raise ValueError(
                f"{self.name} configuration must be a mapping at the top level, "
                f"got {tree.describe()}"
            )
        return tree

    def encode(self, tree: value.Value) -> str:
        """
        Encode a tree to text.

        Raises:
            ValueError: If this format has no encoder.
        """
        if self.encoder is None:
            raise ValueError(f"format `{self.name}` does not support encoding")
        return self.encoder(tree)


_FORMATS: dict[str, Format] = {}


def _key(name: str | FileFormat) -> str:
    return str(name).lower()


def register_format(
    name: str | FileFormat,
    extensions: _typing.Iterable[str],
    decoder: Decoder,
    encoder: Encoder | None = None,
) -> Format:
    """
    Register (or replace) a format.

    Args:
        name: Format name used as a hint by sources.
        extensions: File extensions without the leading dot.
        decoder: Callable turning text and an origin into a Value.
        encoder: Optional callable turning a Value into text.

    Returns:
        The registered Format.
    """
    fmt = Format(
        _key(name),
        tuple(ext.lower().lstrip(".") for ext in extensions),
        decoder,
        encoder,
    )
    _FORMATS[fmt.name] = fmt
    return fmt


def get_format(name: str | FileFormat) -> Format:
    """
    Look up a format by name.

    Raises:
        ValueError: If no such format is registered.
    """
    try:
        return _FORMATS[_key(name)]
    except KeyError:
        known = ", ".join(sorted(_FORMATS))
        raise ValueError(f"unknown configuration format `{name}` (known: {known})") from None


def all_formats() -> list[Format]:
    """All registered formats, in registration order."""
    return list(_FORMATS.values())


def format_for_path(path: str | _os.PathLike[str]) -> Format | None:
    """Find the format whose extensions include the path's extension."""
    suffix = _pathlib.Path(path).suffix.lower().lstrip(".")
    if not suffix:
        return None
    for fmt in _FORMATS.values():
        if suffix in fmt.extensions:
            return fmt
    return None


def decode(name: str | FileFormat, text: str, origin: value.Origin) -> value.Value:
    """Decode ``text`` with the named format."""
    return get_format(name).decode(text, origin)


def encode(name: str | FileFormat, tree: value.Value) -> str:
    """Encode ``tree`` with the named format."""
    return get_format(name).encode(tree)
