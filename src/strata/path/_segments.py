"""Path segment types."""

from __future__ import annotations

import dataclasses as _dataclasses
import typing as _typing

_KEY_STOP = frozenset('.[]"\\')


def is_plain_key_char(char: str) -> bool:
    """Check if a character can appear in an unquoted key."""
    return char not in _KEY_STOP and not char.isspace()


@_dataclasses.dataclass(frozen=True, slots=True)
class Key:
    """Select an entry of a table by name."""

    name: str

    def render(self) -> str:
        """Path text for this key, quoted when the name requires it."""
        if self.name and all(is_plain_key_char(char) for char in self.name):
            return self.name
        escaped = self.name.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    def __str__(self) -> str:
        return self.render()


@_dataclasses.dataclass(frozen=True, slots=True)
class Index:
    """Select an element of an array by position."""

    position: int

    def __post_init__(self) -> None:
        if self.position < 0:
            raise ValueError(f"index must be non-negative, got {self.position}")

    def render(self) -> str:
        return f"[{self.position}]"

    def __str__(self) -> str:
        return self.render()


Segment: _typing.TypeAlias = Key | Index
