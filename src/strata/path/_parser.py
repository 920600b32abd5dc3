"""
Parser for path strings.

Grammar:
    path    := segment ('.' segment)*
    segment := (key | '"' quoted '"') ('[' digit+ ']')*

Unquoted keys are runs of any characters except ``.``, ``[``, ``]``,
``"`` and whitespace. Inside quotes, ``\\"`` and ``\\\\`` are the only
escapes. Error offsets are byte offsets into the UTF-8 encoding of the
input so they line up with what editors and terminals report.
"""

from __future__ import annotations

import strata.errors as errors
import strata.path._segments as _segments


class _Parser:
    """Single-use recursive descent parser over one path string."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def _peek(self) -> str | None:
        if self._pos < len(self._text):
            return self._text[self._pos]
        return None

    def _fail(self, message: str, pos: int | None = None) -> errors.PathSyntaxError:
        char_pos = self._pos if pos is None else pos
        offset = len(self._text[:char_pos].encode("utf-8"))
        return errors.PathSyntaxError(self._text, offset, message)

    def parse(self) -> list[_segments.Segment]:
        segments: list[_segments.Segment] = []

        if self._peek() == "[":
            # A path may address an array root directly: "[0].name"
            segments.append(self._index())
        else:
            segments.append(self._key())

        while True:
            while self._peek() == "[":
                segments.append(self._index())
            char = self._peek()
            if char is None:
                return segments
            if char != ".":
                raise self._fail(f"unexpected character {char!r}")
            self._pos += 1
            segments.append(self._key())

    def _key(self) -> _segments.Key:
        if self._peek() == '"':
            return self._quoted_key()

        start = self._pos
        while (char := self._peek()) is not None and _segments.is_plain_key_char(char):
            self._pos += 1
        if self._pos == start:
            char = self._peek()
            if char is None:
                raise self._fail("expected a key, found end of input")
            raise self._fail(f"expected a key, found {char!r}")
        return _segments.Key(self._text[start : self._pos])

    def _quoted_key(self) -> _segments.Key:
        start = self._pos
        self._pos += 1  # opening quote
        chars: list[str] = []
        while True:
            char = self._peek()
            if char is None:
                raise self._fail("unterminated quoted key", start)
            self._pos += 1
            if char == '"':
                return _segments.Key("".join(chars))
            if char == "\\":
                escaped = self._peek()
                if escaped not in ('"', "\\"):
                    raise self._fail("invalid escape in quoted key", self._pos - 1)
                self._pos += 1
                chars.append(escaped)
            else:
                chars.append(char)

    def _index(self) -> _segments.Index:
        self._pos += 1  # opening bracket
        start = self._pos
        while (char := self._peek()) is not None and char.isascii() and char.isdigit():
            self._pos += 1
        if self._pos == start:
            raise self._fail("expected a non-negative index")
        digits = self._text[start : self._pos]
        if self._peek() != "]":
            raise self._fail("expected `]` to close the index")
        self._pos += 1
        return _segments.Index(int(digits))


def parse(text: str) -> list[_segments.Segment]:
    """
    Parse a path string into segments.

    Raises:
        PathSyntaxError: If the text is not a valid path.
    """
    if not isinstance(text, str):
        raise TypeError(f"path must be a string, got {type(text).__name__}")
    if not text:
        raise errors.PathSyntaxError(text, 0, "path is empty")
    return _Parser(text).parse()
