"""
Parsed addresses into a Value tree.

A Path is an immutable sequence of Key and Index segments. It is usually
parsed from text (``Path.parse("servers[0].name")``) and renders back to
the same canonical text with ``str(path)``.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import strata.errors as errors
import strata.path._parser as _parser
import strata.path._segments as _segments
import strata.value as value

# Largest number of nil elements assign() inserts to reach an index
MAX_PADDING = 1024


class Path(_abc.Sequence[_segments.Segment]):
    """
    An immutable, parsed path.

    Example:
        >>> path = Path.parse('a."weird.key"[2]')
        >>> list(path)
        [Key(name='a'), Key(name='weird.key'), Index(position=2)]
        >>> str(path)
        'a."weird.key"[2]'
    """

    __slots__ = ("_segments",)

    def __init__(self, segments: _abc.Iterable[_segments.Segment] = ()) -> None:
        items = tuple(segments)
        for segment in items:
            if not isinstance(segment, (_segments.Key, _segments.Index)):
                raise TypeError(
                    f"path segments must be Key or Index, got {type(segment).__name__}"
                )
        self._segments: tuple[_segments.Segment, ...] = items

    @classmethod
    def parse(cls, text: str) -> Path:
        """
        Parse path text.

        Raises:
            PathSyntaxError: If the text is not valid path syntax.
        """
        return cls(_parser.parse(text))

    @classmethod
    def root(cls) -> Path:
        """The empty path, addressing the whole tree."""
        return cls()

    @classmethod
    def coerce(cls, path: Path | str) -> Path:
        """Accept either a Path or path text."""
        if isinstance(path, Path):
            return path
        return cls.parse(path)

    # =========================================================================
    # Structure
    # =========================================================================

    @property
    def segments(self) -> tuple[_segments.Segment, ...]:
        return self._segments

    @property
    def is_root(self) -> bool:
        return not self._segments

    @property
    def parent(self) -> Path:
        """Path without its last segment (the root's parent is the root)."""
        return Path(self._segments[:-1])

    def child(self, segment: _segments.Segment | str | int) -> Path:
        """Extend this path by one key (str) or index (int) segment."""
        if isinstance(segment, str):
            segment = _segments.Key(segment)
        elif isinstance(segment, int):
            segment = _segments.Index(segment)
        return Path((*self._segments, segment))

    def __len__(self) -> int:
        return len(self._segments)

    @_typing.overload
    def __getitem__(self, index: int) -> _segments.Segment: ...

    @_typing.overload
    def __getitem__(self, index: slice) -> Path: ...

    def __getitem__(self, index: int | slice) -> _segments.Segment | Path:
        if isinstance(index, slice):
            return Path(self._segments[index])
        return self._segments[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Path):
            return self._segments == other._segments
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._segments)

    def __str__(self) -> str:
        parts: list[str] = []
        for position, segment in enumerate(self._segments):
            if isinstance(segment, _segments.Key) and position > 0:
                parts.append(".")
            parts.append(segment.render())
        return "".join(parts)

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate(self, root: value.Value) -> value.Value:
        """
        Walk ``root`` segment by segment.

        Returns:
            The addressed node (not a copy).

        Raises:
            NotFoundError: A key is absent or an index is out of range. The
                error path ends with the missing segment; its origin is the
                container that lacked it.
            TypeMismatchError: A key was applied to a non-table or an index
                to a non-array. The error path addresses the offending node.
        """
        current = root
        for depth, segment in enumerate(self._segments):
            traversed = Path(self._segments[:depth])
            if isinstance(segment, _segments.Key):
                if current.kind is not value.ValueKind.TABLE:
                    raise errors.TypeMismatchError(
                        traversed, "a map", current.describe(), current.origin
                    )
                child = current.data.get(segment.name)
            else:
                if current.kind is not value.ValueKind.ARRAY:
                    raise errors.TypeMismatchError(
                        traversed, "an array", current.describe(), current.origin
                    )
                items = current.data
                child = items[segment.position] if segment.position < len(items) else None
            if child is None:
                raise errors.NotFoundError(traversed.child(segment), current.origin)
            current = child
        return current

    def assign(self, root: value.Value, new: _typing.Any) -> None:
        """
        Store ``new`` at this path inside ``root``, creating containers.

        Plain Python data is converted with ``Value.from_python``. Nodes in
        the way that are not the container the next segment needs are
        replaced by an empty one; arrays are padded with nil values.

        Raises:
            ValueError: An index lies more than ``MAX_PADDING`` elements
                past the end of its array.
        """
        node = new if isinstance(new, value.Value) else value.Value.from_python(new)
        if not self._segments:
            root._replace_with(node)
            return

        current = root
        last = len(self._segments) - 1
        for depth, segment in enumerate(self._segments):
            if isinstance(segment, _segments.Key):
                if current.kind is not value.ValueKind.TABLE:
                    current._replace_with(value.Value.table(origin=node.origin))
                entries: dict[str, value.Value] = current.data
                if depth == last:
                    entries[segment.name] = node
                    return
                if segment.name not in entries:
                    entries[segment.name] = value.Value.nil(node.origin)
                current = entries[segment.name]
            else:
                if current.kind is not value.ValueKind.ARRAY:
                    current._replace_with(value.Value.array(origin=node.origin))
                items: list[value.Value] = current.data
                if segment.position - len(items) > MAX_PADDING:
                    raise ValueError(
                        f"index {segment.position} at `{Path(self._segments[: depth + 1])}` is "
                        f"more than {MAX_PADDING} elements past the end of the array"
                    )
                while len(items) <= segment.position:
                    items.append(value.Value.nil(node.origin))
                if depth == last:
                    items[segment.position] = node
                    return
                current = items[segment.position]
