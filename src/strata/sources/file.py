"""
File and string sources.

FileSource reads a configuration file and decodes it with a registered
format. The format comes from an explicit hint or from the file
extension. When the exact path does not exist, each registered extension
is tried in turn, so ``FileSource("config/app")`` finds
``config/app.toml``, ``config/app.yaml``, ... (and ``"settings.local"``
finds ``settings.local.json``).

A missing or unreadable file, or one with no recognizable format, fails
the source only when it is required. Malformed content, including bytes
that are not valid in the configured encoding, always fails.
"""

from __future__ import annotations

import asyncio as _asyncio
import codecs as _codecs
import logging as _logging
import os as _os
import pathlib as _pathlib

import strata.errors as errors
import strata.formats as formats
import strata.sources.base as base
import strata.value as value

_logger = _logging.getLogger(__name__)


class FileNotResolvedError(OSError):
    """No file matched the configured name, or its format is unknown."""

    pass


def _display_path(path: _pathlib.Path) -> str:
    """Path relative to the working directory when possible."""
    try:
        relative = _os.path.relpath(path, _pathlib.Path.cwd())
    except ValueError:
        # Different drives on Windows
        return str(path)
    return relative if not relative.startswith("..") else str(path)


def resolve_file(
    name: str | _os.PathLike[str],
    format_hint: str | formats.FileFormat | None = None,
) -> tuple[_pathlib.Path, formats.Format]:
    """
    Find the file a FileSource refers to and the format to decode it with.

    Args:
        name: File name, absolute or relative to the working directory.
        format_hint: Format name to use instead of guessing from the extension.

    Returns:
        Tuple of (resolved_path, format).

    Raises:
        FileNotResolvedError: If no matching file exists or its format is
            not registered.
        ValueError: If ``format_hint`` names an unknown format.
    """
    filename = _pathlib.Path(name)
    if not filename.is_absolute():
        filename = _pathlib.Path.cwd() / filename

    hinted = formats.get_format(format_hint) if format_hint is not None else None

    if filename.is_file():
        fmt = hinted or formats.format_for_path(filename)
        if fmt is None:
            raise FileNotResolvedError(
                f'configuration file "{name}" is not of a registered file format'
            )
        return filename, fmt

    candidates = [hinted] if hinted is not None else formats.all_formats()
    for fmt in candidates:
        for extension in fmt.extensions:
            candidate = filename.with_name(f"{filename.name}.{extension}")
            if candidate.is_file():
                return candidate, fmt

    raise FileNotResolvedError(f'configuration file "{name}" not found')


def _read(
    name: str | _os.PathLike[str],
    format_hint: str | formats.FileFormat | None,
) -> tuple[_pathlib.Path, formats.Format, bytes]:
    filename, fmt = resolve_file(name, format_hint)
    return filename, fmt, filename.read_bytes()


def _text_of(raw: bytes, encoding: str, origin: value.Origin) -> str:
    if raw.startswith(_codecs.BOM_UTF8):
        raw = raw[len(_codecs.BOM_UTF8) :]
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise errors.SourceError(origin, f"invalid {encoding} text: {e}") from e


def _decode(fmt: formats.Format, text: str, origin: value.Origin) -> value.Value:
    try:
        return fmt.decode(text, origin)
    except Exception as e:
        raise errors.SourceError(origin, f"invalid {fmt.name}: {e}") from e


class FileSource(base.Source):
    """
    Configuration read from a file.

    Example:
        >>> FileSource("config/default")            # any registered extension
        >>> FileSource("app.conf", format="ini")     # explicit format
        >>> FileSource("local.yaml", required=False) # optional
    """

    def __init__(
        self,
        path: str | _os.PathLike[str],
        format: str | formats.FileFormat | None = None,  # noqa: A002 - mirrors the format hint name
        *,
        required: bool = True,
        encoding: str = "utf-8",
    ) -> None:
        super().__init__(required=required, origin=str(path))
        self.path = path
        self.format = format
        self.encoding = encoding

    def _unavailable(self, error: Exception) -> value.Value:
        if self.required:
            raise errors.SourceError(self.origin, error) from error
        _logger.debug("Skipping optional config file %s: %s", self.path, error)
        return self._empty()

    def collect(self) -> value.Value:
        try:
            filename, fmt, raw = _read(self.path, self.format)
        except OSError as e:
            return self._unavailable(e)

        origin = value.Origin(_display_path(filename))
        _logger.debug("Loading %s config from %s", fmt.name, origin)
        return _decode(fmt, _text_of(raw, self.encoding, origin), origin)


class AsyncFileSource(base.AsyncSource):
    """
    FileSource counterpart whose lookup and read run in a worker thread.

    Resolution and decoding follow FileSource exactly.
    """

    def __init__(
        self,
        path: str | _os.PathLike[str],
        format: str | formats.FileFormat | None = None,  # noqa: A002
        *,
        required: bool = True,
        encoding: str = "utf-8",
    ) -> None:
        super().__init__(required=required, origin=str(path))
        self.path = path
        self.format = format
        self.encoding = encoding

    async def collect(self) -> value.Value:
        try:
            filename, fmt, raw = await _asyncio.to_thread(_read, self.path, self.format)
        except OSError as e:
            if self.required:
                raise errors.SourceError(self.origin, e) from e
            _logger.debug("Skipping optional config file %s: %s", self.path, e)
            return self._empty()

        origin = value.Origin(_display_path(filename))
        return _decode(fmt, _text_of(raw, self.encoding, origin), origin)


class StringSource(base.Source):
    """
    Configuration decoded from in-memory text.

    Example:
        >>> StringSource('{"debug": true}', "json")
    """

    default_label = "string"

    def __init__(
        self,
        text: str,
        format: str | formats.FileFormat,  # noqa: A002
        *,
        origin: value.Origin | str | None = None,
    ) -> None:
        super().__init__(required=True, origin=origin)
        self.text = text
        self.format = format

    def collect(self) -> value.Value:
        fmt = formats.get_format(self.format)
        return _decode(fmt, self.text, self.origin)
