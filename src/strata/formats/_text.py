"""
JSON, TOML, INI and dotenv formats.

These decoders produce plain Python data first and convert it to a Value
in one pass, so every node carries the document-level origin only.
"""

from __future__ import annotations

import configparser as _configparser
import io as _io
import json as _json
import tomllib as _tomllib

import dotenv as _dotenv

import strata.value as value

# Section name used to collect INI keys that appear before any header
_INI_ROOT_SECTION = "strata:root"


def decode_json(text: str, origin: value.Origin) -> value.Value:
    """Decode JSON text."""
    return value.Value.from_python(_json.loads(text), origin)


def encode_json(tree: value.Value) -> str:
    return _json.dumps(tree.to_python(), indent=2, ensure_ascii=False) + "\n"


def decode_toml(text: str, origin: value.Origin) -> value.Value:
    """Decode TOML text. Dates and times become ISO-8601 strings."""
    return value.Value.from_python(_tomllib.loads(text), origin)


def decode_ini(text: str, origin: value.Origin) -> value.Value:
    """
    Decode INI text.

    Keys before the first section header become top-level entries; each
    section becomes a table. Values are always strings and key case is
    preserved. Interpolation is disabled.
    """
    parser = _configparser.ConfigParser(interpolation=None, default_section="strata:defaults")
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    parser.read_string(f"[{_INI_ROOT_SECTION}]\n{text}", source=origin.label)

    entries: dict[str, value.Value] = {}
    for section in parser.sections():
        items = {
            key: value.Value.string(raw, origin)
            for key, raw in parser.items(section, raw=True)
        }
        if section == _INI_ROOT_SECTION:
            entries.update(items)
        else:
            entries[section] = value.Value.table(items, origin)
    return value.Value.table(entries, origin)


def decode_dotenv(text: str, origin: value.Origin) -> value.Value:
    """
    Decode a dotenv file into a flat table of strings.

    A key declared without ``=`` is stored as nil.
    """
    pairs = _dotenv.dotenv_values(stream=_io.StringIO(text), interpolate=False)
    return value.Value.table(
        {
            key: value.Value.nil(origin) if raw is None else value.Value.string(raw, origin)
            for key, raw in pairs.items()
        },
        origin,
    )
