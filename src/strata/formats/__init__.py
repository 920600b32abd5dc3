"""
Configuration file formats.

Built-in formats:
- json   (.json)
- yaml   (.yaml, .yml), nodes carry line/column origins
- toml   (.toml)
- ini    (.ini)
- dotenv (.env)
"""

import strata.formats._text as _text
import strata.formats._yaml as _yaml
from strata.formats._registry import (
    Decoder,
    Encoder,
    FileFormat,
    Format,
    all_formats,
    decode,
    encode,
    format_for_path,
    get_format,
    register_format,
)

register_format(FileFormat.TOML, ["toml"], _text.decode_toml)
register_format(FileFormat.JSON, ["json"], _text.decode_json, _text.encode_json)
register_format(FileFormat.YAML, ["yaml", "yml"], _yaml.decode, _yaml.encode)
register_format(FileFormat.INI, ["ini"], _text.decode_ini)
register_format(FileFormat.DOTENV, ["env"], _text.decode_dotenv)

__all__ = [
    "Decoder",
    "Encoder",
    "FileFormat",
    "Format",
    "all_formats",
    "decode",
    "encode",
    "format_for_path",
    "get_format",
    "register_format",
]
