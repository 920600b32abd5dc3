"""
Strata - layered configuration

Merges configuration from ordered sources (files, environment variables,
in-memory data) into one tree, then extracts typed values from it.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("strata-config")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from strata.config import Config  # noqa: E402
from strata.de import deserialize, shape_of  # noqa: E402
from strata.errors import (  # noqa: E402
    ConfigError,
    DeserializationError,
    MissingFieldError,
    NotFoundError,
    PathSyntaxError,
    SourceError,
    TypeMismatchError,
    UnknownFieldError,
)
from strata.merging import merge, merge_all  # noqa: E402
from strata.path import Path  # noqa: E402
from strata.sources import (  # noqa: E402
    AsyncFileSource,
    AsyncSource,
    EnvironmentSource,
    FileSource,
    MemorySource,
    Source,
    StringSource,
)
from strata.value import KeyOrder, Origin, Value, ValueKind  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "AsyncFileSource",
    "AsyncSource",
    "Config",
    "ConfigError",
    "DeserializationError",
    "EnvironmentSource",
    "FileSource",
    "KeyOrder",
    "MemorySource",
    "MissingFieldError",
    "NotFoundError",
    "Origin",
    "Path",
    "PathSyntaxError",
    "Source",
    "SourceError",
    "StringSource",
    "TypeMismatchError",
    "UnknownFieldError",
    "Value",
    "ValueKind",
    "deserialize",
    "merge",
    "merge_all",
    "shape_of",
]
