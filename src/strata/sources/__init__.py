"""
Configuration sources.

Built-in sources:
- FileSource / AsyncFileSource: a file decoded by a registered format
- StringSource: text decoded by a registered format
- EnvironmentSource: process environment variables
- MemorySource: a mapping or Value supplied by the caller

Implement Source (blocking) or AsyncSource (suspending) for anything else.
"""

from strata.sources.base import AnySource, AsyncSource, Source
from strata.sources.environment import EnvironmentSource
from strata.sources.file import AsyncFileSource, FileSource, StringSource, resolve_file
from strata.sources.memory import MemorySource

__all__ = [
    "AnySource",
    "AsyncFileSource",
    "AsyncSource",
    "EnvironmentSource",
    "FileSource",
    "MemorySource",
    "Source",
    "StringSource",
    "resolve_file",
]
