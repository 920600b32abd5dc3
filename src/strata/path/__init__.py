"""
Path: dotted/bracketed addresses into a Value tree.

Syntax:
    a.b.c            nested keys
    servers[0].name  array index
    a."weird.key"    quoted key containing separators
"""

from strata.path._core import Path
from strata.path._segments import Index, Key, Segment

__all__ = ["Index", "Key", "Path", "Segment"]
