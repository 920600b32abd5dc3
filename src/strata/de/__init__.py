"""
Deserialization: converting Value trees into typed targets.

- shapes: the closed set of forms a target can expect
- shape_of: derive a shape from a Python type
- Deserializer / deserialize: the bridge itself
"""

from strata.de._bridge import CaseStrategy, Deserializer, deserialize
from strata.de._derive import shape_of
from strata.de._shapes import (
    MISSING,
    Deserializable,
    Dynamic,
    Enumeration,
    Field,
    Mapping,
    Optional,
    Raw,
    Record,
    Scalar,
    ScalarKind,
    Sequence,
    Shape,
    Tuple,
    Variant,
)

__all__ = [
    "MISSING",
    "CaseStrategy",
    "Deserializable",
    "Deserializer",
    "Dynamic",
    "Enumeration",
    "Field",
    "Mapping",
    "Optional",
    "Raw",
    "Record",
    "Scalar",
    "ScalarKind",
    "Sequence",
    "Shape",
    "Tuple",
    "Variant",
    "deserialize",
    "shape_of",
]
