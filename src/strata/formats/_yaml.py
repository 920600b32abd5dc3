"""
YAML format with line tracking.

Every node decoded from YAML carries an Origin pointing at the line and
column where it starts, so errors about a value can name the exact spot
in the file.
"""

from __future__ import annotations

import typing as _typing

import yaml as _yaml

import strata.value as value

_MERGE_TAG = "tag:yaml.org,2002:merge"


def _key_text(key: _typing.Any) -> str:
    """Render a scalar key the way YAML spells it."""
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


class _OriginTrackingLoader(_yaml.SafeLoader):
    """YAML loader that builds Value nodes stamped with their position.

    Scalars are constructed by the parent class so YAML typing rules
    (int, bool, timestamps, ...) apply unchanged; mappings and sequences
    are walked here so each node keeps its own start mark.
    """

    def __init__(self, stream: _typing.Any, origin: value.Origin) -> None:
        super().__init__(stream)
        self._origin = origin

    def _origin_of(self, node: _yaml.Node) -> value.Origin:
        # Marks are 0-indexed; origins follow editor conventions (1-indexed)
        return self._origin.at(node.start_mark.line + 1, node.start_mark.column + 1)

    def construct_value(self, node: _yaml.Node) -> value.Value:
        origin = self._origin_of(node)

        if isinstance(node, _yaml.MappingNode):
            own = sum(1 for key_node, _ in node.value if key_node.tag != _MERGE_TAG)
            # Resolve "<<" merge keys; inherited pairs come first and may be overridden
            self.flatten_mapping(node)
            inherited = len(node.value) - own
            entries: dict[str, value.Value] = {}
            seen: set[str] = set()
            for position, (key_node, value_node) in enumerate(node.value):
                key = self.construct_object(key_node, deep=True)
                if isinstance(key, (dict, list)):
                    raise _yaml.constructor.ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        "found unhashable key",
                        key_node.start_mark,
                    )
                name = _key_text(key)
                if position >= inherited:
                    if name in seen:
                        raise _yaml.constructor.ConstructorError(
                            "while constructing a mapping",
                            node.start_mark,
                            f"found duplicate key \"{name}\"",
                            key_node.start_mark,
                        )
                    seen.add(name)
                entries[name] = self.construct_value(value_node)
            return value.Value.table(entries, origin)

        if isinstance(node, _yaml.SequenceNode):
            return value.Value.array(
                (self.construct_value(child) for child in node.value),
                origin,
            )

        scalar = self.construct_object(node, deep=True)
        return value.Value.from_python(scalar, origin)


def decode(text: str, origin: value.Origin) -> value.Value:
    """
    Decode YAML text.

    Returns:
        The document as a Value (nil for an empty document).

    Raises:
        yaml.YAMLError: If the YAML is malformed.
    """
    loader = _OriginTrackingLoader(text, origin)
    try:
        node = loader.get_single_node()
        if node is None:
            return value.Value.nil(origin)
        return loader.construct_value(node)
    finally:
        loader.dispose()


def encode(tree: value.Value) -> str:
    """Encode a tree as block-style YAML, keeping key order."""
    return _yaml.safe_dump(
        tree.to_python(),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
