"""Tests for the Value tree."""

import datetime as _datetime
import enum as _enum

import pytest as _pytest

import strata.errors as errors
import strata.path as path
import strata.value as value


class TestValueConstruction:
    """Factories and from_python pick the right kinds."""

    def test_integer_kind_follows_magnitude(self) -> None:
        """Integers widen to 128-bit kinds only when they need to."""
        assert value.Value.integer(5).kind is value.ValueKind.INTEGER
        assert value.Value.integer(2**63).kind is value.ValueKind.INTEGER_128
        assert value.Value.integer(-(2**100)).kind is value.ValueKind.INTEGER_128
        assert value.Value.integer(2**127).kind is value.ValueKind.UNSIGNED_128

    def test_integer_out_of_range_rejected(self) -> None:
        with _pytest.raises(ValueError, match="128 bits"):
            value.Value.integer(2**128)

    def test_payload_must_match_kind(self) -> None:
        """A kind never holds a payload of another type."""
        with _pytest.raises(TypeError):
            value.Value(value.ValueKind.STRING, 3)
        with _pytest.raises(TypeError):
            value.Value(value.ValueKind.INTEGER, True)

    def test_from_python_nested(self, origin: value.Origin) -> None:
        """Mappings, lists and scalars convert recursively with the origin."""
        tree = value.Value.from_python({"a": [1, "two", None], "b": {"c": 1.5}}, origin)
        assert tree.is_table
        items = tree.data["a"]
        assert items.is_array
        assert [item.kind for item in items.data] == [
            value.ValueKind.INTEGER,
            value.ValueKind.STRING,
            value.ValueKind.NIL,
        ]
        assert tree.data["b"].data["c"].origin == origin

    def test_from_python_bool_is_not_integer(self) -> None:
        assert value.Value.from_python(True).kind is value.ValueKind.BOOLEAN

    def test_from_python_dates_and_enums(self) -> None:
        """Dates render as ISO strings and enums convert through their value."""

        class Color(_enum.Enum):
            RED = "red"

        tree = value.Value.from_python(
            {"day": _datetime.date(2024, 1, 2), "color": Color.RED}
        )
        assert tree.data["day"] == value.Value.string("2024-01-02")
        assert tree.data["color"] == value.Value.string("red")

    def test_from_python_rejects_unknown_types(self) -> None:
        with _pytest.raises(TypeError, match="cannot convert"):
            value.Value.from_python({"x": object()})

    def test_from_python_keeps_existing_origins(self) -> None:
        """Embedded Values keep their own origin."""
        inner = value.Value.string("x", value.Origin("inner"))
        tree = value.Value.from_python({"k": inner}, value.Origin("outer"))
        assert tree.data["k"].origin == value.Origin("inner")
        assert tree.data["k"] is not inner


class TestValueEquality:
    """Equality compares kind and content, never origin."""

    def test_origin_ignored(self) -> None:
        assert value.Value.string("a", value.Origin("x")) == value.Value.string(
            "a", value.Origin("y")
        )

    def test_integer_and_float_differ(self) -> None:
        assert value.Value.integer(1) != value.Value.floating(1.0)

    def test_integer_widths_compare_as_one(self) -> None:
        big = value.Value(value.ValueKind.INTEGER_128, 5)
        assert big.kind is value.ValueKind.INTEGER
        assert big == value.Value.integer(5)

    def test_tables_compare_structurally(self) -> None:
        left = value.Value.from_python({"a": {"b": [1, 2]}})
        right = value.Value.from_python({"a": {"b": [1, 2]}})
        assert left == right
        assert left != value.Value.from_python({"a": {"b": [1]}})

    def test_values_are_unhashable(self) -> None:
        with _pytest.raises(TypeError):
            hash(value.Value.nil())


class TestValueAccess:
    """get() and set() by path."""

    def test_get_existing(self, server_tree: value.Value) -> None:
        assert server_tree.get("server.port") == value.Value.integer(8080)
        assert server_tree.get("servers[1].name") == value.Value.string("y")

    def test_get_missing_returns_none(self, server_tree: value.Value) -> None:
        """Missing keys, bad indices and wrong kinds are all silent."""
        assert server_tree.get("server.missing") is None
        assert server_tree.get("servers[5].name") is None
        assert server_tree.get("ratio.deeper") is None

    def test_get_invalid_path_raises(self, server_tree: value.Value) -> None:
        with _pytest.raises(errors.PathSyntaxError):
            server_tree.get("server..port")

    def test_set_creates_containers(self) -> None:
        """Missing tables and arrays are created, arrays padded with nil."""
        tree = value.Value.table()
        tree.set("a.b[2].c", 1)
        assert tree.to_python() == {"a": {"b": [None, None, {"c": 1}]}}

    def test_set_far_past_end_rejected(self) -> None:
        tree = value.Value.table()
        with _pytest.raises(ValueError, match="past the end"):
            tree.set("a[99999999999]", 1)

    def test_set_replaces_scalar_in_the_way(self) -> None:
        tree = value.Value.from_python({"a": "scalar"})
        tree.set("a.b", True)
        assert tree.to_python() == {"a": {"b": True}}

    def test_set_root(self) -> None:
        tree = value.Value.table()
        tree.set(path.Path.root(), {"x": 1})
        assert tree.to_python() == {"x": 1}


class TestValueConversion:
    """copy, sorted, to_python and describe."""

    def test_copy_is_deep(self, server_tree: value.Value) -> None:
        duplicate = server_tree.copy()
        duplicate.set("server.port", 1)
        assert server_tree.get("server.port") == value.Value.integer(8080)

    def test_sorted_orders_keys_recursively(self) -> None:
        tree = value.Value.from_python({"b": {"z": 1, "y": 2}, "a": 0})
        ordered = tree.sorted()
        assert list(ordered.data) == ["a", "b"]
        assert list(ordered.data["b"].data) == ["y", "z"]
        assert ordered == tree

    def test_to_python_round_trip(self) -> None:
        data = {"a": [1, 2.5, "s", None, True], "b": {}}
        assert value.Value.from_python(data).to_python() == data

    @_pytest.mark.parametrize(
        ("item", "description"),
        [
            (value.Value.string("x"), 'string "x"'),
            (value.Value.integer(3), "integer `3`"),
            (value.Value.boolean(False), "boolean `false`"),
            (value.Value.nil(), "unit value"),
            (value.Value.array(), "sequence"),
            (value.Value.table(), "map"),
        ],
    )
    def test_describe(self, item: value.Value, description: str) -> None:
        assert item.describe() == description


class TestOrigin:
    """Origins render like editor locations."""

    def test_label_only(self) -> None:
        assert str(value.Origin("app.yaml")) == "app.yaml"

    def test_with_position(self) -> None:
        assert str(value.Origin("app.yaml").at(3, 5)) == "app.yaml:3:5"
        assert str(value.Origin("app.yaml").at(3)) == "app.yaml:3"
