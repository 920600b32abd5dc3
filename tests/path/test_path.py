"""Tests for path parsing and evaluation."""

import pytest as _pytest

import strata.errors as errors
import strata.path as path
import strata.value as value


class TestPathParse:
    """Path text to segments."""

    def test_dotted_keys(self) -> None:
        assert list(path.Path.parse("a.b.c")) == [path.Key("a"), path.Key("b"), path.Key("c")]

    def test_indices(self) -> None:
        assert list(path.Path.parse("a.b[0].c")) == [
            path.Key("a"),
            path.Key("b"),
            path.Index(0),
            path.Key("c"),
        ]

    def test_repeated_indices(self) -> None:
        assert list(path.Path.parse("grid[1][2]")) == [
            path.Key("grid"),
            path.Index(1),
            path.Index(2),
        ]

    def test_quoted_key(self) -> None:
        assert list(path.Path.parse('a."weird.key"')) == [path.Key("a"), path.Key("weird.key")]

    def test_quoted_key_escapes(self) -> None:
        parsed = path.Path.parse(r'"say \"hi\" \\ bye"')
        assert list(parsed) == [path.Key('say "hi" \\ bye')]

    def test_unicode_and_dashes(self) -> None:
        assert list(path.Path.parse("grüße.max-conn")) == [
            path.Key("grüße"),
            path.Key("max-conn"),
        ]

    def test_leading_index(self) -> None:
        assert list(path.Path.parse("[0].name")) == [path.Index(0), path.Key("name")]


class TestPathSyntaxErrors:
    """Malformed paths report a byte offset."""

    @_pytest.mark.parametrize(
        ("text", "offset"),
        [
            ("", 0),
            ("a..b", 2),
            ("a.", 2),
            ("a[x]", 2),
            ("a[1", 3),
            ("a b", 1),
            ('a."open', 2),
            ("a]", 1),
        ],
    )
    def test_offsets(self, text: str, offset: int) -> None:
        with _pytest.raises(errors.PathSyntaxError) as exc_info:
            path.Path.parse(text)
        assert exc_info.value.offset == offset

    def test_offset_counts_bytes(self) -> None:
        """Multi-byte characters count with their UTF-8 length."""
        with _pytest.raises(errors.PathSyntaxError) as exc_info:
            path.Path.parse("é..x")
        assert exc_info.value.offset == 3

    def test_invalid_escape(self) -> None:
        with _pytest.raises(errors.PathSyntaxError, match="invalid escape"):
            path.Path.parse(r'"a\nb"')

    def test_is_value_error(self) -> None:
        with _pytest.raises(ValueError):
            path.Path.parse("a..")


class TestPathRendering:
    """str(path) is canonical and parses back to the same path."""

    @_pytest.mark.parametrize(
        "text",
        ["a", "a.b.c", "servers[0].name", 'a."weird.key"', 'a."with space"[3]', '""', "[2]"],
    )
    def test_round_trip(self, text: str) -> None:
        parsed = path.Path.parse(text)
        assert str(parsed) == text
        assert path.Path.parse(str(parsed)) == parsed

    def test_quotes_keys_needing_it(self) -> None:
        built = path.Path([path.Key('a"b'), path.Key("c\\d")])
        assert str(built) == r'"a\"b"."c\\d"'
        assert path.Path.parse(str(built)) == built

    def test_child_and_parent(self) -> None:
        base = path.Path.parse("a")
        assert str(base.child("b").child(0)) == "a.b[0]"
        assert base.child("b").parent == base
        assert path.Path.root().is_root

    def test_negative_index_rejected(self) -> None:
        with _pytest.raises(ValueError):
            path.Index(-1)

    def test_hashable(self) -> None:
        assert {path.Path.parse("a.b"): 1}[path.Path.parse("a.b")] == 1


class TestPathEvaluate:
    """Walking a tree."""

    def test_resolves_nested(self, server_tree: value.Value) -> None:
        node = path.Path.parse("servers[0].name").evaluate(server_tree)
        assert node == value.Value.string("x")

    def test_root_is_whole_tree(self, server_tree: value.Value) -> None:
        assert path.Path.root().evaluate(server_tree) is server_tree

    def test_index_out_of_range(self, server_tree: value.Value) -> None:
        with _pytest.raises(errors.NotFoundError) as exc_info:
            path.Path.parse("servers[2].name").evaluate(server_tree)
        assert str(exc_info.value.path) == "servers[2]"

    def test_missing_key(self, server_tree: value.Value, origin: value.Origin) -> None:
        with _pytest.raises(errors.NotFoundError) as exc_info:
            path.Path.parse("server.user").evaluate(server_tree)
        assert str(exc_info.value.path) == "server.user"
        assert exc_info.value.origin == origin

    def test_not_found_is_key_error(self, server_tree: value.Value) -> None:
        with _pytest.raises(KeyError):
            path.Path.parse("nope").evaluate(server_tree)

    def test_key_on_array(self, server_tree: value.Value) -> None:
        with _pytest.raises(errors.TypeMismatchError) as exc_info:
            path.Path.parse("servers.name").evaluate(server_tree)
        assert str(exc_info.value.path) == "servers"
        assert exc_info.value.expected == "a map"
        assert exc_info.value.found == "sequence"

    def test_index_on_table(self, server_tree: value.Value) -> None:
        with _pytest.raises(errors.TypeMismatchError) as exc_info:
            path.Path.parse("server[0]").evaluate(server_tree)
        assert exc_info.value.expected == "an array"

    def test_built_tree_resolves(self) -> None:
        """A tree built by assigning at a path resolves at that path."""
        target = path.Path.parse('a[1]."b.c"[0].d')
        tree = value.Value.table()
        target.assign(tree, "leaf")
        assert target.evaluate(tree) == value.Value.string("leaf")
