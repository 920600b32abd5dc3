"""Tests for MemorySource and the source base classes."""

import pytest as _pytest

import strata.sources as sources
import strata.value as value


class TestMemorySource:
    """In-memory data."""

    def test_collect(self) -> None:
        source = sources.MemorySource({"database": {"host": "localhost"}})
        assert source.collect().to_python() == {"database": {"host": "localhost"}}

    def test_default_origin(self) -> None:
        tree = sources.MemorySource({"a": 1}).collect()
        assert tree.data["a"].origin == value.Origin("memory")

    def test_custom_origin(self) -> None:
        tree = sources.MemorySource({"a": 1}, origin="cli").collect()
        assert tree.data["a"].origin == value.Origin("cli")

    def test_accepts_value(self) -> None:
        tree = value.Value.from_python({"a": 1})
        assert sources.MemorySource(tree).collect() == tree

    def test_empty(self) -> None:
        assert sources.MemorySource().collect().data == {}

    def test_rejects_non_mapping(self) -> None:
        with _pytest.raises(TypeError, match="needs a mapping"):
            sources.MemorySource([1, 2])  # type: ignore[arg-type]

    def test_snapshot_of_caller_data(self) -> None:
        """Later changes to the caller's dict are not observed."""
        data = {"a": 1}
        source = sources.MemorySource(data)
        data["a"] = 2
        assert source.collect().to_python() == {"a": 1}

    def test_collect_returns_copy(self) -> None:
        source = sources.MemorySource({"a": {"b": 1}})
        source.collect().set("a.b", 2)
        assert source.collect().to_python() == {"a": {"b": 1}}

    def test_set(self) -> None:
        source = sources.MemorySource()
        source.set("server.port", 8080)
        assert source.collect().to_python() == {"server": {"port": 8080}}


class TestSourceBase:
    """Shared behavior of sources."""

    def test_custom_source(self) -> None:
        class Fixed(sources.Source):
            default_label = "fixed"

            def collect(self) -> value.Value:
                return value.Value.from_python({"k": "v"}, self.origin)

        source = Fixed(required=False)
        assert not source.is_async
        assert source.origin == value.Origin("fixed")
        assert "Fixed(origin='fixed', required=False)" == repr(source)

    def test_abstract(self) -> None:
        with _pytest.raises(TypeError):
            sources.Source()  # type: ignore[abstract]
