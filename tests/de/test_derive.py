"""Tests for deriving shapes from Python types."""

import dataclasses as _dataclasses
import datetime as _datetime
import enum as _enum
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pytest as _pytest

import strata.de as de
import strata.value as value


class Mode(_enum.Enum):
    FAST = "fast"
    SAFE = 2


@_dataclasses.dataclass
class Endpoint:
    host: str
    port: int = 80
    tags: list[str] = _dataclasses.field(default_factory=list)
    user_name: str | None = _dataclasses.field(default=None, metadata={"alias": "user-name"})


class Limits(_pydantic.BaseModel):
    model_config = _pydantic.ConfigDict(extra="forbid")

    max_conn: int = _pydantic.Field(alias="maxConn")
    timeout: float = 1.0


class Port(int):
    @classmethod
    def __strata_shape__(cls) -> de.Shape:
        return de.Scalar(de.ScalarKind.INT, build=cls)


class TestScalars:
    @_pytest.mark.parametrize(
        ("target", "kind"),
        [
            (bool, de.ScalarKind.BOOL),
            (int, de.ScalarKind.INT),
            (float, de.ScalarKind.FLOAT),
            (str, de.ScalarKind.STR),
        ],
    )
    def test_builtin_scalars(self, target: type, kind: de.ScalarKind) -> None:
        assert de.shape_of(target) == de.Scalar(kind)

    def test_post_built_scalars(self) -> None:
        """Paths and dates are strings with a build step."""
        path_shape = de.shape_of(_pathlib.Path)
        assert isinstance(path_shape, de.Scalar)
        assert path_shape.kind is de.ScalarKind.STR
        assert path_shape.build is _pathlib.Path
        date_shape = de.shape_of(_datetime.date)
        assert isinstance(date_shape, de.Scalar)
        assert date_shape.kind is de.ScalarKind.STR

    def test_any_and_value(self) -> None:
        assert de.shape_of(_typing.Any) == de.Dynamic()
        assert de.shape_of(value.Value) == de.Raw()


class TestGenerics:
    def test_optional(self) -> None:
        expected = de.Optional(de.Scalar(de.ScalarKind.INT))
        assert de.shape_of(int | None) == expected
        assert de.shape_of(_typing.Optional[int]) == expected

    def test_other_unions_rejected(self) -> None:
        with _pytest.raises(TypeError, match="unions with None"):
            de.shape_of(int | str)

    def test_list(self) -> None:
        assert de.shape_of(list[int]) == de.Sequence(de.Scalar(de.ScalarKind.INT))

    def test_sets_build_sets(self) -> None:
        shape = de.shape_of(frozenset[str])
        assert isinstance(shape, de.Sequence)
        assert shape.build is frozenset

    def test_variadic_tuple(self) -> None:
        shape = de.shape_of(tuple[int, ...])
        assert isinstance(shape, de.Sequence)
        assert shape.build is tuple

    def test_fixed_tuple(self) -> None:
        shape = de.shape_of(tuple[int, str])
        assert shape == de.Tuple((de.Scalar(de.ScalarKind.INT), de.Scalar(de.ScalarKind.STR)))

    def test_dict(self) -> None:
        shape = de.shape_of(dict[str, float])
        assert shape == de.Mapping(de.Scalar(de.ScalarKind.FLOAT))

    def test_annotated_unwrapped(self) -> None:
        assert de.shape_of(_typing.Annotated[int, "meta"]) == de.Scalar(de.ScalarKind.INT)

    def test_literal(self) -> None:
        shape = de.shape_of(_typing.Literal["a", "b"])
        assert isinstance(shape, de.Enumeration)
        assert shape.variant_names == ("a", "b")


class TestRecordsAndEnums:
    def test_enum_variants(self) -> None:
        shape = de.shape_of(Mode)
        assert isinstance(shape, de.Enumeration)
        assert shape.name == "Mode"
        assert shape.variant_names == ("FAST", "SAFE")
        assert shape.variants[0].aliases == ("fast",)
        assert shape.variants[1].aliases == ("2",)

    def test_dataclass(self) -> None:
        shape = de.shape_of(Endpoint)
        assert isinstance(shape, de.Record)
        assert shape.name == "Endpoint"
        fields = {field.name: field for field in shape.fields}
        assert fields["host"].required
        assert not fields["port"].required
        assert fields["user_name"].key == "user-name"
        assert fields["tags"].shape == de.Sequence(de.Scalar(de.ScalarKind.STR))

    def test_pydantic_model(self) -> None:
        shape = de.shape_of(Limits)
        assert isinstance(shape, de.Record)
        assert shape.strict is True
        keys = [field.key for field in shape.fields]
        assert keys == ["maxConn", "timeout"]
        assert shape.fields[0].required
        assert not shape.fields[1].required

    def test_capability_wins(self) -> None:
        shape = de.shape_of(Port)
        assert shape == de.Scalar(de.ScalarKind.INT, build=Port)
        assert isinstance(Port(1), de.Deserializable)

    def test_shapes_pass_through(self) -> None:
        shape = de.Sequence(de.Raw(), length=2)
        assert de.shape_of(shape) is shape

    def test_unsupported(self) -> None:
        with _pytest.raises(TypeError, match="cannot derive"):
            de.shape_of(complex)
