"""
Tests for typed object binding
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pytest

from proto_mapper.exceptions import ConversionError
from proto_mapper.utils.binding import bind, dict_to_object


class Level(Enum):
    LOW = 1
    HIGH = 2


@dataclass
class Point:
    x: int
    y: int = 0


@dataclass
class Shape:
    name: str
    points: List[Point] = field(default_factory=list)
    level: Optional[Level] = None
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Dangling:
    child: "Missing"  # noqa: F821


class TestScalars:
    """Test scalar binding"""

    def test_matching_scalars(self):
        assert bind("a", str) == "a"
        assert bind(3, int) == 3
        assert bind(True, bool) is True

    def test_int_accepted_as_float(self):
        value = bind(3, float)
        assert value == 3.0
        assert isinstance(value, float)

    def test_numeric_string_accepted_as_int(self):
        assert bind("42", int) == 42

    @pytest.mark.parametrize("value,hint", [
        ("abc", int),
        (1.5, int),
        (1, str),
        (["a"], str),
        ("maybe", bool),
    ])
    def test_mismatched_scalars(self, value, hint):
        """Test values with no lossless conversion fail"""
        with pytest.raises(ConversionError):
            bind(value, hint)

    def test_null_requires_optional(self):
        assert bind(None, Optional[str]) is None
        with pytest.raises(ConversionError):
            bind(None, str)

    def test_any_passes_through(self):
        value = {"nested": [1, "two"]}
        assert bind(value, Any) == value


class TestContainers:
    """Test list, tuple and dict binding"""

    def test_list_of_strings(self):
        assert bind(["hello", "world"], List[str]) == ["hello", "world"]

    def test_sequence_hint(self):
        assert list(bind(["a"], Sequence[str])) == ["a"]

    def test_list_item_error_location(self):
        with pytest.raises(ConversionError, match=r"\$\.items\[1\]"):
            bind(["a", 1], List[str], "$.items")

    def test_list_rejects_scalar(self):
        with pytest.raises(ConversionError):
            bind("hello", List[str])

    def test_fixed_tuple(self):
        assert bind(["a", 1], Tuple[str, int]) == ("a", 1)
        with pytest.raises(ConversionError):
            bind(["a"], Tuple[str, int])

    def test_variadic_tuple(self):
        assert bind([1, 2, 3], Tuple[int, ...]) == (1, 2, 3)

    def test_dict_values(self):
        assert bind({"a": 1}, Dict[str, int]) == {"a": 1}
        with pytest.raises(ConversionError, match=r"\$\.a"):
            bind({"a": "x"}, Dict[str, int])

    def test_union_tries_members(self):
        assert bind("x", Union[int, str]) == "x"
        with pytest.raises(ConversionError):
            bind([1.5], Union[int, str])


class TestDataclasses:
    """Test dataclass binding"""

    def test_nested_dataclass(self):
        shape = bind(
            {"name": "tri", "points": [{"x": 1, "y": 2}, {"x": 3}], "level": 2, "meta": {"k": [1]}},
            Shape,
        )
        assert shape == Shape(name="tri", points=[Point(1, 2), Point(3, 0)], level=Level.HIGH, meta={"k": [1]})
        assert type(shape.points[0]) is Point

    def test_enum_by_value(self):
        assert bind(1, Level) == Level.LOW
        with pytest.raises(ConversionError):
            bind(3, Level)

    def test_missing_required_field(self):
        with pytest.raises(ConversionError, match=r"\$\.x: Field required"):
            dict_to_object({"y": 1}, Point)

    def test_nested_error_location(self):
        with pytest.raises(ConversionError, match=r"\$\.points\[1\]\.x"):
            dict_to_object({"name": "tri", "points": [{"x": 1}, {"x": "far"}]}, Shape)

    def test_unknown_fields(self):
        assert dict_to_object({"x": 1, "z": 9}, Point) == Point(1)
        with pytest.raises(ConversionError, match=r"unknown fields for Point: \$\.z"):
            dict_to_object({"x": 1, "z": 9}, Point, fail_on_unknown=True)

    def test_unknown_fields_on_nested_objects(self):
        data = {"name": "tri", "points": [{"x": 1}, {"x": 2, "w": 0}]}
        assert dict_to_object(data, Shape).points[1] == Point(2)
        with pytest.raises(ConversionError, match=r"\$\.points\[1\]\.w"):
            dict_to_object(data, Shape, fail_on_unknown=True)

    def test_non_dataclass_target(self):
        with pytest.raises(ConversionError, match="not a dataclass"):
            dict_to_object({"x": 1}, dict)

    def test_non_object_data(self):
        with pytest.raises(ConversionError, match="expected an object for Point"):
            dict_to_object([1], Point)

    def test_unresolvable_annotation(self):
        """Test a field type that cannot be resolved fails as a conversion error"""
        with pytest.raises(ConversionError, match="Dangling"):
            dict_to_object({"child": 1}, Dangling)
