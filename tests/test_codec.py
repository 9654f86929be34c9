"""Tests for codec serialization/deserialization."""

from decimal import Decimal
from typing import BinaryIO

import pytest

from keepsake.codec import deserialize, is_storable, serialize, type_label
from keepsake.protocol import IStorable


class Point:
    """A storable domain type."""

    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def get_stable_hash(self) -> str:
        import hashlib

        return hashlib.sha256(f"point:{self.x},{self.y}".encode("utf-8")).hexdigest()

    def to_stream(self, stream: BinaryIO) -> None:
        stream.write(self.x.to_bytes(8, byteorder="big", signed=True))
        stream.write(self.y.to_bytes(8, byteorder="big", signed=True))

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "Point":
        x = int.from_bytes(stream.read(8), byteorder="big", signed=True)
        y = int.from_bytes(stream.read(8), byteorder="big", signed=True)
        return cls(x, y)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return False
        return (self.x, self.y) == (other.x, other.y)


class TestSerialize:
    """Tests for serialize() function."""

    def test_serialize_none(self):
        """Test serialization of None."""
        assert serialize(None) == b"none"

    def test_serialize_bool(self):
        """Test serialization of bools."""
        assert serialize(True) == b"bool\x01"
        assert serialize(False) == b"bool\x00"

    def test_serialize_int_zero(self):
        """Test serialization of int zero."""
        data = serialize(0)
        assert data.startswith(b"int_")
        assert len(data) == 4 + 8 + 1  # tag + length + one byte

    @pytest.mark.parametrize("value", [1, -1, 127, 128, -128, -129, 2**63, -(2**100)])
    def test_int_round_trip(self, value):
        """Test integers of any size survive."""
        assert deserialize(serialize(value)) == value

    def test_float(self):
        """Test floats keep their exact value."""
        data = serialize(0.1)
        assert data.startswith(b"flt_")
        assert deserialize(data) == 0.1

    def test_str(self):
        """Test strings including non-ASCII text."""
        assert deserialize(serialize("")) == ""
        assert deserialize(serialize("héllo ✓")) == "héllo ✓"

    def test_bytes(self):
        """Test raw bytes."""
        assert deserialize(serialize(b"\x00\xff")) == b"\x00\xff"

    def test_decimal(self):
        """Test Decimal keeps its precision."""
        value = deserialize(serialize(Decimal("3.14159")))
        assert isinstance(value, Decimal)
        assert value == Decimal("3.14159")

    def test_containers_keep_kind(self):
        """Test that lists and tuples are distinguished."""
        assert deserialize(serialize([1, 2])) == [1, 2]
        value = deserialize(serialize((1, 2)))
        assert isinstance(value, tuple)
        assert value == (1, 2)

    def test_dict_deterministic(self):
        """Test that key order does not change the encoding."""
        assert serialize({"a": 1, "b": 2}) == serialize({"b": 2, "a": 1})

    def test_nested(self):
        """Test a nested structure."""
        value = {"user": {"role": "admin", "ids": [1, (2, 3)], "score": Decimal("9.5")}}
        assert deserialize(serialize(value)) == value

    def test_storable(self):
        """Test IStorable types are encoded with their type name."""
        data = serialize({"at": Point(3, -4)})
        assert b"test_codec:Point" in data
        assert deserialize(data) == {"at": Point(3, -4)}

    @pytest.mark.parametrize(
        "value",
        [object(), {1: "a"}, lambda: None, {"a": {1, 2}}, bytearray(b"x")],
    )
    def test_unsupported(self, value):
        """Test that values outside the storable universe raise TypeError."""
        with pytest.raises(TypeError, match="not storable"):
            serialize(value)

    def test_open_file_rejected(self, tmp_path):
        """Test that a live file handle cannot be serialized."""
        with open(tmp_path / "handle.txt", "w") as handle:
            with pytest.raises(TypeError):
                serialize({"handle": handle})


class TestDeserialize:
    """Tests for deserialize() error handling."""

    def test_empty(self):
        """Test empty input."""
        with pytest.raises(ValueError, match="truncated type tag"):
            deserialize(b"")

    def test_unknown_tag(self):
        """Test an unknown type tag."""
        with pytest.raises(ValueError, match="Unknown type tag"):
            deserialize(b"zzzz")

    def test_truncated_str(self):
        """Test a string shorter than its length prefix."""
        data = serialize("hello")[:-2]
        with pytest.raises(ValueError, match="truncated str data"):
            deserialize(data)

    def test_truncated_dict(self):
        """Test a dict missing its values."""
        data = serialize({"a": 1, "b": 2})
        with pytest.raises(ValueError, match="truncated"):
            deserialize(data[:-5])

    def test_trailing_data(self):
        """Test that extra bytes are rejected."""
        with pytest.raises(ValueError, match="trailing data"):
            deserialize(serialize(1) + b"none")

    def test_unknown_storable(self):
        """Test a storable type that cannot be imported."""
        name = b"no_such_module_xyz:Thing"
        data = b"stor" + len(name).to_bytes(4, byteorder="big") + name
        with pytest.raises(ValueError, match="Cannot import"):
            deserialize(data)


class TestIsStorable:
    """Tests for is_storable() function."""

    def test_primitives(self):
        """Test that scalars are storable."""
        for value in (None, True, 1, 1.5, "s", b"b", Decimal("1")):
            assert is_storable(value) is True

    def test_containers(self):
        """Test containers are checked recursively."""
        assert is_storable({"a": [1, (2, {"b": None})]}) is True
        assert is_storable({"a": [1, object()]}) is False

    def test_non_string_keys(self):
        """Test that dict keys must be strings."""
        assert is_storable({1: "a"}) is False

    def test_storable_protocol(self):
        """Test that IStorable implementors are storable."""
        assert isinstance(Point(1, 2), IStorable)
        assert is_storable(Point(1, 2)) is True


class TestTypeLabel:
    """Tests for type_label() function."""

    @pytest.mark.parametrize(
        "value, label",
        [
            (None, "none"),
            (True, "bool"),
            (1, "int"),
            (1.5, "float"),
            ("s", "str"),
            (b"b", "bytes"),
            (Decimal("1"), "decimal"),
            ({}, "dict"),
            ([], "list"),
            ((), "tuple"),
            (Point(0, 0), "object"),
        ],
    )
    def test_labels(self, value, label):
        """Test the label for each kind of value."""
        assert type_label(value) == label
