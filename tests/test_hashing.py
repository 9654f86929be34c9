"""Tests for hashing utilities."""

import hashlib
from decimal import Decimal
from typing import BinaryIO

import pytest

from keepsake.hashing import hash_key


class Token:
    """Minimal IStorable implementor."""

    def __init__(self, value: str) -> None:
        self.value = value

    def get_stable_hash(self) -> str:
        return hashlib.sha256(b"token:" + self.value.encode("utf-8")).hexdigest()

    def to_stream(self, stream: BinaryIO) -> None:
        stream.write(self.value.encode("utf-8"))

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "Token":
        return cls(stream.read().decode("utf-8"))


class TestHashKey:
    """Tests for hash_key function."""

    def test_hash_string(self):
        """Test hashing a string."""
        h1 = hash_key("hello")
        h2 = hash_key("hello")
        assert h1 == h2
        assert len(h1) == 64
        assert hash_key("world") != h1

    def test_hash_integer(self):
        """Test hashing an integer."""
        assert hash_key(42) == hash_key(42)
        assert hash_key(43) != hash_key(42)

    def test_hash_float(self):
        """Test hashing a float."""
        assert hash_key(1.5) == hash_key(1.5)
        assert hash_key(1.5) != hash_key(2.5)

    def test_hash_decimal(self):
        """Test hashing a Decimal."""
        assert hash_key(Decimal("1.5")) == hash_key(Decimal("1.5"))
        assert len(hash_key(Decimal("1.5"))) == 64

    def test_hash_none(self):
        """Test hashing None."""
        assert hash_key(None) == hash_key(None)
        assert len(hash_key(None)) == 64

    def test_types_do_not_collide(self):
        """Test that equal-looking values of different types hash differently."""
        values = [None, "", b"", 0, False, 0.0, Decimal("0"), [], (), {}, "0", "None"]
        hashes = {hash_key(value) for value in values}
        assert len(hashes) == len(values)

    def test_int_and_str(self):
        """Test that 1 and "1" differ."""
        assert hash_key(1) != hash_key("1")

    def test_bool_and_int(self):
        """Test that True and 1 differ."""
        assert hash_key(True) != hash_key(1)

    def test_hash_storable(self):
        """Test hashing an IStorable object uses its stable hash."""
        token = Token("abc")
        assert hash_key(token) == token.get_stable_hash()

    def test_hash_dict_key_order(self):
        """Test that dict key order does not matter."""
        assert hash_key({"a": 1, "b": 2}) == hash_key({"b": 2, "a": 1})

    def test_hash_dict_different_values(self):
        """Test that different dict values produce different hashes."""
        assert hash_key({"a": 1}) != hash_key({"a": 2})

    def test_hash_dict_keys_and_values_not_interchangeable(self):
        """Test that swapping keys and values changes the hash."""
        assert hash_key({"a": "b"}) != hash_key({"b": "a"})

    def test_hash_list_order_matters(self):
        """Test that list order matters for hashing."""
        assert hash_key([1, 2, 3]) != hash_key([3, 2, 1])

    def test_hash_list_and_tuple(self):
        """Test that a list and a tuple with the same items differ."""
        assert hash_key([1, 2]) != hash_key((1, 2))

    def test_hash_nested_structures(self):
        """Test hashing nested structures."""
        value = {"a": 1, "b": {"c": 2, "d": [3, 4]}, "e": Token("test")}
        assert hash_key(value) == hash_key(value)
        assert hash_key(value) != hash_key({"a": 1, "b": {"c": 2, "d": [4, 3]}})

    def test_hash_known_value(self):
        """Test that hashes are stable across runs."""
        expected = hashlib.sha256(b"str:hello").hexdigest()
        assert hash_key("hello") == expected

    def test_hash_unsupported_type(self):
        """Test that unsupported types raise TypeError."""
        with pytest.raises(TypeError, match="Unsupported type"):
            hash_key(object())

    def test_hash_unsupported_nested(self):
        """Test that unsupported nested values raise TypeError."""
        with pytest.raises(TypeError):
            hash_key({"fn": lambda: None})
