"""Comparable, hashable key types with a fixed binary form, and the errors shared by the trees."""

from __future__ import annotations

import operator
from functools import total_ordering
from typing import Any, ClassVar

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193


def _fnv1a32(data: bytes) -> int:
    h = _FNV32_OFFSET
    for byte in data:
        h ^= byte
        h = (h * _FNV32_PRIME) & 0xFFFFFFFF
    return h


def _signed64(value: int) -> int:
    value &= (1 << 64) - 1
    if value >> 63:
        value -= 1 << 64
    return value


class NotFoundError(KeyError):
    """Raised when a key is not present in a container."""

    def __init__(self, key: Any) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"key not found: {self.key!r}"


class InvalidKeyError(ValueError):
    """Raised when a key cannot be stored in a container."""

    def __init__(self, key: Any, reason: str) -> None:
        super().__init__(f"invalid key {key!r}: {reason}")
        self.key = key
        self.reason = reason


@total_ordering
class FixedInt:
    """An integer of fixed width that wraps on construction like a machine integer.

    Values compare equal and order only against the same class.
    """

    __slots__ = ("_value",)

    bits: ClassVar[int] = 64
    signed: ClassVar[bool] = True
    wire_size: ClassVar[int] = 8
    _fold_hash: ClassVar[bool] = False

    def __init__(self, value: int = 0) -> None:
        v = operator.index(value) & ((1 << self.bits) - 1)
        if self.signed and v >> (self.bits - 1):
            v -= 1 << self.bits
        self._value = v

    @property
    def value(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __eq__(self, other: object) -> bool:
        if type(other) is type(self):
            return self._value == other._value  # type: ignore[attr-defined]
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if type(other) is type(self):
            return self._value < other._value  # type: ignore[attr-defined]
        return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def marshal_binary(self) -> bytes:
        """Big-endian encoding of the value in ``wire_size`` bytes."""
        width = self.wire_size * 8
        return (self._value & ((1 << width) - 1)).to_bytes(self.wire_size, "big")

    @classmethod
    def unmarshal_binary(cls, data: bytes) -> "FixedInt":
        """Decode a value written by :meth:`marshal_binary`."""
        if len(data) != cls.wire_size:
            raise ValueError("data wrong size")
        return cls(int.from_bytes(bytes(data), "big"))

    def key_hash(self) -> int:
        """Integer hash of the key, stable across runs."""
        if self._fold_hash:
            return _signed64(self._value >> 32) ^ _signed64(self._value)
        return _signed64(self._value)


class Int8(FixedInt):
    __slots__ = ()
    bits, signed, wire_size = 8, True, 1


class UInt8(FixedInt):
    __slots__ = ()
    bits, signed, wire_size = 8, False, 1


class Int16(FixedInt):
    __slots__ = ()
    bits, signed, wire_size = 16, True, 2


class UInt16(FixedInt):
    __slots__ = ()
    bits, signed, wire_size = 16, False, 2


class Int32(FixedInt):
    __slots__ = ()
    bits, signed, wire_size = 32, True, 4


class UInt32(FixedInt):
    __slots__ = ()
    bits, signed, wire_size = 32, False, 4


class Int64(FixedInt):
    __slots__ = ()
    bits, signed, wire_size = 64, True, 8
    _fold_hash = True


class UInt64(FixedInt):
    __slots__ = ()
    bits, signed, wire_size = 64, False, 8
    _fold_hash = True


class Int(FixedInt):
    """Machine-word signed integer; its binary form holds only the low 32 bits."""

    __slots__ = ()
    bits, signed, wire_size = 64, True, 4


class UInt(FixedInt):
    """Machine-word unsigned integer; its binary form holds only the low 32 bits."""

    __slots__ = ()
    bits, signed, wire_size = 64, False, 4


@total_ordering
class String:
    """A text key ordered by its UTF-8 bytes."""

    __slots__ = ("_value",)

    def __init__(self, value: "str | String" = "") -> None:
        if isinstance(value, String):
            value = value.value
        if not isinstance(value, str):
            raise TypeError(f"String needs a str, not {type(value).__name__}")
        self._value = value

    @property
    def value(self) -> str:
        return self._value

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"String({self._value!r})"

    def __len__(self) -> int:
        return len(self._value)

    def __eq__(self, other: object) -> bool:
        if type(other) is String:
            return self._value == other._value
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if type(other) is String:
            return self._value < other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("String", self._value))

    def marshal_binary(self) -> bytes:
        return self._value.encode("utf-8", "surrogateescape")

    @classmethod
    def unmarshal_binary(cls, data: bytes) -> "String":
        return cls(bytes(data).decode("utf-8", "surrogateescape"))

    def key_hash(self) -> int:
        """32-bit FNV-1a hash of the UTF-8 bytes."""
        return _fnv1a32(self.marshal_binary())


@total_ordering
class ByteSlice:
    """A byte-string key ordered lexicographically."""

    __slots__ = ("_value",)

    def __init__(self, value: Any = b"") -> None:
        if isinstance(value, ByteSlice):
            value = value.value
        if isinstance(value, str):
            raise TypeError("ByteSlice needs bytes, not str")
        self._value = bytes(value)

    @property
    def value(self) -> bytes:
        return self._value

    def __bytes__(self) -> bytes:
        return self._value

    def __len__(self) -> int:
        return len(self._value)

    def __iter__(self):
        return iter(self._value)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return ByteSlice(self._value[index])
        return self._value[index]

    def __repr__(self) -> str:
        return f"ByteSlice({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if type(other) is ByteSlice:
            return self._value == other._value
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if type(other) is ByteSlice:
            return self._value < other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("ByteSlice", self._value))

    def marshal_binary(self) -> bytes:
        return self._value

    @classmethod
    def unmarshal_binary(cls, data: bytes) -> "ByteSlice":
        return cls(data)

    def key_hash(self) -> int:
        """32-bit FNV-1a hash of the bytes."""
        return _fnv1a32(self._value)


@total_ordering
class MapEntry:
    """A key/value pair that compares, orders and hashes by its key alone."""

    __slots__ = ("key", "value")

    def __init__(self, key: Any, value: Any = None) -> None:
        self.key = key
        self.value = value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MapEntry):
            return self.key == other.key
        return self.key == other

    def __lt__(self, other: object) -> bool:
        if isinstance(other, MapEntry):
            return self.key < other.key
        return self.key < other

    def __hash__(self) -> int:
        return hash(self.key)

    def key_hash(self) -> int:
        return self.key.key_hash()

    def __iter__(self):
        yield self.key
        yield self.value

    def __str__(self) -> str:
        return f"<MapEntry {self.key}: {self.value}>"

    __repr__ = __str__