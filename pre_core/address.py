from __future__ import annotations
from functools import total_ordering

from .errors import InvalidAddress
from .versioning import converted

ADDRESS_SIZE = 20


@total_ordering
class Address:
    """20-byte node / staking account identifier."""

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes):
        if not isinstance(raw, (bytes, bytearray, memoryview)):
            raise InvalidAddress(f"Address must be bytes, got {type(raw).__name__}")
        raw = bytes(raw)
        if len(raw) != ADDRESS_SIZE:
            raise InvalidAddress(f"Address must be {ADDRESS_SIZE} bytes, got {len(raw)}")
        object.__setattr__(self, "_raw", raw)

    @classmethod
    def from_slice(cls, data: bytes) -> "Address":
        return cls(data)

    def __setattr__(self, name, value):
        raise AttributeError("Address is immutable")

    def __bytes__(self) -> bytes:
        return self._raw

    def __eq__(self, other):
        if not isinstance(other, Address):
            return NotImplemented
        return self._raw == other._raw

    def __lt__(self, other):
        if not isinstance(other, Address):
            return NotImplemented
        return self._raw < other._raw

    def __hash__(self):
        return hash(self._raw)

    def hex(self) -> str:
        return self._raw.hex()

    def __repr__(self):
        return f"Address(0x{self._raw.hex()})"


ADDRESS = converted("address", bytes, Address)
