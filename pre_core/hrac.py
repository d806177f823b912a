from __future__ import annotations

from . import crypto
from .crypto import PublicKey
from .errors import FieldError
from .versioning import converted

HRAC_SIZE = 16


class HRAC:
    """
    Hashed Resource Access Code.

    A policy identifier both parties can compute independently:

        HRAC = SHA3-256(publisher_vk | bob_vk | label)[:16]

    Messages that belong to a policy echo it so a recipient can refuse a
    fragment replayed from another policy.
    """

    __slots__ = ("_digest",)

    def __init__(self, publisher_verifying_key: PublicKey, bob_verifying_key: PublicKey, label: bytes):
        full = crypto.digest(
            crypto.public_key_to_bytes(publisher_verifying_key),
            crypto.public_key_to_bytes(bob_verifying_key),
            label.encode("utf-8") if isinstance(label, str) else bytes(label),
        )
        object.__setattr__(self, "_digest", full[:HRAC_SIZE])

    @classmethod
    def from_bytes(cls, data: bytes) -> "HRAC":
        data = bytes(data)
        if len(data) != HRAC_SIZE:
            raise FieldError(f"HRAC must be {HRAC_SIZE} bytes, got {len(data)}")
        obj = cls.__new__(cls)
        object.__setattr__(obj, "_digest", data)
        return obj

    def __setattr__(self, name, value):
        raise AttributeError("HRAC is immutable")

    def __bytes__(self) -> bytes:
        return self._digest

    def to_bytes(self) -> bytes:
        return self._digest

    def __eq__(self, other):
        if not isinstance(other, HRAC):
            return NotImplemented
        return self._digest == other._digest

    def __hash__(self):
        return hash(self._digest)

    def __repr__(self):
        return f"HRAC({self._digest.hex()})"


HRAC_FIELD = converted("hrac", bytes, HRAC.from_bytes)
