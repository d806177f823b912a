from __future__ import annotations
from typing import Iterable, Optional
import struct

from . import crypto
from .errors import FieldError
from .node_metadata import NodeMetadata
from .versioning import converted

CHECKSUM_SIZE = crypto.DIGEST_SIZE
_LENGTH = struct.Struct("<I")


class FleetStateChecksum:
    """
    Digest of a node's view of the fleet.

    Peers are put in canonical order (by address, then by encoding) and
    deduplicated before hashing, so two nodes that know the same set of
    announcements agree on the checksum regardless of arrival order. The
    local node's own record, when present, is hashed first.
    """

    __slots__ = ("_digest",)

    def __init__(self, digest: bytes):
        digest = bytes(digest)
        if len(digest) != CHECKSUM_SIZE:
            raise FieldError(f"Checksum must be {CHECKSUM_SIZE} bytes, got {len(digest)}")
        object.__setattr__(self, "_digest", digest)

    @classmethod
    def from_nodes(cls, this_node: Optional[NodeMetadata], other_nodes: Iterable[NodeMetadata]) -> "FleetStateChecksum":
        encoded = {node.to_bytes(): node.address for node in other_nodes}
        ordered = sorted(encoded, key=lambda data: (encoded[data], data))
        parts = []
        if this_node is None:
            parts.append(b"\x00")
        else:
            own = this_node.to_bytes()
            parts += [b"\x01", _LENGTH.pack(len(own)), own]
        for data in ordered:
            parts += [_LENGTH.pack(len(data)), data]
        return cls(crypto.digest(*parts))

    @classmethod
    def from_bytes(cls, data: bytes) -> "FleetStateChecksum":
        return cls(data)

    def __setattr__(self, name, value):
        raise AttributeError("FleetStateChecksum is immutable")

    def __bytes__(self) -> bytes:
        return self._digest

    def to_bytes(self) -> bytes:
        return self._digest

    def hex(self) -> str:
        return self._digest.hex()

    def __eq__(self, other):
        if not isinstance(other, FleetStateChecksum):
            return NotImplemented
        return self._digest == other._digest

    def __hash__(self):
        return hash(self._digest)

    def __repr__(self):
        return f"FleetStateChecksum({self._digest.hex()[:16]})"


CHECKSUM_FIELD = converted("fleet_state_checksum", bytes, FleetStateChecksum.from_bytes)
