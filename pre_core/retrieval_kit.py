from __future__ import annotations
from typing import Iterable

from .address import ADDRESS, Address
from .crypto import Capsule
from .fields import CAPSULE
from .message_kit import MessageKit
from .versioning import Codec, Field, ProtocolObject, list_of

_ADDRESSES = list_of(ADDRESS)

# Sorted on the wire so equal sets encode identically.
QUERIED_ADDRESSES = Codec(
    "address_set",
    lambda v: _ADDRESSES.encode(sorted(v)),
    lambda v: frozenset(_ADDRESSES.decode(v)),
)


class RetrievalKit(ProtocolObject):
    """
    What a retriever needs to ask proxy nodes for fragments of one capsule,
    plus the nodes it has already queried.
    """

    BRAND = b"RKit"
    VERSION = (1, 0)
    FIELDS = (
        Field("capsule", CAPSULE),
        Field("queried_addresses", QUERIED_ADDRESSES),
    )

    def __init__(self, capsule: Capsule, queried_addresses: Iterable[Address] = ()):
        self._set(
            capsule=capsule,
            queried_addresses=frozenset(
                a if isinstance(a, Address) else Address(a) for a in queried_addresses),
        )

    @classmethod
    def from_message_kit(cls, message_kit: MessageKit) -> "RetrievalKit":
        return cls(message_kit.capsule)

    def with_queried(self, addresses: Iterable[Address]) -> "RetrievalKit":
        extra = (a if isinstance(a, Address) else Address(a) for a in addresses)
        return RetrievalKit(self.capsule, self.queried_addresses.union(extra))
