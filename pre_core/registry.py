"""
pre_core.registry
-----------------
Read-only brand table for every branded message type, built once at import.

``from_bytes`` decodes an envelope without knowing its type in advance by
looking up the brand in the table.
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Mapping, Type

from .dkg import ThresholdDecryptionRequest, ThresholdDecryptionResponse
from .errors import FormatError
from .key_frag import AuthorizedKeyFrag, EncryptedKeyFrag
from .message_kit import MessageKit
from .metadata import MetadataRequest, MetadataResponse
from .node_metadata import NodeMetadata
from .reencryption import ReencryptionRequest, ReencryptionResponse
from .retrieval_kit import RetrievalKit
from .revocation import RevocationOrder
from .treasure_map import AuthorizedTreasureMap, EncryptedTreasureMap, TreasureMap
from .versioning import ProtocolObject, unpack_header

PROTOCOL_OBJECTS = (
    MessageKit,
    EncryptedKeyFrag,
    AuthorizedKeyFrag,
    TreasureMap,
    AuthorizedTreasureMap,
    EncryptedTreasureMap,
    ReencryptionRequest,
    ReencryptionResponse,
    RetrievalKit,
    RevocationOrder,
    NodeMetadata,
    MetadataRequest,
    MetadataResponse,
    ThresholdDecryptionRequest,
    ThresholdDecryptionResponse,
)

BRANDS: Mapping[bytes, Type[ProtocolObject]] = MappingProxyType(
    {cls.BRAND: cls for cls in PROTOCOL_OBJECTS})


def from_bytes(data: bytes) -> ProtocolObject:
    brand, _, _, _ = unpack_header(data)
    cls = BRANDS.get(brand)
    if cls is None:
        raise FormatError(f"Unknown brand {brand!r}")
    return cls.from_bytes(data)
