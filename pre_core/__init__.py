"""
pre_core
========
Message layer of a proxy re-encryption access-delegation network
(publisher, delegate, proxy nodes).

Provides:
- Versioned binary envelope for every protocol message
- Policy identifier (HRAC) and key-fragment distribution (TreasureMap)
- Encrypted data envelope (MessageKit) and the re-encryption exchange
- Node metadata gossip (NodeMetadata, FleetStateChecksum, Metadata*)
- Threshold decryption request/response shapes
"""

from .address import Address
from .dkg import FerveoVariant, ThresholdDecryptionRequest, ThresholdDecryptionResponse
from .errors import (
    CoreError,
    CryptoError,
    FieldError,
    FormatError,
    InsufficientFragments,
    InvalidAddress,
    PolicyError,
    VersionError,
)
from .fleet_state import FleetStateChecksum
from .hrac import HRAC
from .key_frag import EncryptedKeyFrag
from .message_kit import MessageKit
from .metadata import MetadataRequest, MetadataResponse, MetadataResponsePayload
from .node_metadata import NodeMetadata, NodeMetadataPayload
from .reencryption import ReencryptionRequest, ReencryptionResponse
from .registry import from_bytes
from .retrieval_kit import RetrievalKit
from .revocation import RevocationOrder
from .treasure_map import EncryptedTreasureMap, TreasureMap

__all__ = [
    "Address",
    "HRAC",
    "EncryptedKeyFrag",
    "TreasureMap",
    "EncryptedTreasureMap",
    "MessageKit",
    "RetrievalKit",
    "ReencryptionRequest",
    "ReencryptionResponse",
    "RevocationOrder",
    "NodeMetadataPayload",
    "NodeMetadata",
    "FleetStateChecksum",
    "MetadataRequest",
    "MetadataResponsePayload",
    "MetadataResponse",
    "FerveoVariant",
    "ThresholdDecryptionRequest",
    "ThresholdDecryptionResponse",
    "from_bytes",
    "CoreError",
    "FormatError",
    "VersionError",
    "FieldError",
    "CryptoError",
    "InsufficientFragments",
    "PolicyError",
    "InvalidAddress",
]
