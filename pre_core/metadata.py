"""
pre_core.metadata
-----------------
One round of fleet gossip.

The requester sends its FleetStateChecksum and any nodes it wants to
announce. The responder answers with a signed batch of nodes and a
timestamp; the batch must pass MetadataResponse.verify before any of it is
merged into a local directory.
"""

from __future__ import annotations
from typing import List, Optional, Sequence

from . import crypto
from .crypto import PublicKey, Signer
from .errors import CryptoError
from .fields import SIGNATURE
from .fleet_state import CHECKSUM_FIELD, FleetStateChecksum
from .node_metadata import NodeMetadata
from .utils import now_epoch
from .versioning import U32, Field, ProtocolObject, Record, check_uint, list_of, nested, record

NODE_LIST = list_of(nested(NodeMetadata))


class MetadataRequest(ProtocolObject):
    BRAND = b"MdRq"
    VERSION = (1, 0)
    FIELDS = (
        Field("fleet_state_checksum", CHECKSUM_FIELD),
        Field("announce_nodes", NODE_LIST),
    )

    def __init__(self, fleet_state_checksum: FleetStateChecksum, announce_nodes: Sequence[NodeMetadata] = ()):
        self._set(
            fleet_state_checksum=fleet_state_checksum,
            announce_nodes=list(announce_nodes),
        )


class MetadataResponsePayload(Record):
    FIELDS = (
        Field("timestamp_epoch", U32),
        Field("announce_nodes", NODE_LIST),
    )

    def __init__(self, timestamp_epoch: Optional[int], announce_nodes: Sequence[NodeMetadata]):
        if timestamp_epoch is None:
            timestamp_epoch = now_epoch()
        self._set(
            timestamp_epoch=check_uint("timestamp_epoch", timestamp_epoch, 32),
            announce_nodes=list(announce_nodes),
        )


class MetadataResponse(ProtocolObject):
    BRAND = b"MdRs"
    VERSION = (1, 0)
    FIELDS = (
        Field("signature", SIGNATURE),
        Field("payload", record(MetadataResponsePayload)),
    )

    def __init__(self, signer: Signer, payload: MetadataResponsePayload):
        self._set(
            signature=crypto.sign(signer, payload.to_bytes()),
            payload=payload,
        )

    def verify(self, verifying_key: PublicKey) -> MetadataResponsePayload:
        if not crypto.verify(self.signature, verifying_key, self.payload.to_bytes()):
            raise CryptoError("Metadata response signature is invalid")
        return self.payload

    def verified_nodes(self, verifying_key: PublicKey) -> List[NodeMetadata]:
        """Nodes from a response whose batch signature checks out, minus any bad announcement."""
        return [node for node in self.verify(verifying_key).announce_nodes if node.verify()]
