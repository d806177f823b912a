"""
pre_core.node_metadata
----------------------
Self-signed node announcements gossiped between proxy nodes.

NodeMetadataPayload  the unsigned facts (address, domain, keys, endpoint)
NodeMetadata         payload + signature by the payload's own verifying key
"""

from __future__ import annotations
from typing import Optional

from . import crypto
from .address import ADDRESS, Address
from .crypto import PublicKey, Signer
from .fields import PUBLIC_KEY, SIGNATURE
from .logger import get_logger
from .versioning import BYTES, STR, U16, U32, Field, ProtocolObject, Record, check_uint, optional, record

log = get_logger("PRE.NodeMetadata")


class NodeMetadataPayload(Record):
    FIELDS = (
        Field("canonical_address", ADDRESS),
        Field("domain", STR),
        Field("timestamp_epoch", U32),
        Field("verifying_key", PUBLIC_KEY),
        Field("encrypting_key", PUBLIC_KEY),
        Field("certificate_bytes", BYTES),
        Field("host", STR),
        Field("port", U16),
        Field("decentralized_identity_evidence", optional(BYTES), default=None),
    )

    def __init__(
        self,
        canonical_address: Address,
        domain: str,
        timestamp_epoch: int,
        verifying_key: PublicKey,
        encrypting_key: PublicKey,
        certificate_bytes: bytes,
        host: str,
        port: int,
        decentralized_identity_evidence: Optional[bytes] = None,
    ):
        if not isinstance(canonical_address, Address):
            canonical_address = Address(canonical_address)
        self._set(
            canonical_address=canonical_address,
            domain=str(domain),
            timestamp_epoch=check_uint("timestamp_epoch", timestamp_epoch, 32),
            verifying_key=verifying_key,
            encrypting_key=encrypting_key,
            certificate_bytes=bytes(certificate_bytes),
            host=str(host),
            port=check_uint("port", port, 16),
            decentralized_identity_evidence=(
                None if decentralized_identity_evidence is None
                else bytes(decentralized_identity_evidence)),
        )


class NodeMetadata(ProtocolObject):
    BRAND = b"NdMd"
    VERSION = (1, 0)
    FIELDS = (
        Field("signature", SIGNATURE),
        Field("payload", record(NodeMetadataPayload)),
    )

    def __init__(self, signer: Signer, payload: NodeMetadataPayload):
        self._set(
            signature=crypto.sign(signer, payload.to_bytes()),
            payload=payload,
        )

    def verify(self) -> bool:
        """
        True if the payload was signed by its own verifying key.

        Returns False rather than raising so a gossip batch can be filtered
        node by node.
        """
        ok = crypto.verify(self.signature, self.payload.verifying_key, self.payload.to_bytes())
        if not ok:
            log.debug(f"[GOSSIP] bad signature on metadata for {self.payload.canonical_address.hex()}")
        return ok

    @property
    def address(self) -> Address:
        return self.payload.canonical_address
