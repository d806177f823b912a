from __future__ import annotations
from typing import Tuple

from . import crypto
from .address import ADDRESS, Address
from .crypto import PublicKey, Signer
from .errors import CryptoError
from .fields import SIGNATURE
from .key_frag import EncryptedKeyFrag
from .logger import get_logger
from .versioning import Field, ProtocolObject, nested

log = get_logger("PRE.Revocation")


def _revocation_message(address: Address, encrypted_kfrag: EncryptedKeyFrag) -> bytes:
    return bytes(address) + encrypted_kfrag.to_bytes()


class RevocationOrder(ProtocolObject):
    """
    Publisher-signed instruction for the node at ``address`` to discard
    ``encrypted_kfrag``. The order itself deletes nothing; the node checks
    the signature and acts on its own storage.
    """

    BRAND = b"Revo"
    VERSION = (1, 0)
    FIELDS = (
        Field("address", ADDRESS),
        Field("encrypted_kfrag", nested(EncryptedKeyFrag)),
        Field("signature", SIGNATURE),
    )

    def __init__(self, signer: Signer, address: Address, encrypted_kfrag: EncryptedKeyFrag):
        if not isinstance(address, Address):
            address = Address(address)
        self._set(
            address=address,
            encrypted_kfrag=encrypted_kfrag,
            signature=crypto.sign(signer, _revocation_message(address, encrypted_kfrag)),
        )

    def verify_signature(self, publisher_verifying_key: PublicKey) -> bool:
        ok = crypto.verify(
            self.signature, publisher_verifying_key,
            _revocation_message(self.address, self.encrypted_kfrag))
        if not ok:
            log.debug(f"[REVOKE] signature rejected for node {self.address.hex()}")
        return ok

    def verify(self, publisher_verifying_key: PublicKey) -> Tuple[Address, EncryptedKeyFrag]:
        if not self.verify_signature(publisher_verifying_key):
            raise CryptoError("Revocation order signature is invalid")
        return self.address, self.encrypted_kfrag
