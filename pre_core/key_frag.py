"""
pre_core.key_frag
-----------------
Delivery of one key fragment to one proxy node.

The publisher signs ``hrac | kfrag`` and encrypts the signed bundle
(AuthorizedKeyFrag) to the node's public key. The node can only recover a
usable fragment when it holds the matching secret key, knows the policy's
HRAC and trusts the publisher's verifying key.
"""

from __future__ import annotations

from . import crypto
from .crypto import PublicKey, SecretKey, Signer, VerifiedKeyFrag
from .errors import CoreError, CryptoError, FieldError
from .fields import CAPSULE, SIGNATURE
from .hrac import HRAC
from .versioning import BYTES, Field, ProtocolObject


def _kfrag_message(hrac: HRAC, kfrag_bytes: bytes) -> bytes:
    return bytes(hrac) + kfrag_bytes


class AuthorizedKeyFrag(ProtocolObject):
    """Publisher-signed fragment, the plaintext inside an EncryptedKeyFrag."""

    BRAND = b"AKFr"
    VERSION = (1, 0)
    FIELDS = (
        Field("signature", SIGNATURE),
        Field("kfrag", BYTES),
    )

    def __init__(self, signer: Signer, hrac: HRAC, verified_kfrag: VerifiedKeyFrag):
        kfrag_bytes = crypto.kfrag_to_bytes(verified_kfrag)
        self._set(
            signature=crypto.sign(signer, _kfrag_message(hrac, kfrag_bytes)),
            kfrag=kfrag_bytes,
        )

    def verify(self, hrac: HRAC, publisher_verifying_key: PublicKey) -> VerifiedKeyFrag:
        if not crypto.verify(self.signature, publisher_verifying_key, _kfrag_message(hrac, self.kfrag)):
            raise CryptoError("Key fragment signature does not match the HRAC and publisher key")
        try:
            return crypto.kfrag_from_verified_bytes(self.kfrag)
        except FieldError as exc:
            raise CryptoError(f"Signed key fragment is unreadable: {exc}") from exc


class EncryptedKeyFrag(ProtocolObject):
    BRAND = b"EKFr"
    VERSION = (1, 0)
    FIELDS = (
        Field("capsule", CAPSULE),
        Field("ciphertext", BYTES),
    )

    def __init__(self, signer: Signer, recipient_key: PublicKey, hrac: HRAC, verified_kfrag: VerifiedKeyFrag):
        auth_kfrag = AuthorizedKeyFrag(signer, hrac, verified_kfrag)
        capsule, ciphertext = crypto.encrypt(recipient_key, auth_kfrag.to_bytes())
        self._set(capsule=capsule, ciphertext=bytes(ciphertext))

    def decrypt(self, secret_key: SecretKey, hrac: HRAC, publisher_verifying_key: PublicKey) -> VerifiedKeyFrag:
        """
        Recover the fragment. Raises CryptoError if the ciphertext was not
        meant for ``secret_key``, was issued under a different HRAC, or was
        not signed by ``publisher_verifying_key``.
        """
        plaintext = crypto.decrypt_original(secret_key, self.capsule, self.ciphertext)
        try:
            auth_kfrag = AuthorizedKeyFrag.from_bytes(plaintext)
        except CoreError as exc:
            raise CryptoError(f"Decrypted key fragment is malformed: {exc}") from exc
        return auth_kfrag.verify(hrac, publisher_verifying_key)
