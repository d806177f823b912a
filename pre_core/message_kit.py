from __future__ import annotations
from typing import Optional, Sequence

from . import crypto
from .crypto import PublicKey, SecretKey, VerifiedCapsuleFrag
from .errors import InsufficientFragments
from .fields import CAPSULE
from .versioning import BYTES, Field, ProtocolObject


class MessageKit(ProtocolObject):
    """
    Application data encrypted under a policy key.

    The capsule carries the encapsulated symmetric key; ``ciphertext`` is the
    payload sealed with it. The holder of the policy secret key opens it
    directly; a delegate opens it with enough re-encrypted capsule fragments.
    """

    BRAND = b"MKit"
    VERSION = (1, 0)
    FIELDS = (
        Field("capsule", CAPSULE),
        Field("ciphertext", BYTES),
    )

    def __init__(self, policy_encrypting_key: PublicKey, plaintext: bytes):
        capsule, ciphertext = crypto.encrypt(policy_encrypting_key, bytes(plaintext))
        self._set(capsule=capsule, ciphertext=bytes(ciphertext))

    def decrypt(self, secret_key: SecretKey) -> bytes:
        return crypto.decrypt_original(secret_key, self.capsule, self.ciphertext)

    def decrypt_reencrypted(
        self,
        secret_key: SecretKey,
        policy_encrypting_key: PublicKey,
        capsule_frags: Sequence[VerifiedCapsuleFrag],
        threshold: Optional[int] = None,
    ) -> bytes:
        """
        Open the kit with fragments re-encrypted for ``secret_key``'s owner.

        ``threshold`` is the policy's m (from the TreasureMap). When given,
        fewer fragments fail fast with InsufficientFragments; otherwise the
        engine's own aggregation check decides and failures are CryptoError.
        """
        capsule_frags = list(capsule_frags)
        if threshold is not None and len(capsule_frags) < threshold:
            raise InsufficientFragments(
                f"{len(capsule_frags)} capsule fragments supplied, {threshold} required")
        return crypto.decrypt_reencrypted(
            secret_key, policy_encrypting_key, self.capsule, capsule_frags, self.ciphertext)
