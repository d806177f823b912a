"""
pre_core.reencryption
---------------------
Request/response exchange between a delegate (Bob) and one proxy node (Ursula).

ReencryptionRequest   capsules to re-encrypt + the policy context the node
                      needs to unlock its key fragment
ReencryptionResponse  one capsule fragment per requested capsule, in request
                      order, signed by the node
"""

from __future__ import annotations
from typing import List, Sequence

from . import crypto
from .crypto import Capsule, PublicKey, SecretKey, Signer, VerifiedCapsuleFrag, VerifiedKeyFrag
from .errors import CryptoError, FieldError
from .fields import CAPSULE, CAPSULE_FRAG, PUBLIC_KEY, SIGNATURE
from .hrac import HRAC, HRAC_FIELD
from .key_frag import EncryptedKeyFrag
from .logger import get_logger
from .versioning import Field, ProtocolObject, list_of, nested

log = get_logger("PRE.Reencryption")


class ReencryptionRequest(ProtocolObject):
    BRAND = b"ReRq"
    VERSION = (1, 0)
    FIELDS = (
        Field("capsules", list_of(CAPSULE)),
        Field("hrac", HRAC_FIELD),
        Field("encrypted_kfrag", nested(EncryptedKeyFrag)),
        Field("publisher_verifying_key", PUBLIC_KEY),
        Field("bob_verifying_key", PUBLIC_KEY),
    )

    def __init__(
        self,
        capsules: Sequence[Capsule],
        hrac: HRAC,
        encrypted_kfrag: EncryptedKeyFrag,
        publisher_verifying_key: PublicKey,
        bob_verifying_key: PublicKey,
    ):
        self._set(
            capsules=list(capsules),
            hrac=hrac,
            encrypted_kfrag=encrypted_kfrag,
            publisher_verifying_key=publisher_verifying_key,
            bob_verifying_key=bob_verifying_key,
        )
        self._validate()

    def _validate(self) -> None:
        if not self.capsules:
            raise FieldError("ReencryptionRequest needs at least one capsule")

    def decrypt_kfrag(self, secret_key: SecretKey) -> VerifiedKeyFrag:
        """Proxy side: unlock the node's fragment under this request's policy context."""
        return self.encrypted_kfrag.decrypt(secret_key, self.hrac, self.publisher_verifying_key)


def _response_message(capsules: Sequence[Capsule], cfrags: Sequence) -> bytes:
    return (b"".join(crypto.capsule_to_bytes(c) for c in capsules)
            + b"".join(crypto.cfrag_to_bytes(cf) for cf in cfrags))


class ReencryptionResponse(ProtocolObject):
    BRAND = b"ReRs"
    VERSION = (1, 0)
    FIELDS = (
        Field("cfrags", list_of(CAPSULE_FRAG)),
        Field("signature", SIGNATURE),
    )

    def __init__(
        self,
        signer: Signer,
        capsules: Sequence[Capsule],
        verified_capsule_frags: Sequence[VerifiedCapsuleFrag],
    ):
        capsules = list(capsules)
        verified_capsule_frags = list(verified_capsule_frags)
        if len(capsules) != len(verified_capsule_frags):
            raise FieldError(
                f"{len(verified_capsule_frags)} capsule fragments for {len(capsules)} capsules")
        cfrags = [crypto.unverify_cfrag(cf) for cf in verified_capsule_frags]
        self._set(
            cfrags=cfrags,
            signature=crypto.sign(signer, _response_message(capsules, cfrags)),
        )

    def verify(
        self,
        capsules: Sequence[Capsule],
        alice_verifying_key: PublicKey,
        ursula_verifying_key: PublicKey,
        policy_encrypting_key: PublicKey,
        bob_encrypting_key: PublicKey,
    ) -> List[VerifiedCapsuleFrag]:
        """
        Check the node's signature over the whole batch, then every fragment
        against its positional capsule. Any single failure rejects the whole
        response with CryptoError.
        """
        capsules = list(capsules)
        if len(capsules) != len(self.cfrags):
            raise CryptoError(
                f"Response has {len(self.cfrags)} fragments for {len(capsules)} capsules")
        if not crypto.verify(self.signature, ursula_verifying_key, _response_message(capsules, self.cfrags)):
            raise CryptoError("Re-encryption response signature is invalid")

        verified = []
        for position, (capsule, cfrag) in enumerate(zip(capsules, self.cfrags)):
            try:
                verified.append(crypto.verify_cfrag(
                    cfrag, capsule, alice_verifying_key, policy_encrypting_key, bob_encrypting_key))
            except CryptoError as exc:
                log.debug(f"[REENC] fragment {position} rejected, discarding whole response")
                raise CryptoError(f"Capsule fragment {position} failed verification") from exc
        return verified
