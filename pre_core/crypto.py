from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
from cryptography.hazmat.primitives import hashes
import umbral_pre
from umbral_pre import (
    Capsule,
    CapsuleFrag,
    KeyFrag,
    PublicKey,
    SecretKey,
    Signature,
    Signer,
    VerificationError,
    VerifiedCapsuleFrag,
    VerifiedKeyFrag,
)
from .errors import CryptoError, FieldError, InsufficientFragments

"""
pre_core.crypto
---------------
Capability boundary around the proxy re-encryption engine (umbral-pre).

- Keys: SecretKey / PublicKey generation and compressed serialization
- Signer: ECDSA sign, boolean verify
- Capsules: encrypt, decrypt_original, decrypt_reencrypted
- Fragments: generate_kfrags, reencrypt, cfrag verification
- digest(): SHA3-256 used for HRAC and fleet state checksums

Protocol objects never import umbral_pre directly; everything they need
from the engine goes through these helpers, which translate engine
failures into pre_core.errors.
"""

__all__ = [
    "Capsule", "CapsuleFrag", "KeyFrag", "PublicKey", "SecretKey", "Signature",
    "Signer", "VerifiedCapsuleFrag", "VerifiedKeyFrag",
]

DIGEST_SIZE = 32


# --------- Hashing ----------
def digest(*parts: bytes) -> bytes:
    h = hashes.Hash(hashes.SHA3_256())
    for part in parts:
        h.update(part)
    return h.finalize()


# --------- Keys ----------
def public_key_to_bytes(pk: PublicKey) -> bytes:
    return pk.to_compressed_bytes()

def public_key_from_bytes(data: bytes) -> PublicKey:
    try:
        return PublicKey.from_compressed_bytes(data)
    except ValueError as exc:
        raise FieldError(f"Invalid public key: {exc}") from exc


# --------- Signatures ----------
def sign(signer: Signer, message: bytes) -> Signature:
    return signer.sign(message)

def verify(signature: Signature, verifying_key: PublicKey, message: bytes) -> bool:
    try:
        return bool(signature.verify(verifying_key, message))
    except (ValueError, VerificationError):
        return False

def signature_to_bytes(signature: Signature) -> bytes:
    return signature.to_der_bytes()

def signature_from_bytes(data: bytes) -> Signature:
    try:
        return Signature.from_der_bytes(data)
    except ValueError as exc:
        raise FieldError(f"Invalid signature: {exc}") from exc


# --------- Capsules ----------
def capsule_to_bytes(capsule: Capsule) -> bytes:
    return bytes(capsule)

def capsule_from_bytes(data: bytes) -> Capsule:
    try:
        return Capsule.from_bytes(data)
    except ValueError as exc:
        raise FieldError(f"Invalid capsule: {exc}") from exc

def encrypt(public_key: PublicKey, plaintext: bytes) -> Tuple[Capsule, bytes]:
    return umbral_pre.encrypt(public_key, plaintext)

def decrypt_original(secret_key: SecretKey, capsule: Capsule, ciphertext: bytes) -> bytes:
    try:
        return bytes(umbral_pre.decrypt_original(secret_key, capsule, ciphertext))
    except ValueError as exc:
        raise CryptoError(f"Decryption failed: {exc}") from exc

def decrypt_reencrypted(
    receiving_sk: SecretKey,
    delegating_pk: PublicKey,
    capsule: Capsule,
    verified_cfrags: Sequence[VerifiedCapsuleFrag],
    ciphertext: bytes,
) -> bytes:
    if not verified_cfrags:
        raise InsufficientFragments("No capsule fragments supplied")
    try:
        return bytes(umbral_pre.decrypt_reencrypted(
            receiving_sk, delegating_pk, capsule, list(verified_cfrags), ciphertext))
    except ValueError as exc:
        raise CryptoError(f"Re-encrypted decryption failed: {exc}") from exc


# --------- Key fragments ----------
def generate_kfrags(
    delegating_sk: SecretKey,
    receiving_pk: PublicKey,
    signer: Signer,
    threshold: int,
    shares: int,
    sign_delegating_key: bool = True,
    sign_receiving_key: bool = True,
) -> List[VerifiedKeyFrag]:
    return list(umbral_pre.generate_kfrags(
        delegating_sk, receiving_pk, signer, threshold, shares,
        sign_delegating_key, sign_receiving_key))

def kfrag_to_bytes(kfrag: VerifiedKeyFrag) -> bytes:
    return bytes(kfrag)

def kfrag_from_verified_bytes(data: bytes) -> VerifiedKeyFrag:
    # Only called on bytes whose origin was already authenticated by a signature.
    try:
        return KeyFrag.from_bytes(data).skip_verification()
    except ValueError as exc:
        raise FieldError(f"Invalid key fragment: {exc}") from exc


# --------- Capsule fragments ----------
def reencrypt(capsule: Capsule, kfrag: VerifiedKeyFrag) -> VerifiedCapsuleFrag:
    return umbral_pre.reencrypt(capsule, kfrag)

def cfrag_to_bytes(cfrag) -> bytes:
    return bytes(cfrag)

def cfrag_from_bytes(data: bytes) -> CapsuleFrag:
    try:
        return CapsuleFrag.from_bytes(data)
    except ValueError as exc:
        raise FieldError(f"Invalid capsule fragment: {exc}") from exc

def verify_cfrag(
    cfrag: CapsuleFrag,
    capsule: Capsule,
    verifying_pk: PublicKey,
    delegating_pk: PublicKey,
    receiving_pk: PublicKey,
) -> VerifiedCapsuleFrag:
    try:
        return cfrag.verify(capsule, verifying_pk, delegating_pk, receiving_pk)
    except (ValueError, VerificationError) as exc:
        raise CryptoError(f"Capsule fragment verification failed: {exc}") from exc

def unverify_cfrag(cfrag) -> CapsuleFrag:
    if isinstance(cfrag, VerifiedCapsuleFrag):
        return cfrag_from_bytes(bytes(cfrag))
    return cfrag


def public_keys_equal(a: PublicKey, b: Optional[PublicKey]) -> bool:
    return b is not None and public_key_to_bytes(a) == public_key_to_bytes(b)
