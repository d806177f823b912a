"""
pre_core.treasure_map
---------------------
Policy manifest: which proxy node holds which encrypted key fragment, and
how many of them (threshold) a delegate needs.

TreasureMap            plaintext manifest built by the publisher
AuthorizedTreasureMap  manifest + publisher signature bound to one recipient
EncryptedTreasureMap   AuthorizedTreasureMap encrypted to that recipient
"""

from __future__ import annotations
from collections.abc import Mapping
from typing import Iterable, Iterator, List, Tuple, Union

from . import crypto
from .address import ADDRESS, Address
from .crypto import PublicKey, SecretKey, Signer, VerifiedKeyFrag
from .errors import CoreError, CryptoError, FieldError, PolicyError
from .fields import CAPSULE, PUBLIC_KEY, SIGNATURE
from .hrac import HRAC, HRAC_FIELD
from .key_frag import EncryptedKeyFrag
from .revocation import RevocationOrder
from .versioning import BYTES, U8, Codec, Field, ProtocolObject, expect_type, nested

MAX_THRESHOLD = 255

AssignedKFrags = Union[
    Mapping,
    Iterable[Tuple[Address, Tuple[PublicKey, VerifiedKeyFrag]]],
]


class Destinations(Mapping):
    """Read-only Address -> EncryptedKeyFrag mapping, always iterated in address order."""

    __slots__ = ("_items",)

    def __init__(self, items: "Mapping[Address, EncryptedKeyFrag]"):
        self._items = {address: items[address] for address in sorted(items)}

    def __getitem__(self, address: Address) -> EncryptedKeyFrag:
        return self._items[address]

    def __iter__(self) -> Iterator[Address]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self):
        return f"Destinations({[a.hex() for a in self._items]})"


def _encode_destinations(destinations: Destinations):
    return [[bytes(address), ekfrag.to_bytes()] for address, ekfrag in destinations.items()]


def _decode_destinations(value) -> Destinations:
    ekfrag_codec = nested(EncryptedKeyFrag)
    items = {}
    for entry in expect_type("array", value, (list, tuple)):
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise FieldError("destination entries must be [address, encrypted_kfrag] pairs")
        address = ADDRESS.decode(entry[0])
        if address in items:
            raise FieldError(f"duplicate destination {address!r}")
        items[address] = ekfrag_codec.decode(entry[1])
    return Destinations(items)


DESTINATIONS = Codec("destinations", _encode_destinations, _decode_destinations)


class TreasureMap(ProtocolObject):
    BRAND = b"TMap"
    VERSION = (1, 0)
    FIELDS = (
        Field("threshold", U8),
        Field("hrac", HRAC_FIELD),
        Field("destinations", DESTINATIONS),
        Field("policy_encrypting_key", PUBLIC_KEY),
        Field("publisher_verifying_key", PUBLIC_KEY),
    )

    def __init__(
        self,
        signer: Signer,
        hrac: HRAC,
        policy_encrypting_key: PublicKey,
        assigned_kfrags: AssignedKFrags,
        threshold: int,
    ):
        if isinstance(assigned_kfrags, Mapping):
            assigned_kfrags = assigned_kfrags.items()

        assignments = {}
        for address, (recipient_key, verified_kfrag) in assigned_kfrags:
            if not isinstance(address, Address):
                address = Address(address)
            if address in assignments:
                raise PolicyError(f"Destination {address!r} assigned more than once")
            assignments[address] = (recipient_key, verified_kfrag)

        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise PolicyError(f"Threshold must be an integer, got {type(threshold).__name__}")
        if not 1 <= threshold <= MAX_THRESHOLD:
            raise PolicyError(f"Threshold must be in 1..{MAX_THRESHOLD}, got {threshold}")
        if threshold > len(assignments):
            raise PolicyError(
                f"Threshold {threshold} exceeds the number of destinations ({len(assignments)})")

        destinations = {
            address: EncryptedKeyFrag(signer, recipient_key, hrac, verified_kfrag)
            for address, (recipient_key, verified_kfrag) in assignments.items()
        }
        self._set(
            threshold=threshold,
            hrac=hrac,
            destinations=Destinations(destinations),
            policy_encrypting_key=policy_encrypting_key,
            publisher_verifying_key=signer.verifying_key(),
        )

    def _validate(self) -> None:
        if not 1 <= self.threshold <= len(self.destinations):
            raise FieldError(
                f"threshold {self.threshold} invalid for {len(self.destinations)} destinations")

    def encrypt(self, signer: Signer, recipient_key: PublicKey) -> "EncryptedTreasureMap":
        return EncryptedTreasureMap(signer, recipient_key, self)

    def make_revocation_orders(self, signer: Signer) -> List[RevocationOrder]:
        """One signed revocation per destination, in address order."""
        return [
            RevocationOrder(signer, address, ekfrag)
            for address, ekfrag in self.destinations.items()
        ]


def _map_message(recipient_key: PublicKey, treasure_map: TreasureMap) -> bytes:
    return crypto.public_key_to_bytes(recipient_key) + treasure_map.to_bytes()


class AuthorizedTreasureMap(ProtocolObject):
    BRAND = b"AMap"
    VERSION = (1, 0)
    FIELDS = (
        Field("signature", SIGNATURE),
        Field("treasure_map", nested(TreasureMap)),
    )

    def __init__(self, signer: Signer, recipient_key: PublicKey, treasure_map: TreasureMap):
        self._set(
            signature=crypto.sign(signer, _map_message(recipient_key, treasure_map)),
            treasure_map=treasure_map,
        )

    def verify(self, recipient_key: PublicKey, publisher_verifying_key: PublicKey) -> TreasureMap:
        message = _map_message(recipient_key, self.treasure_map)
        if not crypto.verify(self.signature, publisher_verifying_key, message):
            raise CryptoError("Treasure map signature is invalid for this recipient and publisher")
        if not crypto.public_keys_equal(publisher_verifying_key, self.treasure_map.publisher_verifying_key):
            raise CryptoError("Treasure map was issued by a different publisher")
        return self.treasure_map


class EncryptedTreasureMap(ProtocolObject):
    BRAND = b"EMap"
    VERSION = (1, 0)
    FIELDS = (
        Field("capsule", CAPSULE),
        Field("ciphertext", BYTES),
    )

    def __init__(self, signer: Signer, recipient_key: PublicKey, treasure_map: TreasureMap):
        auth_map = AuthorizedTreasureMap(signer, recipient_key, treasure_map)
        capsule, ciphertext = crypto.encrypt(recipient_key, auth_map.to_bytes())
        self._set(capsule=capsule, ciphertext=bytes(ciphertext))

    def decrypt(self, secret_key: SecretKey, publisher_verifying_key: PublicKey) -> TreasureMap:
        plaintext = crypto.decrypt_original(secret_key, self.capsule, self.ciphertext)
        try:
            auth_map = AuthorizedTreasureMap.from_bytes(plaintext)
        except CoreError as exc:
            raise CryptoError(f"Decrypted treasure map is malformed: {exc}") from exc
        return auth_map.verify(secret_key.public_key(), publisher_verifying_key)
