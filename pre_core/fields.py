"""Wire codecs for the opaque engine objects (keys, signatures, capsules, fragments)."""

from . import crypto
from .versioning import converted

PUBLIC_KEY = converted("public_key", crypto.public_key_to_bytes, crypto.public_key_from_bytes)
SIGNATURE = converted("signature", crypto.signature_to_bytes, crypto.signature_from_bytes)
CAPSULE = converted("capsule", crypto.capsule_to_bytes, crypto.capsule_from_bytes)
CAPSULE_FRAG = converted("capsule_frag", crypto.cfrag_to_bytes, crypto.cfrag_from_bytes)
