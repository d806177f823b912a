"""
pre_core.errors
---------------
Error taxonomy shared by every protocol object.

Decoding problems are split by layer (envelope header, version, payload
fields) so callers can tell a foreign message from a corrupted one.
Cryptographic rejections are kept apart from policy preconditions.
"""

from __future__ import annotations


class CoreError(Exception):
    pass


class FormatError(CoreError):
    """Wrong brand, truncated header or oversized envelope."""


class VersionError(CoreError):
    """Unsupported major version, or a minor version newer than this build."""


class FieldError(CoreError):
    """Malformed, missing or mistyped field inside a well-versioned payload."""


class CryptoError(CoreError):
    """Signature, decryption or fragment verification failure."""


class InsufficientFragments(CoreError):
    pass


class PolicyError(CoreError):
    pass


class InvalidAddress(CoreError):
    pass
