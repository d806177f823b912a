"""
pre_core.dkg
------------
Ritual-scoped threshold decryption messages.

These are transport shapes only: share verification and aggregation live in
the ritual coordination layer.
"""

from __future__ import annotations
from enum import Enum
from typing import Optional

from .errors import FieldError
from .versioning import BYTES, STR, U16, Field, ProtocolObject, check_uint, enum_name, optional


def _json_text(name: str, value: Optional[str]) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    raise FieldError(f"{name} must be a JSON string, got {type(value).__name__}")


class FerveoVariant(Enum):
    SIMPLE = "SIMPLE"
    PRECOMPUTED = "PRECOMPUTED"


class ThresholdDecryptionRequest(ProtocolObject):
    BRAND = b"ThRq"
    VERSION = (1, 0)
    FIELDS = (
        Field("ritual_id", U16),
        Field("ciphertext", BYTES),
        Field("conditions", optional(STR), default=None),   # JSON
        Field("context", optional(STR), default=None),      # JSON
        Field("variant", enum_name(FerveoVariant)),
    )

    def __init__(
        self,
        ritual_id: int,
        ciphertext: bytes,
        conditions: Optional[str] = None,
        context: Optional[str] = None,
        variant: FerveoVariant = FerveoVariant.SIMPLE,
    ):
        self._set(
            ritual_id=check_uint("ritual_id", ritual_id, 16),
            ciphertext=bytes(ciphertext),
            conditions=_json_text("conditions", conditions),
            context=_json_text("context", context),
            variant=FerveoVariant(variant),
        )


class ThresholdDecryptionResponse(ProtocolObject):
    BRAND = b"ThRs"
    VERSION = (1, 0)
    FIELDS = (
        Field("decryption_share", BYTES),
    )

    def __init__(self, decryption_share: bytes):
        self._set(decryption_share=bytes(decryption_share))
