"""
pre_core.versioning
-------------------
Versioned binary envelope shared by every protocol message.

Wire layout:

    brand (4B ASCII) | major (u16 LE) | minor (u16 LE) | payload

The payload is a MessagePack map of named fields. Each message type lists
its fields in ``FIELDS``; a field carries the minor version that introduced
it, so a reader can accept any older minor of the same major line and fill
in documented defaults for fields the writer did not know about.

Decoding rules:
- brand differs from the expected type          -> FormatError
- major differs from the type's major           -> VersionError
- minor newer than the type's minor             -> VersionError
- payload not MessagePack / not a map / bad field -> FieldError
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar
import io
import struct

import umsgpack

from .config import get_settings
from .errors import CoreError, FieldError, FormatError, VersionError
from .logger import get_logger

log = get_logger("PRE.Versioning")

HEADER = struct.Struct("<4sHH")
HEADER_SIZE = HEADER.size  # 8

_REQUIRED = object()

R = TypeVar("R", bound="Record")


# =============================================================================
# Field codecs
# =============================================================================

@dataclass(frozen=True)
class Codec:
    """Converts one attribute to a MessagePack-native value and back."""
    kind: str
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]


def expect_type(kind: str, value: Any, types) -> Any:
    if isinstance(value, bool) or not isinstance(value, types):
        raise FieldError(f"expected {kind}, got {type(value).__name__}")
    return value


def check_uint(name: str, value: Any, bits: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise FieldError(f"{name} must be an integer, got {type(value).__name__}")
    if not 0 <= value < (1 << bits):
        raise FieldError(f"{name} must fit in u{bits}, got {value}")
    return value


BYTES = Codec("bytes", bytes, lambda v: bytes(expect_type("bytes", v, (bytes, bytearray))))
STR = Codec("str", lambda v: expect_type("str", v, (str,)), lambda v: expect_type("str", v, (str,)))


def uint(bits: int) -> Codec:
    return Codec(f"u{bits}", int, lambda v: check_uint("value", v, bits))


U8 = uint(8)
U16 = uint(16)
U32 = uint(32)


def converted(kind: str, to_bytes: Callable[[Any], bytes], from_bytes: Callable[[bytes], Any]) -> Codec:
    """Object stored on the wire as a byte string."""
    return Codec(kind, to_bytes, lambda v: from_bytes(BYTES.decode(v)))


def optional(codec: Codec) -> Codec:
    return Codec(
        f"optional[{codec.kind}]",
        lambda v: None if v is None else codec.encode(v),
        lambda v: None if v is None else codec.decode(v),
    )


def list_of(codec: Codec) -> Codec:
    def decode(value):
        return [codec.decode(item) for item in expect_type("array", value, (list, tuple))]
    return Codec(f"list[{codec.kind}]", lambda v: [codec.encode(item) for item in v], decode)


def enum_name(enum_cls) -> Codec:
    def decode(value):
        name = STR.decode(value)
        try:
            return enum_cls[name]
        except KeyError:
            raise FieldError(f"unknown {enum_cls.__name__} variant {name!r}") from None
    return Codec(enum_cls.__name__, lambda v: v.name, decode)


def nested(cls: Type["ProtocolObject"]) -> Codec:
    """A branded object embedded with its own header."""
    return converted(cls.__name__, lambda v: v.to_bytes(), cls.from_bytes)


def record(cls: Type["Record"]) -> Codec:
    """An unbranded record embedded as a plain map."""
    return Codec(cls.__name__, lambda v: v.to_fields(), cls.from_fields)


@dataclass(frozen=True)
class Field:
    name: str
    codec: Codec
    since: int = 0
    default: Any = _REQUIRED

    @property
    def required(self) -> bool:
        return self.default is _REQUIRED


# =============================================================================
# Payload helpers
# =============================================================================

def pack_payload(fields: Dict[str, Any]) -> bytes:
    return umsgpack.packb(fields)


def unpack_payload(data: bytes) -> Dict[str, Any]:
    stream = io.BytesIO(data)
    try:
        payload = umsgpack.unpack(stream)
    except umsgpack.UnpackException as exc:
        raise FieldError(f"Malformed payload: {exc!r}") from exc
    except RecursionError:
        raise FieldError("Malformed payload: nesting too deep") from None
    trailing = len(data) - stream.tell()
    if trailing:
        raise FieldError(f"Malformed payload: {trailing} trailing bytes")
    if not isinstance(payload, dict):
        raise FieldError(f"Payload must be a map, got {type(payload).__name__}")
    return payload


def pack_header(brand: bytes, major: int, minor: int) -> bytes:
    return HEADER.pack(brand, major, minor)


def unpack_header(data: bytes) -> Tuple[bytes, int, int, bytes]:
    """Split ``data`` into (brand, major, minor, payload bytes)."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise FormatError(f"Expected bytes, got {type(data).__name__}")
    data = bytes(data)
    limit = get_settings().max_message_size
    if len(data) > limit:
        raise FormatError(f"Message of {len(data)} bytes exceeds limit of {limit}")
    if len(data) < HEADER_SIZE:
        raise FormatError(f"Message too short for header: {len(data)} < {HEADER_SIZE}")
    brand, major, minor = HEADER.unpack_from(data)
    return brand, major, minor, data[HEADER_SIZE:]


# =============================================================================
# Record / ProtocolObject
# =============================================================================

class Record:
    """
    Immutable value with a named-field map encoding.

    Subclasses declare ``FIELDS`` and build themselves in ``__init__`` via
    ``_set``. Decoding bypasses ``__init__`` (which may sign or encrypt) and
    restores attributes directly, then runs ``_validate``.
    """

    FIELDS: Tuple[Field, ...] = ()

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def _set(self, **values) -> None:
        for name, value in values.items():
            object.__setattr__(self, name, value)

    def _validate(self) -> None:
        """Invariant checks shared by construction and decoding."""

    # ---- encoding ----
    def to_fields(self) -> Dict[str, Any]:
        return {f.name: f.codec.encode(getattr(self, f.name)) for f in self.FIELDS}

    def _payload_bytes(self) -> bytes:
        cached = self.__dict__.get("_encoded")
        if cached is None:
            cached = pack_payload(self.to_fields())
            object.__setattr__(self, "_encoded", cached)
        return cached

    def to_bytes(self) -> bytes:
        return self._payload_bytes()

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    # ---- decoding ----
    @classmethod
    def from_fields(cls: Type[R], payload: Any, minor: Optional[int] = None) -> R:
        if not isinstance(payload, dict):
            raise FieldError(f"{cls.__name__} payload must be a map, got {type(payload).__name__}")
        values = {}
        for f in cls.FIELDS:
            if minor is not None and f.since > minor:
                values[f.name] = f.default
                continue
            if f.name not in payload:
                if f.required:
                    raise FieldError(f"{cls.__name__} is missing field {f.name!r}")
                values[f.name] = f.default
                continue
            try:
                values[f.name] = f.codec.decode(payload[f.name])
            except CoreError as exc:
                raise FieldError(f"{cls.__name__}.{f.name}: {exc}") from exc
        obj = cls.__new__(cls)
        obj._set(**values)
        obj._validate()
        return obj

    @classmethod
    def from_bytes(cls: Type[R], data: bytes) -> R:
        return cls.from_fields(unpack_payload(bytes(data)))

    # ---- value semantics ----
    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    def __hash__(self):
        return hash((type(self).__name__, self.to_bytes()))

    def __repr__(self):
        return f"{type(self).__name__}({len(self.to_bytes())} bytes)"


class ProtocolObject(Record):
    """A Record that travels on its own, behind the versioned header."""

    BRAND: bytes = b""
    VERSION: Tuple[int, int] = (1, 0)

    def to_bytes(self) -> bytes:
        major, minor = self.VERSION
        return pack_header(self.BRAND, major, minor) + self._payload_bytes()

    @classmethod
    def from_bytes(cls: Type[R], data: bytes) -> R:
        brand, major, minor, body = unpack_header(data)
        if brand != cls.BRAND:
            log.debug(f"[DECODE] brand mismatch: expected={cls.BRAND!r} got={brand!r}")
            raise FormatError(f"Expected brand {cls.BRAND!r} for {cls.__name__}, got {brand!r}")
        current_major, current_minor = cls.VERSION
        if major != current_major:
            log.debug(f"[DECODE] {cls.__name__} major mismatch: {major} != {current_major}")
            raise VersionError(
                f"{cls.__name__}: unsupported major version {major} (supported: {current_major})")
        if minor > current_minor:
            log.debug(f"[DECODE] {cls.__name__} minor {minor} newer than {current_minor}")
            raise VersionError(
                f"{cls.__name__}: minor version {major}.{minor} is newer than supported "
                f"{current_major}.{current_minor}")
        return cls.from_fields(unpack_payload(body), minor)
