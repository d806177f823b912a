import pytest

from pre_core import FormatError, MessageKit, ThresholdDecryptionResponse, from_bytes
from pre_core.crypto import SecretKey
from pre_core.registry import BRANDS, PROTOCOL_OBJECTS
from pre_core.versioning import pack_header

from tests.factories import make_message_kit


def test_brands_are_unique_four_byte_ascii():
    brands = [cls.BRAND for cls in PROTOCOL_OBJECTS]
    assert len(set(brands)) == len(brands)
    for brand in brands:
        assert len(brand) == 4
        brand.decode("ascii")


def test_every_type_is_registered():
    assert set(BRANDS.values()) == set(PROTOCOL_OBJECTS)
    assert all(cls.VERSION == (1, 0) for cls in PROTOCOL_OBJECTS)


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        BRANDS[b"XXXX"] = MessageKit


def test_dispatch_by_brand():
    kit = make_message_kit(SecretKey.random())
    restored = from_bytes(kit.to_bytes())
    assert isinstance(restored, MessageKit)
    assert restored == kit

    response = ThresholdDecryptionResponse(b"share")
    assert from_bytes(response.to_bytes()) == response


def test_unknown_brand():
    with pytest.raises(FormatError, match="Unknown brand"):
        from_bytes(pack_header(b"Nope", 1, 0) + b"\x80")


def test_dispatch_short_input():
    with pytest.raises(FormatError):
        from_bytes(b"MKit")
