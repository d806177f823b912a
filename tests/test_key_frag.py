import pytest

from pre_core import CryptoError, EncryptedKeyFrag, HRAC
from pre_core import crypto
from pre_core.crypto import SecretKey, Signer, kfrag_to_bytes

from tests.factories import make_kfrags


@pytest.fixture
def setup():
    delegating_sk = SecretKey.random()
    receiving_sk = SecretKey.random()
    publisher_sk = SecretKey.random()
    ursula_sk = SecretKey.random()
    hrac = HRAC(publisher_sk.public_key(), receiving_sk.public_key(), b"label")
    kfrag = make_kfrags(delegating_sk, receiving_sk)[0]
    ekfrag = EncryptedKeyFrag(Signer(publisher_sk), ursula_sk.public_key(), hrac, kfrag)
    return ekfrag, kfrag, hrac, publisher_sk, ursula_sk


def test_decrypt(setup):
    ekfrag, kfrag, hrac, publisher_sk, ursula_sk = setup
    recovered = ekfrag.decrypt(ursula_sk, hrac, publisher_sk.public_key())
    assert kfrag_to_bytes(recovered) == kfrag_to_bytes(kfrag)


def test_survives_encoding(setup):
    ekfrag, kfrag, hrac, publisher_sk, ursula_sk = setup
    restored = EncryptedKeyFrag.from_bytes(ekfrag.to_bytes())
    assert restored == ekfrag
    recovered = restored.decrypt(ursula_sk, hrac, publisher_sk.public_key())
    assert kfrag_to_bytes(recovered) == kfrag_to_bytes(kfrag)


def test_wrong_hrac(setup):
    ekfrag, _, _, publisher_sk, ursula_sk = setup
    other = HRAC(publisher_sk.public_key(), SecretKey.random().public_key(), b"label")
    with pytest.raises(CryptoError):
        ekfrag.decrypt(ursula_sk, other, publisher_sk.public_key())


def test_wrong_secret_key(setup):
    ekfrag, _, hrac, publisher_sk, _ = setup
    with pytest.raises(CryptoError):
        ekfrag.decrypt(SecretKey.random(), hrac, publisher_sk.public_key())


def test_wrong_publisher(setup):
    ekfrag, _, hrac, _, ursula_sk = setup
    with pytest.raises(CryptoError):
        ekfrag.decrypt(ursula_sk, hrac, SecretKey.random().public_key())


def test_decrypted_fragment_reencrypts(setup):
    ekfrag, _, hrac, publisher_sk, ursula_sk = setup
    kfrag = ekfrag.decrypt(ursula_sk, hrac, publisher_sk.public_key())
    capsule, _ = crypto.encrypt(SecretKey.random().public_key(), b"data")
    assert crypto.cfrag_to_bytes(crypto.reencrypt(capsule, kfrag))
