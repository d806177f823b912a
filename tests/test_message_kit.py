import pytest

from pre_core import (
    CryptoError, InsufficientFragments, MessageKit, ReencryptionRequest, ReencryptionResponse,
    RetrievalKit,
)
from pre_core import crypto
from pre_core.crypto import SecretKey, Signer

from tests.factories import PLAINTEXT, Policy, make_message_kit


def test_decrypt():
    policy_sk = SecretKey.random()
    kit = make_message_kit(policy_sk)
    assert kit.decrypt(policy_sk) == PLAINTEXT


def test_decrypt_after_decoding():
    policy_sk = SecretKey.random()
    kit = MessageKit.from_bytes(make_message_kit(policy_sk).to_bytes())
    assert kit.decrypt(policy_sk) == PLAINTEXT


def test_decrypt_wrong_key():
    kit = make_message_kit(SecretKey.random())
    with pytest.raises(CryptoError):
        kit.decrypt(SecretKey.random())


def test_empty_plaintext():
    policy_sk = SecretKey.random()
    assert MessageKit(policy_sk.public_key(), b"").decrypt(policy_sk) == b""


def _retrieve(policy, kit, nodes):
    """Bob asks each node in ``nodes`` for a fragment of ``kit``'s capsule."""
    tmap = policy.treasure_map()
    encrypted_map = tmap.encrypt(policy.publisher, policy.bob_sk.public_key())
    tmap = encrypted_map.decrypt(policy.bob_sk, policy.publisher_sk.public_key())

    cfrags = []
    for address in list(tmap.destinations)[:nodes]:
        request = ReencryptionRequest(
            [kit.capsule], tmap.hrac, tmap.destinations[address],
            tmap.publisher_verifying_key, policy.bob_sk.public_key())
        request = ReencryptionRequest.from_bytes(request.to_bytes())

        # proxy side
        ursula_sk = policy.ursula_sks[address]
        kfrag = request.decrypt_kfrag(ursula_sk)
        response = ReencryptionResponse(
            Signer(ursula_sk), request.capsules,
            [crypto.reencrypt(capsule, kfrag) for capsule in request.capsules])
        response = ReencryptionResponse.from_bytes(response.to_bytes())

        cfrags += response.verify(
            [kit.capsule],
            alice_verifying_key=policy.policy_sk.public_key(),
            ursula_verifying_key=ursula_sk.public_key(),
            policy_encrypting_key=policy.policy_sk.public_key(),
            bob_encrypting_key=policy.bob_sk.public_key(),
        )
    return tmap, cfrags


def test_two_of_three_delegation():
    policy = Policy()
    kit = make_message_kit(policy.policy_sk)
    tmap, cfrags = _retrieve(policy, kit, nodes=2)
    plaintext = kit.decrypt_reencrypted(
        policy.bob_sk, tmap.policy_encrypting_key, cfrags, threshold=tmap.threshold)
    assert plaintext == PLAINTEXT


def test_below_threshold():
    policy = Policy()
    kit = make_message_kit(policy.policy_sk)
    tmap, cfrags = _retrieve(policy, kit, nodes=1)
    with pytest.raises(InsufficientFragments):
        kit.decrypt_reencrypted(
            policy.bob_sk, tmap.policy_encrypting_key, cfrags, threshold=tmap.threshold)


def test_no_fragments():
    policy_sk = SecretKey.random()
    kit = make_message_kit(policy_sk)
    with pytest.raises(InsufficientFragments):
        kit.decrypt_reencrypted(SecretKey.random(), policy_sk.public_key(), [])


def test_retrieval_kit():
    kit = make_message_kit(SecretKey.random())
    rkit = RetrievalKit.from_message_kit(kit)
    assert rkit.queried_addresses == frozenset()
    assert crypto.capsule_to_bytes(rkit.capsule) == crypto.capsule_to_bytes(kit.capsule)


def test_below_threshold_without_known_threshold():
    policy = Policy()
    kit = make_message_kit(policy.policy_sk)
    tmap, cfrags = _retrieve(policy, kit, nodes=1)
    # the kit itself does not record m, so the engine's rejection surfaces as CryptoError
    with pytest.raises(CryptoError):
        kit.decrypt_reencrypted(policy.bob_sk, tmap.policy_encrypting_key, cfrags)
