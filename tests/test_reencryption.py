import pytest

from pre_core import (
    CryptoError, FieldError, ReencryptionRequest, ReencryptionResponse, RetrievalKit, RevocationOrder,
)
from pre_core import crypto
from pre_core.crypto import SecretKey, Signer

from tests.factories import Policy, make_address, make_message_kit


@pytest.fixture
def policy():
    return Policy()


@pytest.fixture
def node(policy):
    """First node of the policy: (address, secret key, encrypted kfrag, verified kfrag)."""
    tmap = policy.treasure_map()
    address = next(iter(tmap.destinations))
    ekfrag = tmap.destinations[address]
    sk = policy.ursula_sks[address]
    kfrag = ekfrag.decrypt(sk, policy.hrac, policy.publisher_sk.public_key())
    return address, sk, ekfrag, kfrag


def _verify(policy, response, capsules, ursula_sk):
    return response.verify(
        capsules,
        policy.policy_sk.public_key(),
        ursula_sk.public_key(),
        policy.policy_sk.public_key(),
        policy.bob_sk.public_key(),
    )


def test_request_roundtrip(policy, node):
    _, sk, ekfrag, kfrag = node
    kits = [make_message_kit(policy.policy_sk) for _ in range(3)]
    request = ReencryptionRequest(
        [kit.capsule for kit in kits], policy.hrac, ekfrag,
        policy.publisher_sk.public_key(), policy.bob_sk.public_key())
    restored = ReencryptionRequest.from_bytes(request.to_bytes())
    assert restored == request
    assert len(restored.capsules) == 3
    assert restored.hrac == policy.hrac
    assert crypto.kfrag_to_bytes(restored.decrypt_kfrag(sk)) == crypto.kfrag_to_bytes(kfrag)


def test_request_needs_capsules(policy, node):
    _, _, ekfrag, _ = node
    with pytest.raises(FieldError):
        ReencryptionRequest(
            [], policy.hrac, ekfrag, policy.publisher_sk.public_key(), policy.bob_sk.public_key())


def test_response_verifies_in_order(policy, node):
    _, sk, _, kfrag = node
    capsules = [make_message_kit(policy.policy_sk).capsule for _ in range(3)]
    response = ReencryptionResponse(Signer(sk), capsules, [crypto.reencrypt(c, kfrag) for c in capsules])
    response = ReencryptionResponse.from_bytes(response.to_bytes())
    assert len(_verify(policy, response, capsules, sk)) == 3


def test_response_is_all_or_nothing(policy, node):
    _, sk, _, kfrag = node
    capsules = [make_message_kit(policy.policy_sk).capsule for _ in range(3)]
    cfrags = [crypto.reencrypt(c, kfrag) for c in capsules]
    # node signs a batch whose last fragment belongs to a different capsule
    stray = crypto.reencrypt(make_message_kit(policy.policy_sk).capsule, kfrag)
    response = ReencryptionResponse(Signer(sk), capsules, cfrags[:2] + [stray])
    with pytest.raises(CryptoError, match="fragment 2"):
        _verify(policy, response, capsules, sk)


def test_response_wrong_node_key(policy, node):
    _, sk, _, kfrag = node
    capsules = [make_message_kit(policy.policy_sk).capsule]
    response = ReencryptionResponse(Signer(sk), capsules, [crypto.reencrypt(capsules[0], kfrag)])
    with pytest.raises(CryptoError):
        _verify(policy, response, capsules, SecretKey.random())


def test_response_capsules_reordered(policy, node):
    _, sk, _, kfrag = node
    capsules = [make_message_kit(policy.policy_sk).capsule for _ in range(2)]
    response = ReencryptionResponse(Signer(sk), capsules, [crypto.reencrypt(c, kfrag) for c in capsules])
    with pytest.raises(CryptoError):
        _verify(policy, response, list(reversed(capsules)), sk)


def test_response_length_mismatch(policy, node):
    _, sk, _, kfrag = node
    capsules = [make_message_kit(policy.policy_sk).capsule for _ in range(2)]
    with pytest.raises(FieldError):
        ReencryptionResponse(Signer(sk), capsules, [crypto.reencrypt(capsules[0], kfrag)])

    response = ReencryptionResponse(Signer(sk), capsules[:1], [crypto.reencrypt(capsules[0], kfrag)])
    with pytest.raises(CryptoError):
        _verify(policy, response, capsules, sk)


def test_retrieval_kit_queried_addresses(policy):
    capsule = make_message_kit(policy.policy_sk).capsule
    rkit = RetrievalKit(capsule, [make_address(2), make_address(1)])
    restored = RetrievalKit.from_bytes(rkit.to_bytes())
    assert restored.queried_addresses == {make_address(1), make_address(2)}
    assert restored == RetrievalKit(capsule, [make_address(1), make_address(2)])

    more = restored.with_queried([make_address(3), make_address(1)])
    assert more.queried_addresses == {make_address(i) for i in (1, 2, 3)}
    assert restored.queried_addresses == {make_address(1), make_address(2)}


def test_revocation_order(policy, node):
    address, _, ekfrag, _ = node
    order = RevocationOrder(policy.publisher, address, ekfrag)
    restored = RevocationOrder.from_bytes(order.to_bytes())
    assert restored.verify(policy.publisher_sk.public_key()) == (address, ekfrag)
    assert restored.verify_signature(policy.publisher_sk.public_key())


def test_revocation_order_wrong_publisher(policy, node):
    address, _, ekfrag, _ = node
    order = RevocationOrder(policy.publisher, address, ekfrag)
    assert not order.verify_signature(SecretKey.random().public_key())
    with pytest.raises(CryptoError):
        order.verify(SecretKey.random().public_key())


def test_revocation_order_redirected(policy, node):
    _, _, ekfrag, _ = node
    order = RevocationOrder(policy.publisher, make_address(7), ekfrag)
    fields = order.to_fields()
    fields["address"] = bytes(make_address(8))
    with pytest.raises(CryptoError):
        RevocationOrder.from_fields(fields).verify(policy.publisher_sk.public_key())
