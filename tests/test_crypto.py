import pytest

from compsig_api.crypto import (
    MalformedSignature,
    address_of,
    ecdsa_recover,
    ecdsa_sign,
    hex0x,
    keccak256,
    normalize_address,
    secp256k1_generate,
    unhex,
)


def test_keccak_empty_vector():
    assert keccak256(b"").hex() == (
        "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )


def test_known_key_address(signing_key, signer_address):
    assert address_of(signing_key) == signer_address


def test_sign_and_recover(signing_key, signer_address):
    digest = keccak256(b"root")
    sig = ecdsa_sign(signing_key, digest)
    assert len(sig) == 65
    assert sig[64] in (27, 28)
    assert ecdsa_recover(digest, sig) == signer_address


def test_recover_accepts_raw_recovery_id(signing_key, signer_address):
    digest = keccak256(b"root")
    sig = ecdsa_sign(signing_key, digest)
    raw = sig[:64] + bytes([sig[64] - 27])
    assert ecdsa_recover(digest, raw) == signer_address


def test_other_digest_recovers_other_address(signing_key, signer_address):
    sig = ecdsa_sign(signing_key, keccak256(b"root"))
    assert ecdsa_recover(keccak256(b"other"), sig) != signer_address


def test_generated_key_round_trip():
    sk, addr = secp256k1_generate()
    assert len(sk) == 32
    assert address_of(sk) == addr
    digest = keccak256(b"x")
    assert ecdsa_recover(digest, ecdsa_sign(sk, digest)) == addr


@pytest.mark.parametrize("length", [0, 64, 66, 130])
def test_wrong_length_signature_is_malformed(length):
    with pytest.raises(MalformedSignature):
        ecdsa_recover(keccak256(b"root"), b"\x01" * length)


def test_bad_recovery_id_is_malformed(signing_key):
    digest = keccak256(b"root")
    sig = ecdsa_sign(signing_key, digest)
    with pytest.raises(MalformedSignature):
        ecdsa_recover(digest, sig[:64] + bytes([35]))


def test_zero_r_is_malformed():
    with pytest.raises(MalformedSignature):
        ecdsa_recover(keccak256(b"root"), b"\x00" * 64 + bytes([27]))


def test_digest_width_enforced(signing_key):
    with pytest.raises(ValueError):
        ecdsa_sign(signing_key, b"short")
    with pytest.raises(ValueError):
        ecdsa_recover(b"short", b"\x00" * 65)


def test_hex_helpers():
    assert hex0x(b"\x01\xab") == "0x01ab"
    assert unhex("0x01ab") == b"\x01\xab"
    assert unhex("01AB") == b"\x01\xab"
    with pytest.raises(ValueError):
        unhex("0xzz")
    with pytest.raises(ValueError):
        unhex(None)  # type: ignore[arg-type]


def test_normalize_address(signer_address):
    assert normalize_address(signer_address.lower()) == signer_address
    with pytest.raises(ValueError):
        normalize_address("0x1234")
