from __future__ import annotations
import os
from typing import Tuple

import rfc8785
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError, keccak, to_checksum_address

DIGEST_SIZE = 32
SIGNATURE_SIZE = 65
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class MalformedSignature(ValueError):
    """Signature blob that cannot be fed to recovery (length, v, r/s)."""


def hex0x(b: bytes) -> str:
    """Hex-encode bytes with a 0x prefix."""
    return "0x" + bytes(b).hex()


def unhex(s: str) -> bytes:
    """Decode 0x-prefixed (or bare) hex with strict validation."""
    if not isinstance(s, str):
        raise ValueError("invalid hex")
    body = s[2:] if s[:2] in ("0x", "0X") else s
    try:
        return bytes.fromhex(body)
    except ValueError as e:
        raise ValueError("invalid hex") from e


def keccak256(data: bytes) -> bytes:
    return keccak(primitive=bytes(data))


def jcs_dumps(obj) -> bytes:
    """Deterministic canonical JSON bytes per RFC8785."""
    return rfc8785.dumps(obj)


def _check_digest(digest: bytes) -> None:
    if len(digest) != DIGEST_SIZE:
        raise ValueError(f"digest must be {DIGEST_SIZE} bytes")


def secp256k1_generate() -> Tuple[bytes, str]:
    while True:
        try:
            sk = keys.PrivateKey(os.urandom(32))
        except ValidationError:
            # out of curve order, astronomically rare
            continue
        return (sk.to_bytes(), sk.public_key.to_checksum_address())


def address_of(sk_bytes: bytes) -> str:
    return keys.PrivateKey(sk_bytes).public_key.to_checksum_address()


def ecdsa_sign(sk_bytes: bytes, digest: bytes) -> bytes:
    """Sign a 32-byte digest; returns r || s || v with v in {27, 28}."""
    _check_digest(digest)
    sig = keys.PrivateKey(sk_bytes).sign_msg_hash(digest)
    return sig.r.to_bytes(32, "big") + sig.s.to_bytes(32, "big") + bytes([sig.v + 27])


def ecdsa_recover(digest: bytes, signature: bytes) -> str:
    """Recover the checksum address that signed ``digest``.

    Raises MalformedSignature for anything that is not a well-formed 65-byte
    recoverable signature. A well-formed signature by a different key simply
    recovers a different address.
    """
    _check_digest(digest)
    if len(signature) != SIGNATURE_SIZE:
        raise MalformedSignature(f"signature must be {SIGNATURE_SIZE} bytes")
    v = signature[64]
    if v >= 27:
        v -= 27
    if v not in (0, 1):
        raise MalformedSignature("invalid recovery id")
    r = int.from_bytes(signature[0:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    if not (0 < r < SECP256K1_N and 0 < s < SECP256K1_N):
        raise MalformedSignature("r/s out of range")
    try:
        sig = keys.Signature(vrs=(v, r, s))
        pub = sig.recover_public_key_from_msg_hash(digest)
    except (BadSignature, ValidationError) as e:
        raise MalformedSignature("unrecoverable signature") from e
    return pub.to_checksum_address()


def normalize_address(addr: str) -> str:
    """Checksum an address string; raises ValueError when it is not one."""
    try:
        return to_checksum_address(addr)
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid address: {addr!r}") from e
