"""Fuzz harness for composite signature verification.

Strategy:
  - Build a composite signature over messages derived from fuzz bytes, signed
    by a key fixed for the whole run.
  - Optionally mutate the signature (bit flip, truncation, bad recovery id).
  - A malformed signature must raise MalformedSignature; any other exception
    in the verification path surfaces as a crash. A mutated signature must
    never verify.
"""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from compsig_api.crypto import MalformedSignature, secp256k1_generate
    from compsig_api.composite import sign_messages_with_key, verify_message

SK, ADDR = secp256k1_generate()


def TestOneInput(data: bytes):  # noqa: N802 (Atheris entrypoint)
    if len(data) < 2:
        return
    count = 1 + data[0] % 8
    messages = [{"i": i, "blob": data[1:].hex()} for i in range(count)]
    composite = sign_messages_with_key(messages, SK)
    idx = data[-1] % count
    sig = bytearray(composite.signature)
    mode = data[0] % 4
    if mode == 1:
        sig[data[-1] % len(sig)] ^= 0x01
    elif mode == 2:
        sig = sig[: data[-1] % len(sig)]
    elif mode == 3:
        sig[64] = 29 + data[-1] % 200
    try:
        result = verify_message(
            messages[idx], composite.proofs[idx], composite.root, bytes(sig), ADDR
        )
    except MalformedSignature:
        return
    if mode == 0 and not result.ok:
        raise RuntimeError("valid composite signature failed")
    if mode != 0 and result.signature_ok:
        raise RuntimeError("mutated signature unexpectedly verified")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
