"""Composite signatures: one ECDSA signature over the Merkle root of a message set.

Generation: messages -> leaves -> tree -> root -> signature -> proofs.
Verification runs the same hashing in reverse for a single message and
reports the signer check and the inclusion check separately.
"""
from __future__ import annotations
import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .crypto import (
    SIGNATURE_SIZE,
    MalformedSignature,
    ecdsa_recover,
    ecdsa_sign,
    hex0x,
    jcs_dumps,
    normalize_address,
    unhex,
)
from .encoding import Encoder, message_leaf
from .merkle import LeafNotFound, MerkleTree, verify_inclusion

logger = logging.getLogger(__name__)

Signer = Callable[[bytes], bytes]
Recoverer = Callable[[bytes, bytes], str]


class EmptyMessageSet(ValueError):
    pass


class MessageNotFound(LookupError):
    pass


@dataclass(frozen=True)
class CompositeSignature:
    root: bytes
    signature: bytes
    proofs: Tuple[Tuple[bytes, ...], ...]  # proofs[i] belongs to message i

    def to_json(self) -> Dict[str, Any]:
        return {
            "signature": hex0x(self.signature),
            "merkleRoot": hex0x(self.root),
            "proofs": [[hex0x(s) for s in proof] for proof in self.proofs],
        }

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "CompositeSignature":
        try:
            return cls(
                root=unhex(obj["merkleRoot"]),
                signature=unhex(obj["signature"]),
                proofs=tuple(tuple(unhex(s) for s in p) for p in obj["proofs"]),
            )
        except (KeyError, TypeError) as e:
            raise ValueError("invalid composite signature object") from e


@dataclass(frozen=True)
class VerificationResult:
    signature_ok: bool
    proof_ok: bool
    recovered_signer: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.signature_ok and self.proof_ok

    @property
    def reason(self) -> str:
        if self.ok:
            return "ok"
        if not self.signature_ok and not self.proof_ok:
            return "signer and proof mismatch"
        return "signer mismatch" if not self.signature_ok else "proof mismatch"


def build_tree(messages: Sequence[Any], encode: Encoder = jcs_dumps) -> MerkleTree:
    if not messages:
        raise EmptyMessageSet("message set is empty")
    return MerkleTree.from_leaves([message_leaf(m, encode) for m in messages])


def sign_messages(
    messages: Sequence[Any], sign: Signer, encode: Encoder = jcs_dumps
) -> CompositeSignature:
    tree = build_tree(messages, encode)
    root = tree.root
    signature = sign(root)
    # padding positions never get proofs
    proofs = tuple(tuple(tree.inclusion_proof(i)) for i in range(tree.leaf_count))
    logger.debug(
        "composite signature over %d messages, height %d", tree.leaf_count, tree.height
    )
    return CompositeSignature(root=root, signature=signature, proofs=proofs)


def sign_messages_with_key(
    messages: Sequence[Any], sk_bytes: bytes, encode: Encoder = jcs_dumps
) -> CompositeSignature:
    return sign_messages(messages, functools.partial(ecdsa_sign, sk_bytes), encode)


def verify_message(
    message: Any,
    proof: Sequence[bytes],
    root: bytes,
    signature: bytes,
    expected_signer: str,
    encode: Encoder = jcs_dumps,
    recover: Recoverer = ecdsa_recover,
) -> VerificationResult:
    """Check that ``expected_signer`` signed ``root`` and ``message`` is under it.

    Raises MalformedSignature for a signature blob that cannot be recovered and
    ValueError for an invalid expected address. Mismatches are returned, not
    raised.
    """
    expected = normalize_address(expected_signer)
    if len(signature) != SIGNATURE_SIZE:
        raise MalformedSignature(f"signature must be {SIGNATURE_SIZE} bytes")
    recovered = normalize_address(recover(root, signature))
    proof_ok = verify_inclusion(message_leaf(message, encode), proof, root)
    result = VerificationResult(
        signature_ok=recovered == expected,
        proof_ok=proof_ok,
        recovered_signer=recovered,
    )
    if not result.ok:
        logger.info("composite verification failed: %s", result.reason)
    return result


def locate_message(
    messages: Sequence[Any], message: Any, encode: Encoder = jcs_dumps
) -> int:
    """Index of ``message`` in a freshly rebuilt tree over ``messages``."""
    tree = build_tree(messages, encode)
    try:
        return tree.index_of(message_leaf(message, encode))
    except LeafNotFound:
        raise MessageNotFound("message is not part of this message set") from None


def proofs_for(messages: Sequence[Any], encode: Encoder = jcs_dumps) -> List[List[bytes]]:
    """Proofs for every message without signing, e.g. to re-derive a lost proof."""
    tree = build_tree(messages, encode)
    return [tree.inclusion_proof(i) for i in range(tree.leaf_count)]
