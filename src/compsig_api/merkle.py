from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .crypto import DIGEST_SIZE, keccak256

ZERO_LEAF = b"\x00" * DIGEST_SIZE


class LeafNotFound(LookupError):
    pass


def hash_pair(a: bytes, b: bytes) -> bytes:
    """Parent digest of two siblings; smaller digest first, so order-free."""
    lo, hi = (a, b) if a <= b else (b, a)
    return keccak256(lo + hi)


def padded_size(n: int) -> int:
    """Smallest power of two >= n."""
    if n < 1:
        raise ValueError("no leaves")
    return 1 << (n - 1).bit_length()


@dataclass(frozen=True)
class MerkleTree:
    levels: Tuple[Tuple[bytes, ...], ...]  # level 0 = padded leaves
    leaf_count: int

    @classmethod
    def from_leaves(cls, leaves: Sequence[bytes]) -> "MerkleTree":
        if not leaves:
            raise ValueError("no leaves")
        for leaf in leaves:
            if len(leaf) != DIGEST_SIZE:
                raise ValueError(f"leaf must be {DIGEST_SIZE} bytes")
        n = len(leaves)
        lvl = [bytes(leaf) for leaf in leaves]
        lvl.extend([ZERO_LEAF] * (padded_size(n) - n))
        levels = [tuple(lvl)]
        while len(lvl) > 1:
            lvl = [hash_pair(lvl[i], lvl[i + 1]) for i in range(0, len(lvl), 2)]
            levels.append(tuple(lvl))
        return cls(tuple(levels), n)

    @property
    def root(self) -> bytes:
        return self.levels[-1][0]

    @property
    def height(self) -> int:
        return len(self.levels) - 1

    @property
    def leaves(self) -> Tuple[bytes, ...]:
        """Original leaves, without padding."""
        return self.levels[0][: self.leaf_count]

    def inclusion_proof(self, index: int) -> List[bytes]:
        """Return sibling digests from leaf to root (root level excluded)."""
        if not 0 <= index < len(self.levels[0]):
            raise IndexError("leaf index out of range")
        proof = []
        idx = index
        for level in self.levels[:-1]:
            proof.append(level[idx ^ 1])
            idx //= 2
        return proof

    def index_of(self, leaf: bytes) -> int:
        """First position of ``leaf`` among the original leaves."""
        try:
            return self.leaves.index(leaf)
        except ValueError:
            raise LeafNotFound("leaf is not part of this tree") from None


def compute_root(leaf: bytes, proof: Sequence[bytes]) -> bytes:
    h = leaf
    for sibling in proof:
        h = hash_pair(h, sibling)
    return h


def verify_inclusion(leaf: bytes, proof: Sequence[bytes], root: bytes) -> bool:
    return compute_root(leaf, proof) == root
