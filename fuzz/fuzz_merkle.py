"""Fuzz harness for Merkle tree construction & inclusion proof verification."""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from compsig_api.crypto import keccak256
    from compsig_api.merkle import MerkleTree, padded_size, verify_inclusion


def TestOneInput(data: bytes):  # noqa: N802
    if not data:
        return
    # Split data deterministically into pseudo-leaves (bounded count)
    size = max(1, min(32, data[0]))
    chunks = [data[i : i + size] for i in range(1, min(len(data), 1 + size * 32), size)]
    leaves = [keccak256(c) for c in chunks if c]
    if not leaves:
        return
    tree = MerkleTree.from_leaves(leaves)
    if len(tree.levels[0]) != padded_size(len(leaves)):
        raise RuntimeError("padded leaf layer has wrong size")
    idx = data[-1] % len(leaves)
    proof = tree.inclusion_proof(idx)
    if len(proof) != tree.height:
        raise RuntimeError("proof length differs from tree height")
    if not verify_inclusion(leaves[idx], proof, tree.root):
        raise RuntimeError("valid inclusion proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
