"""Higher-level inclusion proof fuzzing with mutated proofs."""
from __future__ import annotations
import atheris
import sys
import random

with atheris.instrument_imports():
    from compsig_api.crypto import keccak256
    from compsig_api.merkle import MerkleTree, verify_inclusion


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 8:
        return
    seed = int.from_bytes(data[:4], 'little')
    random.seed(seed)
    chunk_len = 1 + (data[4] % 32)
    body = data[5:]
    leaves_raw = [body[i:i+chunk_len] for i in range(0, min(len(body), chunk_len * 16), chunk_len)]
    leaves = [keccak256(x) for x in leaves_raw if x]
    if len(leaves) < 3:
        return
    tree = MerkleTree.from_leaves(leaves)
    idx = seed % len(leaves)
    proof = tree.inclusion_proof(idx)
    # With some probability, flip one bit in one sibling to exercise negative path
    if random.random() < 0.2:
        pos = random.randrange(len(proof))
        sib = proof[pos]
        proof[pos] = bytes([sib[0] ^ 0x01]) + sib[1:]
        if verify_inclusion(leaves[idx], proof, tree.root):
            raise RuntimeError("tampered proof unexpectedly verified")
    else:
        if not verify_inclusion(leaves[idx], proof, tree.root):
            raise RuntimeError("valid proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
