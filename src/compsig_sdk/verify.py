from typing import Any, Dict, List
from compsig_api.composite import CompositeSignature, verify_message
from compsig_api.crypto import unhex
from compsig_api.encoding import get_encoder
from compsig_api.merkle import verify_inclusion


def verify_composite_message(
    message: Any,
    index: int,
    composite_json: Dict[str, Any],
    expected_signer: str,
    encoding: str = "jcs",
) -> bool:
    """Return True if ``message`` is the ``index``-th member of a composite signature.

    ``composite_json`` is the {signature, merkleRoot, proofs} object returned
    by the signer. Both the signer check over the root and the inclusion proof
    for ``proofs[index]`` must pass.
    """
    if index < 0:
        return False
    try:
        composite = CompositeSignature.from_json(composite_json)
        proof = composite.proofs[index]
        result = verify_message(
            message,
            proof,
            composite.root,
            composite.signature,
            expected_signer,
            get_encoder(encoding),
        )
    except Exception:
        return False
    return result.ok


def verify_proof_hex(leaf_hex: str, proof_hex: List[str], root_hex: str) -> bool:
    """Check an inclusion proof given as hex strings; no signature involved."""
    try:
        return verify_inclusion(
            unhex(leaf_hex), [unhex(s) for s in proof_hex], unhex(root_hex)
        )
    except Exception:
        return False
