from __future__ import annotations
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .crypto import unhex


def _hex(v: Any) -> str:
    if not isinstance(v, str) or not v.startswith("0x"):
        raise ValueError("expected 0x-prefixed hex string")
    unhex(v)
    return v


class SignRequest(BaseModel):
    """Inbound composite signing request.

    ``messages`` must be a non-empty array; each element is encoded with
    ``encoding`` (defaults to the service setting when omitted).
    """

    messages: List[Any] = Field(min_length=1)
    encoding: Optional[str] = None


class CompositeSignatureModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    signature: str
    merkle_root: str = Field(alias="merkleRoot")
    proofs: List[List[str]]

    @field_validator("signature", "merkle_root")
    @classmethod
    def _is_hex(cls, v):
        return _hex(v)

    @field_validator("proofs")
    @classmethod
    def _proofs_are_hex(cls, v):
        for proof in v:
            for sibling in proof:
                _hex(sibling)
        return v


class SignResponse(CompositeSignatureModel):
    signer: str


class VerifyRequest(BaseModel):
    """Single-message verification against a composite signature.

    Signature length is not validated here; the verifier reports a wrong
    length as a malformed signature.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: Any
    proof: List[str]
    merkle_root: str = Field(alias="merkleRoot")
    signature: str
    signer: str
    encoding: Optional[str] = None

    @field_validator("signature", "merkle_root")
    @classmethod
    def _is_hex(cls, v):
        return _hex(v)

    @field_validator("proof")
    @classmethod
    def _proof_is_hex(cls, v):
        for sibling in v:
            _hex(sibling)
        return v


class VerifyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    signature_valid: bool = Field(alias="signatureValid")
    proof_valid: bool = Field(alias="proofValid")
    recovered_signer: Optional[str] = Field(default=None, alias="recoveredSigner")
    reason: str
