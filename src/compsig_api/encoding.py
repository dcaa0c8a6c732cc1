from __future__ import annotations
from typing import Any, Callable, Dict

from eth_account.messages import encode_typed_data

from .crypto import jcs_dumps, keccak256

Encoder = Callable[[Any], bytes]


def eip712_payload(typed_data: Dict[str, Any]) -> bytes:
    """EIP-712 pre-hash bytes: 0x19 0x01 || domainSeparator || hashStruct(message).

    ``typed_data`` is a full document with ``types``, ``primaryType``,
    ``domain`` and ``message`` keys, as passed to eth_signTypedData.
    """
    if not isinstance(typed_data, dict):
        raise ValueError("typed data must be an object")
    signable = encode_typed_data(full_message=typed_data)
    return b"\x19" + signable.version + signable.header + signable.body


ENCODERS: Dict[str, Encoder] = {
    "jcs": jcs_dumps,
    "eip712": eip712_payload,
}


def get_encoder(name: str) -> Encoder:
    try:
        return ENCODERS[name]
    except KeyError:
        raise ValueError(f"unknown encoding: {name!r}") from None


def message_leaf(message: Any, encode: Encoder = jcs_dumps) -> bytes:
    return keccak256(encode(message))
