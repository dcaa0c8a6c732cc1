from __future__ import annotations
import os
import logging
import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .settings import settings
from .logutil import setup_logging, level_from_name
from .crypto import (
    MalformedSignature,
    address_of,
    normalize_address,
    secp256k1_generate,
    unhex,
)
from .composite import sign_messages_with_key, verify_message
from .encoding import get_encoder
from .models import SignRequest, SignResponse, VerifyRequest, VerifyResponse
from .policy import enforce_message_policy
from .middleware.size_limit import SizeLimitMiddleware

setup_logging(level_from_name(settings.log_level))
logger = logging.getLogger(__name__)

app = FastAPI(title="Composite Signatures")
app.add_middleware(SizeLimitMiddleware)

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
UNAUTHORIZED = 4100


def _load_key() -> bytes:
    sk_path = Path(os.getenv("COMPSIG_SIGNING_KEY_PATH", settings.signing_key_path))
    if not sk_path.exists():
        # generate if allowed for development only (gated by COMPSIG_ALLOW_DEV_KEYGEN)
        allow_dev = os.getenv("COMPSIG_ALLOW_DEV_KEYGEN")
        allow_dev = (
            allow_dev.lower() in ("1", "true", "yes")
            if allow_dev is not None
            else settings.allow_dev_keygen
        )
        if not allow_dev:
            raise FileNotFoundError(
                "signing key not found; set COMPSIG_ALLOW_DEV_KEYGEN=true to auto-generate for development"
            )
        sk_path.parent.mkdir(parents=True, exist_ok=True)
        sk, addr = secp256k1_generate()
        sk_path.write_text(sk.hex())
        logger.info("generated development signing key for %s", addr)
    return unhex(sk_path.read_text().strip())


def _max_messages() -> int:
    return int(os.getenv("COMPSIG_MAX_MESSAGES") or settings.max_messages)


def _encoder(name: Optional[str]):
    try:
        return get_encoder(name or settings.default_encoding)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _sign(messages: list, encoding: Optional[str]) -> Dict[str, Any]:
    """Policy check, encode, sign. Raises HTTPException on caller errors."""
    try:
        enforce_message_policy(messages, _max_messages())
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    encode = _encoder(encoding)
    try:
        sk = _load_key()
    except FileNotFoundError:
        logger.error("signing key unavailable")
        raise HTTPException(status_code=503, detail="signing key unavailable")
    try:
        composite = sign_messages_with_key(messages, sk, encode)
    except Exception:
        raise HTTPException(status_code=400, detail="message encoding failed")
    logger.info("signed composite root over %d messages", len(messages))
    return {"signer": address_of(sk), **composite.to_json()}


@app.post("/composite/sign")
async def composite_sign(body: dict):
    try:
        req = SignRequest(**body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="request schema invalid")
    out = _sign(req.messages, req.encoding)
    return JSONResponse(SignResponse(**out).model_dump(by_alias=True))


@app.post("/composite/verify")
async def composite_verify(body: dict):
    try:
        req = VerifyRequest(**body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="request schema invalid")
    encode = _encoder(req.encoding)
    try:
        result = verify_message(
            req.message,
            [unhex(s) for s in req.proof],
            unhex(req.merkle_root),
            unhex(req.signature),
            req.signer,
            encode,
        )
    except MalformedSignature:
        raise HTTPException(status_code=400, detail="malformed signature")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        raise HTTPException(status_code=400, detail="message encoding failed")
    resp = VerifyResponse(
        valid=result.ok,
        signature_valid=result.signature_ok,
        proof_valid=result.proof_ok,
        recovered_signer=result.recovered_signer,
        reason=result.reason,
    )
    return resp.model_dump(by_alias=True)


def _rpc_error(req_id, code: int, message: str) -> JSONResponse:
    return JSONResponse(
        {"jsonrpc": "2.0", "id": req_id, "error": {"code": code, "message": message}}
    )


@app.post("/rpc")
async def rpc(request: Request):
    """JSON-RPC entrypoint for eth_signTypedData_v5.

    params: [address, [typedData, ...]]; result: {signature, merkleRoot, proofs}.
    """
    try:
        call = await request.json()
    except Exception:
        return _rpc_error(None, PARSE_ERROR, "parse error")
    if not isinstance(call, dict) or call.get("jsonrpc") != "2.0" or "method" not in call:
        return _rpc_error(None, INVALID_REQUEST, "invalid request")
    req_id = call.get("id")
    if call["method"] != "eth_signTypedData_v5":
        return _rpc_error(req_id, METHOD_NOT_FOUND, "method not found")

    params = call.get("params")
    if not isinstance(params, list) or len(params) != 2 or not isinstance(params[1], list):
        return _rpc_error(req_id, INVALID_PARAMS, "expected [address, [typedData, ...]]")
    try:
        requested = normalize_address(params[0])
    except ValueError:
        return _rpc_error(req_id, INVALID_PARAMS, "invalid address")
    try:
        sk = _load_key()
    except FileNotFoundError:
        return _rpc_error(req_id, UNAUTHORIZED, "no signing account available")
    if requested != address_of(sk):
        return _rpc_error(req_id, UNAUTHORIZED, "address is not managed by this signer")

    try:
        out = _sign(params[1], "eip712")
    except HTTPException as e:
        return _rpc_error(req_id, INVALID_PARAMS, str(e.detail))
    out.pop("signer")
    return JSONResponse({"jsonrpc": "2.0", "id": req_id, "result": out})


@app.get("/healthz")
async def healthz():
    return {"ok": True, "ts": datetime.datetime.utcnow().isoformat()}
