from __future__ import annotations
import os
import json
import pathlib
import typer
from rich import print
import requests

from compsig_api.crypto import (
    MalformedSignature,
    address_of,
    secp256k1_generate,
    unhex,
)
from compsig_api.composite import (
    CompositeSignature,
    MessageNotFound,
    locate_message,
    sign_messages_with_key,
    verify_message,
)
from compsig_api.encoding import get_encoder
from compsig_api.logutil import setup_logging, level_from_name
from compsig_api.settings import settings

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def main():
    setup_logging(level_from_name(settings.log_level))


def _load_json(path: str):
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def _load_messages(path: str) -> list:
    messages = _load_json(path)
    if not isinstance(messages, list) or not messages:
        print("[red]Message file must contain a non-empty JSON array[/red]")
        raise typer.Exit(code=2)
    return messages


def _read_key(path: str) -> bytes:
    return unhex(pathlib.Path(path).read_text().strip())


@app.command()
def gen_key(
    out: str = typer.Option(
        "./keys/secp256k1_private.key", help="Path to write the hex private key"
    ),
):
    d = os.path.dirname(out)
    if d:
        os.makedirs(d, exist_ok=True)
    sk, addr = secp256k1_generate()
    pathlib.Path(out).write_text(sk.hex())
    print(f"[green]Wrote key for {addr} to {out}[/green]")


@app.command()
def address(key: str = typer.Option(settings.signing_key_path, help="Private key file")):
    print(address_of(_read_key(key)))


@app.command()
def sign(
    messages_path: str = typer.Argument(..., help="JSON array of messages"),
    key: str = typer.Option(settings.signing_key_path, help="Private key file"),
    encoding: str = typer.Option(settings.default_encoding, help="jcs|eip712"),
    out: str = typer.Option(None, help="Write the composite signature JSON here"),
):
    """Sign every message in the file with one signature over their Merkle root."""
    messages = _load_messages(messages_path)
    try:
        encode = get_encoder(encoding)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    sk = _read_key(key)
    composite = sign_messages_with_key(messages, sk, encode)
    doc = {"signer": address_of(sk), **composite.to_json()}
    if out:
        pathlib.Path(out).write_text(json.dumps(doc, indent=2))
        print(f"[green]Wrote composite signature to {out}[/green]")
    else:
        print(doc)


@app.command()
def verify(
    message_path: str = typer.Argument(..., help="JSON file holding one message"),
    composite_path: str = typer.Argument(..., help="Composite signature JSON"),
    index: int = typer.Option(..., help="Position of the message in the signed set"),
    signer: str = typer.Option(..., help="Expected signer address"),
    encoding: str = typer.Option(settings.default_encoding, help="jcs|eip712"),
):
    message = _load_json(message_path)
    try:
        composite = CompositeSignature.from_json(_load_json(composite_path))
    except ValueError as e:
        print(f"[red]Malformed composite signature: {e}[/red]")
        raise typer.Exit(code=2)
    if not 0 <= index < len(composite.proofs):
        print(f"[red]No proof at index {index}[/red]")
        raise typer.Exit(code=2)
    try:
        result = verify_message(
            message,
            composite.proofs[index],
            composite.root,
            composite.signature,
            signer,
            get_encoder(encoding),
        )
    except MalformedSignature as e:
        print(f"[red]Malformed signature: {e}[/red]")
        raise typer.Exit(code=2)
    print(
        {
            "valid": result.ok,
            "signature_valid": result.signature_ok,
            "proof_valid": result.proof_ok,
            "reason": result.reason,
        }
    )
    if not result.ok:
        raise typer.Exit(code=1)


@app.command()
def locate(
    messages_path: str = typer.Argument(..., help="JSON array of the signed messages"),
    message_path: str = typer.Argument(..., help="JSON file holding one message"),
    encoding: str = typer.Option(settings.default_encoding, help="jcs|eip712"),
):
    """Find a message's index in the signed set by value."""
    messages = _load_messages(messages_path)
    try:
        idx = locate_message(messages, _load_json(message_path), get_encoder(encoding))
    except MessageNotFound:
        print("[yellow]Message is not part of this set[/yellow]")
        raise typer.Exit(code=1)
    print(idx)


@app.command()
def remote_sign(
    messages_path: str = typer.Argument(..., help="JSON array of messages"),
    url: str = typer.Option(..., help="POST URL for /composite/sign"),
    encoding: str = typer.Option(None, help="jcs|eip712 (service default if unset)"),
):
    payload = {"messages": _load_messages(messages_path)}
    if encoding:
        payload["encoding"] = encoding
    resp = requests.post(url, json=payload, timeout=30)
    print(f"[cyan]Status[/cyan]: {resp.status_code}")
    try:
        print(resp.json())
    except ValueError:
        print(resp.text)


if __name__ == "__main__":
    app()
