import json

from typer.testing import CliRunner

from compsig_cli.__main__ import app

M1 = {"type": "Mail", "contents": "Hello Bob"}
M2 = {"type": "Transfer", "amount": "1 ETH"}

runner = CliRunner()


def _write(path, obj):
    path.write_text(json.dumps(obj))
    return str(path)


def test_gen_key_and_address(tmp_path):
    key = tmp_path / "k" / "sk.key"
    r = runner.invoke(app, ["gen-key", "--out", str(key)])
    assert r.exit_code == 0, r.output
    assert key.exists()
    r = runner.invoke(app, ["address", "--key", str(key)])
    assert r.exit_code == 0
    assert r.output.strip().splitlines()[-1].startswith("0x")


def test_sign_verify_locate(tmp_path, key_file, signer_address):
    messages = _write(tmp_path / "messages.json", [M1, M2])
    out = tmp_path / "composite.json"
    r = runner.invoke(app, ["sign", messages, "--key", str(key_file), "--out", str(out)])
    assert r.exit_code == 0, r.output
    doc = json.loads(out.read_text())
    assert doc["signer"] == signer_address

    m2 = _write(tmp_path / "m2.json", M2)
    r = runner.invoke(
        app, ["verify", m2, str(out), "--index", "1", "--signer", signer_address]
    )
    assert r.exit_code == 0, r.output

    r = runner.invoke(
        app, ["verify", m2, str(out), "--index", "0", "--signer", signer_address]
    )
    assert r.exit_code == 1

    r = runner.invoke(app, ["locate", messages, m2])
    assert r.exit_code == 0
    assert r.output.strip().splitlines()[-1] == "1"

    missing = _write(tmp_path / "missing.json", {"type": "Other"})
    r = runner.invoke(app, ["locate", messages, missing])
    assert r.exit_code == 1


def test_verify_rejects_malformed_signature(tmp_path, key_file, signer_address):
    messages = _write(tmp_path / "messages.json", [M1])
    out = tmp_path / "composite.json"
    runner.invoke(app, ["sign", messages, "--key", str(key_file), "--out", str(out)])
    doc = json.loads(out.read_text())
    doc["signature"] = doc["signature"][:-4]
    out.write_text(json.dumps(doc))
    m1 = _write(tmp_path / "m1.json", M1)
    r = runner.invoke(
        app, ["verify", m1, str(out), "--index", "0", "--signer", signer_address]
    )
    assert r.exit_code == 2


def test_sign_rejects_empty_set(tmp_path, key_file):
    messages = _write(tmp_path / "messages.json", [])
    r = runner.invoke(app, ["sign", messages, "--key", str(key_file)])
    assert r.exit_code == 2


def test_verify_rejects_malformed_composite_file(tmp_path, signer_address):
    composite = _write(
        tmp_path / "composite.json",
        {"merkleRoot": "0xzz", "signature": "0x00", "proofs": [[]]},
    )
    m1 = _write(tmp_path / "m1.json", M1)
    r = runner.invoke(
        app, ["verify", m1, composite, "--index", "0", "--signer", signer_address]
    )
    assert r.exit_code == 2
    assert "Malformed composite signature" in r.output
