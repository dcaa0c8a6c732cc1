import os
import sys
from pathlib import Path

import pytest

# Ensure the 'src' directory is on sys.path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Default dev keygen is allowed in tests
os.environ.setdefault("COMPSIG_ALLOW_DEV_KEYGEN", "true")

# Well-known throwaway key (web3.py docs); never holds funds
TEST_KEY_HEX = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


@pytest.fixture
def signing_key() -> bytes:
    return bytes.fromhex(TEST_KEY_HEX)


@pytest.fixture
def signer_address() -> str:
    return TEST_ADDRESS


@pytest.fixture
def key_file(tmp_path, monkeypatch):
    """Write the test key to disk and point the service at it."""
    path = tmp_path / "keys" / "secp256k1_private.key"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(TEST_KEY_HEX)
    monkeypatch.setenv("COMPSIG_SIGNING_KEY_PATH", str(path))
    return path


@pytest.fixture
def mail_typed_data():
    """EIP-712 'Ether Mail' example document."""
    return {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
            ],
            "Person": [
                {"name": "name", "type": "string"},
                {"name": "wallet", "type": "address"},
            ],
            "Mail": [
                {"name": "from", "type": "Person"},
                {"name": "to", "type": "Person"},
                {"name": "contents", "type": "string"},
            ],
        },
        "primaryType": "Mail",
        "domain": {
            "name": "Ether Mail",
            "version": "1",
            "chainId": 1,
            "verifyingContract": "0xCcCCccccCCCCcCCCCCCcCcCccCcCCCcCcccccccC",
        },
        "message": {
            "from": {
                "name": "Cow",
                "wallet": "0xCD2a3d9F938E13CD947Ec05AbC7FE734Df8DD826",
            },
            "to": {
                "name": "Bob",
                "wallet": "0xbBbBBBBbbBBBbbbBbbBbbbbBBbBbbbbBbBbbBBbB",
            },
            "contents": "Hello, Bob!",
        },
    }
