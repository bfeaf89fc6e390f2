"""Unit tests for environment-based settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from heka402.envs.payer_env import get_settings, parse_chain_map

PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
CONTRACT = "0x" + "c0" * 20

ENV_VARS = [
    "PAYER_PRIVATE_KEY",
    "CONTRACT_ADDRESS",
    "CIRCUIT_WASM_PATH",
    "CIRCUIT_ZKEY_PATH",
    "SNARKJS_BIN",
    "PROOF_TIMEOUT_SECONDS",
    "CHAIN_RPC_URLS",
    "CHAIN_CONTRACT_ADDRESSES",
    "DEFAULT_CHAIN_ID",
    "WAIT_FOR_RECEIPT",
    "RECEIPT_TIMEOUT_SECONDS",
    "X402_TIMEOUT_SECONDS",
    "API_HOST",
    "API_PORT",
    "API_DEBUG",
    "API_CORS_ORIGINS",
    "APP_NAME",
    "APP_VERSION",
    "LOG_LEVEL",
]


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PAYER_PRIVATE_KEY", PRIVATE_KEY)
    monkeypatch.setenv("CONTRACT_ADDRESS", CONTRACT)
    return monkeypatch


def test_defaults(env: pytest.MonkeyPatch) -> None:
    settings = get_settings()

    assert settings.snarkjs_bin == "snarkjs"
    assert settings.proof_timeout_seconds == 120
    assert settings.default_chain_id == 11155111
    assert settings.wait_for_receipt is True
    assert settings.chain_rpc_urls == {}
    assert settings.x402_timeout_seconds == 10
    assert settings.api_cors_origins == ["*"]
    assert settings.log_level == "INFO"


def test_overrides(env: pytest.MonkeyPatch) -> None:
    env.setenv(
        "CHAIN_RPC_URLS",
        "11155111=https://rpc.sepolia.example, 31337=http://127.0.0.1:8545",
    )
    env.setenv("CHAIN_CONTRACT_ADDRESSES", f"31337={'0x' + 'd0' * 20}")
    env.setenv("WAIT_FOR_RECEIPT", "false")
    env.setenv("DEFAULT_CHAIN_ID", "84532")
    env.setenv("LOG_LEVEL", "debug")
    env.setenv("API_CORS_ORIGINS", "http://localhost:3000,https://app.example")

    settings = get_settings()

    assert settings.chain_rpc_urls == {
        11155111: "https://rpc.sepolia.example",
        31337: "http://127.0.0.1:8545",
    }
    assert settings.chain_contract_addresses[31337].lower() == "0x" + "d0" * 20
    assert settings.wait_for_receipt is False
    assert settings.default_chain_id == 84532
    assert settings.log_level == "DEBUG"
    assert settings.api_cors_origins == [
        "http://localhost:3000",
        "https://app.example",
    ]


def test_contract_address_is_checksummed(env: pytest.MonkeyPatch) -> None:
    assert get_settings().contract_address != CONTRACT
    assert get_settings().contract_address.lower() == CONTRACT


def test_missing_private_key_raises(env: pytest.MonkeyPatch) -> None:
    env.delenv("PAYER_PRIVATE_KEY")

    with pytest.raises(ValidationError, match="private key cannot be empty"):
        get_settings()


def test_invalid_private_key_raises(env: pytest.MonkeyPatch) -> None:
    env.setenv("PAYER_PRIVATE_KEY", "0x1234")

    with pytest.raises(ValidationError, match="Invalid payer private key"):
        get_settings()


def test_invalid_contract_address_raises(env: pytest.MonkeyPatch) -> None:
    env.setenv("CONTRACT_ADDRESS", "0xdeadbeef")

    with pytest.raises(ValidationError, match="Invalid contract address"):
        get_settings()


def test_non_http_rpc_url_raises(env: pytest.MonkeyPatch) -> None:
    env.setenv("CHAIN_RPC_URLS", "1=ws://node.example")

    with pytest.raises(ValidationError, match="must be http"):
        get_settings()


def test_settings_are_immutable(env: pytest.MonkeyPatch) -> None:
    settings = get_settings()

    with pytest.raises(ValidationError):
        settings.default_chain_id = 1


class TestParseChainMap:
    def test_empty(self) -> None:
        assert parse_chain_map(None) == {}
        assert parse_chain_map("") == {}

    def test_skips_blank_items(self) -> None:
        assert parse_chain_map("1=https://a,,") == {1: "https://a"}

    @pytest.mark.parametrize("raw", ["1", "abc=https://a", "1="])
    def test_malformed_raises(self, raw: str) -> None:
        with pytest.raises(ValueError):
            parse_chain_map(raw)


def test_default_chain_without_rpc_raises(env: pytest.MonkeyPatch) -> None:
    env.setenv("DEFAULT_CHAIN_ID", "31337")

    with pytest.raises(ValidationError, match="Default chain 31337 has no RPC"):
        get_settings()


def test_default_chain_with_configured_rpc(env: pytest.MonkeyPatch) -> None:
    env.setenv("DEFAULT_CHAIN_ID", "31337")
    env.setenv("CHAIN_RPC_URLS", "31337=http://127.0.0.1:8545")

    assert get_settings().default_chain_id == 31337
