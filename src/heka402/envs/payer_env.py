from __future__ import annotations

import os
from typing import Optional

from eth_account import Account
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from web3 import Web3

from ..infrastructure.chain.networks import get_chain


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    payer_private_key: str
    contract_address: str

    circuit_wasm_path: str
    circuit_zkey_path: str
    snarkjs_bin: str
    proof_timeout_seconds: float

    chain_rpc_urls: dict[int, str]
    chain_contract_addresses: dict[int, str]
    default_chain_id: int
    wait_for_receipt: bool
    receipt_timeout_seconds: float

    x402_timeout_seconds: float

    api_host: str
    api_port: int
    api_debug: bool
    api_cors_origins: list[str]

    app_name: str
    app_version: str
    log_level: str

    @field_validator("payer_private_key")
    @classmethod
    def validate_payer_private_key(cls, v: str) -> str:
        if not v:
            raise ValueError("Payer private key cannot be empty")
        try:
            Account.from_key(v)
        except Exception as e:
            raise ValueError(f"Invalid payer private key: {e}") from e
        return v

    @field_validator("contract_address")
    @classmethod
    def validate_contract_address(cls, v: str) -> str:
        if not Web3.is_address(v):
            raise ValueError(f"Invalid contract address: {v!r}")
        return Web3.to_checksum_address(v)

    @field_validator("chain_contract_addresses")
    @classmethod
    def validate_chain_contract_addresses(cls, v: dict[int, str]) -> dict[int, str]:
        for chain_id, address in v.items():
            if not Web3.is_address(address):
                raise ValueError(
                    f"Invalid contract address for chain {chain_id}: {address!r}"
                )
        return {
            chain_id: Web3.to_checksum_address(address)
            for chain_id, address in v.items()
        }

    @field_validator("chain_rpc_urls")
    @classmethod
    def validate_chain_rpc_urls(cls, v: dict[int, str]) -> dict[int, str]:
        for chain_id, url in v.items():
            if chain_id <= 0:
                raise ValueError(f"Chain id must be positive, got {chain_id}")
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"RPC URL for chain {chain_id} must be http(s)")
        return v

    @field_validator("default_chain_id")
    @classmethod
    def validate_default_chain_id(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Default chain id must be positive")
        return v

    @model_validator(mode="after")
    def validate_default_chain_has_rpc(self) -> "Settings":
        if (
            self.default_chain_id not in self.chain_rpc_urls
            and get_chain(self.default_chain_id) is None
        ):
            raise ValueError(
                f"Default chain {self.default_chain_id} has no RPC endpoint; "
                "add it to CHAIN_RPC_URLS"
            )
        return self

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


def parse_chain_map(raw: Optional[str]) -> dict[int, str]:
    """Parse ``"11155111=https://...,84532=https://..."`` into ``{chain_id: value}``."""
    if not raw:
        return {}
    parsed: dict[int, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        chain_id_str, sep, value = item.partition("=")
        if not sep or not value.strip():
            raise ValueError(f"Expected 'chainId=value', got {item!r}")
        try:
            chain_id = int(chain_id_str.strip())
        except ValueError as e:
            raise ValueError(f"Invalid chain id in {item!r}") from e
        parsed[chain_id] = value.strip()
    return parsed


def _bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    return raw.lower() == "true"


def get_settings() -> Settings:
    api_cors_origins_str = os.environ.get("API_CORS_ORIGINS")

    return Settings(
        payer_private_key=os.environ.get("PAYER_PRIVATE_KEY", ""),
        contract_address=os.environ.get("CONTRACT_ADDRESS", ""),
        circuit_wasm_path=os.environ.get(
            "CIRCUIT_WASM_PATH", "circuits/build/payment_js/payment.wasm"
        ),
        circuit_zkey_path=os.environ.get(
            "CIRCUIT_ZKEY_PATH", "circuits/build/payment_final.zkey"
        ),
        snarkjs_bin=os.environ.get("SNARKJS_BIN", "snarkjs"),
        proof_timeout_seconds=float(os.environ.get("PROOF_TIMEOUT_SECONDS", "120")),
        chain_rpc_urls=parse_chain_map(os.environ.get("CHAIN_RPC_URLS")),
        chain_contract_addresses=parse_chain_map(
            os.environ.get("CHAIN_CONTRACT_ADDRESSES")
        ),
        default_chain_id=int(os.environ.get("DEFAULT_CHAIN_ID", "11155111")),
        wait_for_receipt=_bool(os.environ.get("WAIT_FOR_RECEIPT"), True),
        receipt_timeout_seconds=float(
            os.environ.get("RECEIPT_TIMEOUT_SECONDS", "120")
        ),
        x402_timeout_seconds=float(os.environ.get("X402_TIMEOUT_SECONDS", "10")),
        api_host=os.environ.get("API_HOST", "0.0.0.0"),
        api_port=int(os.environ.get("API_PORT", "8000")),
        api_debug=_bool(os.environ.get("API_DEBUG"), False),
        api_cors_origins=api_cors_origins_str.split(",")
        if api_cors_origins_str
        else ["*"],
        app_name=os.environ.get("APP_NAME", "Heka402"),
        app_version=os.environ.get("APP_VERSION", "1.0.0"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
