"""Replay-protection nonce shared by every chain of one logical payment."""

from __future__ import annotations

import secrets
import time
from typing import Final

from web3 import Web3

from .commitment import Bytes32Hex, normalize_address

NONCE_TYPES: Final[list[str]] = ["uint256", "address", "uint256"]
SALT_RANDOM_BITS: Final[int] = 64


def current_salt() -> int:
    """Wall-clock milliseconds in the high bits, 64 random bits in the low bits.

    Two payments by the same payer in the same millisecond still get distinct
    nonces.
    """
    millis = int(time.time() * 1000)
    return (millis << SALT_RANDOM_BITS) | secrets.randbits(SALT_RANDOM_BITS)


def derive_nonce(primary_chain_id: int, payer_address: str, salt: int) -> Bytes32Hex:
    """keccak256 of packed ``(uint256 chainId, address payer, uint256 salt)``.

    Computed once per payment request and reused on every chain of the plan; each
    chain's contract tracks consumed nonces per payer.
    """
    if primary_chain_id < 0 or salt < 0:
        raise ValueError("chain id and salt must be >= 0")
    digest = Web3.solidity_keccak(
        NONCE_TYPES,
        [primary_chain_id, normalize_address(payer_address), salt],
    )
    return Bytes32Hex(Web3.to_hex(digest))


def nonce_to_uint(nonce: str) -> int:
    """The contract takes the nonce as ``uint256``."""
    return int(nonce, 16)
