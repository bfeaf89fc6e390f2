"""Commitments over (secret, recipient, amount).

The commitment is keccak256 over the Solidity packed encoding of
``(bytes32 secret, address recipient, uint256 amount)``. Every field has a fixed
width (32 + 20 + 32 bytes), so two distinct triples cannot share an encoding.
"""

from __future__ import annotations

import secrets
from typing import Final, NewType, Union

from web3 import Web3

from ..domain.errors import InputValidationError

Bytes32Hex = NewType("Bytes32Hex", str)

COMMITMENT_TYPES: Final[list[str]] = ["bytes32", "address", "uint256"]
RECIPIENT_HASH_TYPES: Final[list[str]] = ["address"]
SECRET_SIZE: Final[int] = 32
UINT256_MAX: Final[int] = 2**256 - 1


def normalize_address(value: str) -> str:
    """Return the checksummed form of an address or raise InputValidationError."""
    if not isinstance(value, str) or not Web3.is_address(value):
        raise InputValidationError(f"Invalid address: {value!r}")
    return Web3.to_checksum_address(value)


def normalize_secret(value: Union[str, bytes]) -> Bytes32Hex:
    """Return a secret as 0x-prefixed lowercase hex of exactly 32 bytes."""
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        body = value[2:] if value.lower().startswith("0x") else value
        try:
            raw = bytes.fromhex(body)
        except ValueError as e:
            raise InputValidationError("Secret must be hex encoded") from e
    else:
        raise InputValidationError("Secret must be hex string or bytes")
    if len(raw) != SECRET_SIZE:
        raise InputValidationError(
            f"Secret must be {SECRET_SIZE} bytes, got {len(raw)}"
        )
    return Bytes32Hex("0x" + raw.hex())


def parse_amount(value: Union[int, str]) -> int:
    """Parse an amount in the smallest unit (decimal string or int) into uint256."""
    if isinstance(value, bool):
        raise InputValidationError("Amount must be an integer")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str) and value.strip().isdigit():
        amount = int(value.strip(), 10)
    else:
        raise InputValidationError(f"Amount must be a non-negative integer: {value!r}")
    if amount < 0 or amount > UINT256_MAX:
        raise InputValidationError(f"Amount out of uint256 range: {value!r}")
    return amount


def generate_secret() -> Bytes32Hex:
    """Fresh 32-byte blinding value."""
    return Bytes32Hex("0x" + secrets.token_bytes(SECRET_SIZE).hex())


def derive_commitment(
    secret: Union[str, bytes], recipient: str, amount: Union[int, str]
) -> Bytes32Hex:
    """Binding, hiding commitment to ``(secret, recipient, amount)``."""
    secret_hex = normalize_secret(secret)
    digest = Web3.solidity_keccak(
        COMMITMENT_TYPES,
        [
            bytes.fromhex(secret_hex[2:]),
            normalize_address(recipient),
            parse_amount(amount),
        ],
    )
    return Bytes32Hex(Web3.to_hex(digest))


def derive_recipient_hash(recipient: str) -> Bytes32Hex:
    """keccak256 of the packed recipient address, used as a separate public input."""
    digest = Web3.solidity_keccak(RECIPIENT_HASH_TYPES, [normalize_address(recipient)])
    return Bytes32Hex(Web3.to_hex(digest))
