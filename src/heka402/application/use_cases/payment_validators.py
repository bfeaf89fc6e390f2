"""Pure validation functions for payment requests.

These functions contain the input rules that must hold before any external call
(proof generation or chain submission) is made. They can be tested in isolation
without provers, RPC endpoints or HTTP services.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

from ...crypto.commitment import normalize_address, normalize_secret, parse_amount
from ...domain.entities import ZERO_ADDRESS, PaymentRequest
from ...domain.errors import InputValidationError


def validate_recipient(recipient: str) -> str:
    """Validate and checksum the recipient address.

    Raises:
        InputValidationError: If the address is malformed or the zero address
            (the "no recipient" sentinel of the x402 resolver).
    """
    address = normalize_address(recipient)
    if address == ZERO_ADDRESS:
        raise InputValidationError("Recipient cannot be the zero address")
    return address


def validate_amount(amount: Union[int, str]) -> int:
    """Validate that the amount is a positive uint256.

    Raises:
        InputValidationError: If the amount is not numeric or is zero.
    """
    value = parse_amount(amount)
    if value <= 0:
        raise InputValidationError(f"Amount must be greater than zero. Got {value}")
    return value


def validate_token(token: Optional[str]) -> Optional[str]:
    """Validate the token address; ``None`` and the zero address mean native asset."""
    if token is None or token == "":
        return None
    address = normalize_address(token)
    return None if address == ZERO_ADDRESS else address


def validate_chain_ids(chain_ids: Iterable[int]) -> tuple[int, ...]:
    """Validate that the chain list is non-empty, positive and duplicate-free.

    Raises:
        InputValidationError: If the list is empty, has duplicates or bad ids.
    """
    ids = tuple(chain_ids)
    if not ids:
        raise InputValidationError("At least one chain id is required")
    for chain_id in ids:
        if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id <= 0:
            raise InputValidationError(f"Invalid chain id: {chain_id!r}")
    if len(set(ids)) != len(ids):
        raise InputValidationError(f"Duplicate chain ids in {list(ids)}")
    return ids


def build_payment_request(
    *,
    recipient: str,
    amount: Union[int, str],
    chain_ids: Iterable[int],
    token: Optional[str] = None,
    secret: Optional[Union[str, bytes]] = None,
) -> PaymentRequest:
    """Validate raw fields and build a normalized ``PaymentRequest``."""
    return PaymentRequest(
        recipient=validate_recipient(recipient),
        amount=validate_amount(amount),
        token=validate_token(token),
        chain_ids=validate_chain_ids(chain_ids),
        secret=normalize_secret(secret) if secret is not None else None,
    )


def validate_payment_request(request: PaymentRequest) -> PaymentRequest:
    """Re-validate a request built elsewhere and return its normalized copy."""
    return build_payment_request(
        recipient=request.recipient,
        amount=request.amount,
        chain_ids=request.chain_ids,
        token=request.token,
        secret=request.secret,
    )
