"""Domain-specific exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .entities import PaymentResult


class Heka402Error(Exception):
    """Base class for every error raised by the payment engine."""


class InputValidationError(Heka402Error, ValueError):
    """Raised when a payment request is malformed, before any external call."""


class InvalidSplitError(Heka402Error, ValueError):
    """Raised when a total amount cannot be partitioned across the given chains."""


class ProofGenerationError(Heka402Error):
    """Raised when the proving backend fails or the circuit rejects the inputs."""

    def __init__(self, message: str, *, diagnostic: Optional[str] = None) -> None:
        super().__init__(message)
        self.diagnostic = diagnostic

    def __str__(self) -> str:
        message = super().__str__()
        if self.diagnostic:
            return f"{message}: {self.diagnostic}"
        return message


class ChainExecutionError(Heka402Error):
    """Raised when a single chain submission fails (RPC failure or contract revert)."""

    def __init__(
        self,
        chain_id: int,
        cause: Union[str, BaseException],
        *,
        tx_hash: Optional[str] = None,
    ) -> None:
        self.chain_id = chain_id
        self.cause = cause
        # Set when the failure happened after broadcast (revert, receipt timeout).
        self.tx_hash = tx_hash
        super().__init__(f"Payment on chain {chain_id} failed: {cause}")


class X402ResolutionError(Heka402Error):
    """Raised when an x402 endpoint cannot be reached or returns unreadable data."""


class PartialPaymentError(Heka402Error):
    """Raised by the caller-facing API when a chain failed after earlier chains succeeded.

    The attached ``result`` keeps the transaction hashes that were already
    broadcast; they are not rolled back.
    """

    def __init__(self, result: "PaymentResult") -> None:
        self.result = result
        failure = result.failure
        reason = failure.reason if failure else "unknown failure"
        chain = failure.chain_id if failure else "?"
        super().__init__(
            f"Payment partially executed: {len(result.submissions)} chain(s) "
            f"submitted, chain {chain} failed: {reason}"
        )
