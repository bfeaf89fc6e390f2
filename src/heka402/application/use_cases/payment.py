"""Caller-facing payment API: ``execute_payment`` and ``x402_payment``."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ...crypto.commitment import generate_secret
from ...domain.entities import ZERO_ADDRESS, PaymentResult
from ...domain.errors import InputValidationError, PartialPaymentError
from ...domain.shared import RecipientResolverProtocol, SecretFactory
from ..dtos import (
    PaymentConfigDTO,
    X402PaymentRequestDTO,
    X402PaymentResponseDTO,
)
from .orchestrator import PaymentOrchestrator
from .payment_validators import build_payment_request

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for executing privacy-preserving split payments."""

    def __init__(
        self,
        orchestrator: PaymentOrchestrator,
        resolver: RecipientResolverProtocol,
        *,
        default_chain_id: int,
        secret_factory: SecretFactory = generate_secret,
    ) -> None:
        self.orchestrator = orchestrator
        self.resolver = resolver
        self.default_chain_id = default_chain_id
        self.secret_factory = secret_factory

    async def submit_payment(self, config: PaymentConfigDTO) -> PaymentResult:
        """Validate the config and run the payment, returning the full result.

        Partial results are returned, not raised; see ``execute_payment``.
        """
        request = build_payment_request(
            recipient=config.recipient,
            amount=config.amount,
            chain_ids=config.chains,
            token=config.token,
            secret=config.secret,
        )
        return await self.orchestrator.execute_payment(request)

    async def execute_payment(self, config: PaymentConfigDTO) -> str:
        """Execute a payment and return the canonical (first chain's) tx hash.

        Raises:
            InputValidationError: Malformed config.
            ProofGenerationError: Proof could not be produced; nothing submitted.
            PartialPaymentError: A chain failed; the error carries the result with
                the transactions that were already broadcast.
        """
        result = await self.submit_payment(config)
        if result.is_partial or result.canonical_tx_hash is None:
            raise PartialPaymentError(result)
        return result.canonical_tx_hash

    async def x402_payment(
        self, request: X402PaymentRequestDTO
    ) -> X402PaymentResponseDTO:
        """Resolve the recipient of an x402 URL and pay it.

        The secret is generated here so the returned commitment is exactly the one
        ``execute_payment`` would derive for the same secret, recipient and amount.
        """
        recipient = await self.resolver.resolve(request.url)
        if recipient == ZERO_ADDRESS:
            raise InputValidationError(
                f"x402 endpoint {request.url} did not provide a recipient"
            )

        chains = (
            request.chains if request.chains is not None else [self.default_chain_id]
        )
        config = PaymentConfigDTO(
            recipient=recipient,
            amount=request.amount,
            token=request.token,
            chains=chains,
            secret=self.secret_factory(),
        )
        result = await self.submit_payment(config)
        if result.is_partial or result.canonical_tx_hash is None:
            raise PartialPaymentError(result)
        logger.info("x402 payment to %s settled: %s", recipient, result.tx_hashes)
        return X402PaymentResponseDTO(
            tx_hash=result.canonical_tx_hash, commitment=result.commitment
        )

    async def aclose(self) -> None:
        await self.resolver.aclose()


async def quick_payment(
    service: PaymentService,
    recipient: str,
    amount: str,
    chains: Optional[Sequence[int]] = None,
) -> str:
    """Pay ``amount`` to ``recipient`` with an auto-generated secret.

    Defaults to the service's default chain when no chains are given.
    """
    config = PaymentConfigDTO(
        recipient=recipient,
        amount=amount,
        chains=list(chains) if chains is not None else [service.default_chain_id],
    )
    return await service.execute_payment(config)
