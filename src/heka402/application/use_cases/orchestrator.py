"""End-to-end execution of one logical payment.

The flow is a strictly ordered step machine::

    RESOLVE -> PROVE -> SPLIT -> NONCE -> EXECUTE[0..n-1] -> DONE

One proof and one nonce serve every chain, so the proof must exist before the
first chain submission. Chain submissions are sequential and fail-fast: the first
failing chain stops the payment and the already-broadcast transactions are kept
in the result (they cannot be rolled back).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Optional, TypeVar

from ...crypto.commitment import generate_secret
from ...crypto.nonce import current_salt, derive_nonce
from ...domain.entities import (
    ChainFailure,
    ChainSubmission,
    CommitmentProof,
    PaymentPlan,
    PaymentRequest,
    PaymentResult,
    PlanEntry,
)
from ...domain.errors import ChainExecutionError, InputValidationError
from ...domain.shared import ChainExecutorProtocol, SaltFactory, SecretFactory
from .payment_validators import validate_payment_request
from .proof_requester import ProofRequester
from .splitter import split_payment

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _required(value: Optional[T], name: str, step: "PaymentStep") -> T:
    if value is None:
        raise RuntimeError(f"Payment flow has no {name} at step {step.value}")
    return value


class PaymentStep(str, Enum):
    """Steps of the payment flow, in execution order."""

    RESOLVE = "resolve"
    PROVE = "prove"
    SPLIT = "split"
    NONCE = "nonce"
    EXECUTE = "execute"
    DONE = "done"


@dataclass
class PaymentFlow:
    """Per-call state; never shared between payments."""

    request: PaymentRequest
    step: PaymentStep = PaymentStep.RESOLVE
    secret: Optional[str] = field(default=None, repr=False)
    bundle: Optional[CommitmentProof] = None
    plan: Optional[PaymentPlan] = None
    nonce: Optional[str] = None
    submissions: list[ChainSubmission] = field(default_factory=list)
    failure: Optional[ChainFailure] = None

    def discard_secret(self) -> None:
        self.secret = None


class PaymentOrchestrator:
    """Composes proof generation, splitting, nonce derivation and chain execution."""

    def __init__(
        self,
        proof_requester: ProofRequester,
        chain_executor: ChainExecutorProtocol,
        *,
        salt_factory: SaltFactory = current_salt,
        secret_factory: SecretFactory = generate_secret,
    ) -> None:
        self.proof_requester = proof_requester
        self.chain_executor = chain_executor
        self.salt_factory = salt_factory
        self.secret_factory = secret_factory

    async def execute_payment(self, request: PaymentRequest) -> PaymentResult:
        """Run the full flow for one payment request.

        Raises:
            InputValidationError: Malformed request or a chain the executor cannot
                serve, before any external call.
            ProofGenerationError: Prover failure; no chain has been called.

        A chain failure does not raise: the returned result is marked partial and
        carries the failure next to the transactions already submitted.
        """
        request = validate_payment_request(request)
        self._check_supported_chains(request.chain_ids)
        flow = PaymentFlow(request=request)
        try:
            self._resolve(flow)
            await self._run_step(flow, PaymentStep.PROVE, self._prove(flow))
            self._split(flow)
            await self._run_step(flow, PaymentStep.NONCE, self._derive_nonce(flow))
            await self._execute_plan(flow)
        finally:
            # Also reached on cancellation before the first submission.
            flow.discard_secret()

        flow.step = PaymentStep.DONE
        return self._build_result(flow)

    def _check_supported_chains(self, chain_ids: tuple[int, ...]) -> None:
        unsupported = [
            chain_id
            for chain_id in chain_ids
            if not self.chain_executor.supports_chain(chain_id)
        ]
        if unsupported:
            raise InputValidationError(
                f"No chain executor configured for chain(s) {unsupported}"
            )

    async def _run_step(
        self, flow: PaymentFlow, step: PaymentStep, coro: Awaitable[T]
    ) -> T:
        """Run a suspending step as its own task so cancellation reaches it."""
        flow.step = step
        logger.debug("Payment step %s", step.value)
        return await asyncio.ensure_future(coro)

    def _resolve(self, flow: PaymentFlow) -> None:
        flow.step = PaymentStep.RESOLVE
        flow.secret = flow.request.secret or self.secret_factory()

    async def _prove(self, flow: PaymentFlow) -> None:
        request = flow.request
        secret = _required(flow.secret, "secret", flow.step)
        flow.bundle = await self.proof_requester.request_proof(
            secret, request.recipient, request.amount
        )
        flow.discard_secret()

    def _split(self, flow: PaymentFlow) -> None:
        flow.step = PaymentStep.SPLIT
        flow.plan = split_payment(flow.request.amount, flow.request.chain_ids)

    async def _derive_nonce(self, flow: PaymentFlow) -> None:
        payer = await self.chain_executor.get_payer_address()
        flow.nonce = derive_nonce(flow.request.chain_ids[0], payer, self.salt_factory())

    async def _execute_plan(self, flow: PaymentFlow) -> None:
        plan = _required(flow.plan, "plan", flow.step)
        for index, entry in enumerate(plan.entries):
            try:
                tx_hash = await self._run_step(
                    flow, PaymentStep.EXECUTE, self._execute_entry(flow, entry)
                )
            except ChainExecutionError as e:
                cause = e.cause
                flow.failure = ChainFailure(
                    chain_id=entry.chain_id,
                    amount=entry.amount,
                    reason=str(cause),
                    error_type=type(cause).__name__
                    if isinstance(cause, BaseException)
                    else "ChainExecutionError",
                    tx_hash=e.tx_hash,
                )
                logger.warning(
                    "Chain %s failed at plan index %d; %d chain(s) not attempted: %s",
                    entry.chain_id,
                    index,
                    len(plan.entries) - index - 1,
                    cause,
                )
                return
            flow.submissions.append(
                ChainSubmission(
                    chain_id=entry.chain_id, amount=entry.amount, tx_hash=tx_hash
                )
            )
            logger.info(
                "Submitted %d on chain %s: %s", entry.amount, entry.chain_id, tx_hash
            )

    async def _execute_entry(self, flow: PaymentFlow, entry: PlanEntry) -> str:
        bundle = _required(flow.bundle, "proof", flow.step)
        nonce = _required(flow.nonce, "nonce", flow.step)
        request = flow.request
        try:
            return await self.chain_executor.execute(
                chain_id=entry.chain_id,
                proof=bundle.proof,
                commitment=bundle.commitment,
                recipient=request.recipient,
                amount=entry.amount,
                token=request.token_address,
                nonce=nonce,
            )
        except ChainExecutionError:
            raise
        except Exception as e:
            raise ChainExecutionError(entry.chain_id, e) from e

    @staticmethod
    def _build_result(flow: PaymentFlow) -> PaymentResult:
        bundle = _required(flow.bundle, "proof", flow.step)
        return PaymentResult(
            commitment=bundle.commitment,
            nonce=_required(flow.nonce, "nonce", flow.step),
            plan=_required(flow.plan, "plan", flow.step),
            submissions=tuple(flow.submissions),
            failure=flow.failure,
        )
