"""Wire the payment engine from settings."""

from __future__ import annotations

import logging

from .application.use_cases.orchestrator import PaymentOrchestrator
from .application.use_cases.payment import PaymentService
from .application.use_cases.proof_requester import ProofRequester
from .envs.payer_env import Settings
from .infrastructure.chain.networks import resolve_chains
from .infrastructure.chain.web3_executor import Web3ChainExecutor
from .infrastructure.prover.snarkjs_prover import SnarkjsProver
from .infrastructure.x402.resolver import X402Resolver

logger = logging.getLogger(__name__)


class Heka402:
    """Payment service plus the adapters it owns, closed together."""

    def __init__(self, service: PaymentService, executor: Web3ChainExecutor) -> None:
        self.service = service
        self.executor = executor

    async def aclose(self) -> None:
        await self.service.aclose()
        await self.executor.aclose()

    async def __aenter__(self) -> "Heka402":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def create_payment_service(settings: Settings) -> Heka402:
    prover = SnarkjsProver(
        settings.circuit_wasm_path,
        settings.circuit_zkey_path,
        snarkjs_bin=settings.snarkjs_bin,
        timeout=settings.proof_timeout_seconds,
    )
    chains = resolve_chains(settings.chain_rpc_urls, settings.chain_contract_addresses)
    executor = Web3ChainExecutor(
        settings.payer_private_key,
        chains,
        default_contract_address=settings.contract_address,
        wait_for_receipt=settings.wait_for_receipt,
        receipt_timeout=settings.receipt_timeout_seconds,
    )
    orchestrator = PaymentOrchestrator(ProofRequester(prover), executor)
    resolver = X402Resolver(timeout=settings.x402_timeout_seconds)
    logger.info(
        "Payment engine ready on %d chain(s), default chain %d",
        len(chains),
        settings.default_chain_id,
    )
    return Heka402(
        PaymentService(
            orchestrator, resolver, default_chain_id=settings.default_chain_id
        ),
        executor,
    )
