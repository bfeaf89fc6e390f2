"""Shared pytest fixtures for payment engine tests."""

from __future__ import annotations

import pytest
from web3 import Web3

from heka402.application.use_cases.orchestrator import PaymentOrchestrator
from heka402.application.use_cases.payment import PaymentService
from heka402.application.use_cases.proof_requester import ProofRequester
from tests.fixtures import FakeProver, ScriptedChainExecutor, StaticResolver

RECIPIENT = Web3.to_checksum_address("0x742d35cc6634c0532925a3b844bc9e7595f0beb0")
TOKEN = Web3.to_checksum_address("0x1c7d4b196cb0c7b01d743fbc6116a902379c7238")
SECRET = "0x" + "ab" * 32
FIXED_SALT = 1_700_000_000_000


@pytest.fixture
def recipient() -> str:
    return RECIPIENT


@pytest.fixture
def token() -> str:
    return TOKEN


@pytest.fixture
def secret() -> str:
    return SECRET


@pytest.fixture
def fake_prover() -> FakeProver:
    return FakeProver()


@pytest.fixture
def chain_executor() -> ScriptedChainExecutor:
    return ScriptedChainExecutor()


@pytest.fixture
def orchestrator(
    fake_prover: FakeProver, chain_executor: ScriptedChainExecutor
) -> PaymentOrchestrator:
    return PaymentOrchestrator(
        ProofRequester(fake_prover),
        chain_executor,
        salt_factory=lambda: FIXED_SALT,
        secret_factory=lambda: SECRET,
    )


@pytest.fixture
def resolver(recipient: str) -> StaticResolver:
    return StaticResolver(recipient)


@pytest.fixture
def payment_service(
    orchestrator: PaymentOrchestrator, resolver: StaticResolver
) -> PaymentService:
    return PaymentService(
        orchestrator,
        resolver,
        default_chain_id=11155111,
        secret_factory=lambda: SECRET,
    )
