"""Test fixtures for in-memory payment collaborators."""

from .fake_prover import BlockingProver, FakeProver, RejectingProver
from .scripted_chain_executor import PAYER_ADDRESS, ScriptedChainExecutor, fake_tx_hash
from .static_resolver import StaticResolver

__all__ = [
    "BlockingProver",
    "FakeProver",
    "PAYER_ADDRESS",
    "RejectingProver",
    "ScriptedChainExecutor",
    "StaticResolver",
    "fake_tx_hash",
]
