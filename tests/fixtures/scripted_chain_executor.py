"""Chain executor fake with per-chain scripted failures."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from web3 import Web3

from heka402.domain.entities import Proof

PAYER_ADDRESS = Web3.to_checksum_address("0x90f8bf6a479f320ead074411a4b0e7944ea8c9c1")


def fake_tx_hash(chain_id: int) -> str:
    return "0x" + format(chain_id, "064x")


class ScriptedChainExecutor:
    """Records every ``execute`` call; chains listed in ``failures`` raise."""

    def __init__(
        self,
        *,
        payer_address: str = PAYER_ADDRESS,
        failures: Optional[dict[int, Exception]] = None,
        supported_chain_ids: Optional[Iterable[int]] = None,
    ) -> None:
        self.payer_address = payer_address
        self.failures = failures or {}
        # None means every chain id is served.
        self.supported_chain_ids = (
            set(supported_chain_ids) if supported_chain_ids is not None else None
        )
        self.calls: list[dict[str, Any]] = []

    async def get_payer_address(self) -> str:
        return self.payer_address

    def supports_chain(self, chain_id: int) -> bool:
        return self.supported_chain_ids is None or chain_id in self.supported_chain_ids

    async def execute(
        self,
        *,
        chain_id: int,
        proof: Proof,
        commitment: str,
        recipient: str,
        amount: int,
        token: str,
        nonce: str,
    ) -> str:
        self.calls.append(
            {
                "chain_id": chain_id,
                "proof": proof,
                "commitment": commitment,
                "recipient": recipient,
                "amount": amount,
                "token": token,
                "nonce": nonce,
            }
        )
        if chain_id in self.failures:
            raise self.failures[chain_id]
        return fake_tx_hash(chain_id)

    @property
    def called_chain_ids(self) -> list[int]:
        return [call["chain_id"] for call in self.calls]
