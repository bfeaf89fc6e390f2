"""Submit a payment to the payment account contract on one EVM chain."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from ...crypto.nonce import nonce_to_uint
from ...domain.entities import ZERO_ADDRESS, Proof
from ...domain.errors import ChainExecutionError
from ...middleware.timing import log_timing
from .networks import ChainConfig

logger = logging.getLogger(__name__)

PAYMENT_ACCOUNT_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "executePayment",
        "stateMutability": "payable",
        "inputs": [
            {"name": "a", "type": "uint256[2]"},
            {"name": "b", "type": "uint256[2][2]"},
            {"name": "c", "type": "uint256[2]"},
            {"name": "commitment", "type": "bytes32"},
            {"name": "recipient", "type": "address"},
            {"name": "amount", "type": "uint256"},
            {"name": "token", "type": "address"},
            {"name": "nonce", "type": "uint256"},
        ],
        "outputs": [],
    }
]


def transaction_value(amount: int, token: str) -> int:
    """Native value attached to the call: ``amount`` for the native asset, else 0."""
    return amount if token == ZERO_ADDRESS else 0


def build_call_args(
    *,
    proof: Proof,
    commitment: str,
    recipient: str,
    amount: int,
    token: str,
    nonce: str,
) -> tuple[Any, ...]:
    """Arguments of ``executePayment`` in ABI order."""
    a, b, c = proof.to_calldata()
    return (
        a,
        b,
        c,
        bytes.fromhex(commitment[2:]),
        Web3.to_checksum_address(recipient),
        amount,
        Web3.to_checksum_address(token),
        nonce_to_uint(nonce),
    )


class Web3ChainExecutor:
    """Chain executor backed by web3.py; one signer shared across chains."""

    def __init__(
        self,
        private_key: str,
        chains: Mapping[int, ChainConfig],
        *,
        default_contract_address: str,
        wait_for_receipt: bool = True,
        receipt_timeout: float = 120.0,
        rpc_timeout: float = 30.0,
    ) -> None:
        self._account = Account.from_key(private_key)
        self._chains = dict(chains)
        self._default_contract_address = default_contract_address
        self._wait_for_receipt = wait_for_receipt
        self._receipt_timeout = receipt_timeout
        self._rpc_timeout = rpc_timeout
        self._clients: dict[int, AsyncWeb3] = {}

    async def get_payer_address(self) -> str:
        return self._account.address

    def supports_chain(self, chain_id: int) -> bool:
        return chain_id in self._chains

    def _client(self, chain: ChainConfig) -> AsyncWeb3:
        w3 = self._clients.get(chain.chain_id)
        if w3 is None:
            w3 = AsyncWeb3(
                AsyncHTTPProvider(
                    chain.rpc_url, request_kwargs={"timeout": self._rpc_timeout}
                )
            )
            self._clients[chain.chain_id] = w3
        return w3

    def _chain(self, chain_id: int) -> ChainConfig:
        chain = self._chains.get(chain_id)
        if chain is None:
            raise ChainExecutionError(chain_id, "No RPC endpoint configured for chain")
        return chain

    @log_timing("chain_execute")
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
        chain = self._chain(chain_id)
        tx_hash_hex: Optional[str] = None
        w3 = self._client(chain)
        payer = self._account.address
        contract_address = chain.contract_address or self._default_contract_address
        args = build_call_args(
            proof=proof,
            commitment=commitment,
            recipient=recipient,
            amount=amount,
            token=token,
            nonce=nonce,
        )

        try:
            remote_chain_id = await w3.eth.chain_id
            if remote_chain_id != chain_id:
                raise ChainExecutionError(
                    chain_id,
                    f"RPC endpoint {chain.rpc_url} serves chain {remote_chain_id}",
                )
            contract = w3.eth.contract(
                address=Web3.to_checksum_address(contract_address),
                abi=PAYMENT_ACCOUNT_ABI,
            )
            # Gas estimation runs the call, so reverts (bad proof, used nonce,
            # insufficient balance) surface here before anything is broadcast.
            tx = await contract.functions.executePayment(*args).build_transaction(
                {
                    "from": payer,
                    "value": transaction_value(amount, token),
                    "nonce": await w3.eth.get_transaction_count(payer, "pending"),
                    "chainId": chain_id,
                }
            )
            signed = self._account.sign_transaction(tx)
            tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
            tx_hash_hex = Web3.to_hex(tx_hash)
            logger.info("Broadcast payment on %s: %s", chain.display_name, tx_hash_hex)

            if self._wait_for_receipt:
                receipt = await w3.eth.wait_for_transaction_receipt(
                    tx_hash, timeout=self._receipt_timeout
                )
                if receipt["status"] != 1:
                    raise ChainExecutionError(
                        chain_id, "Transaction reverted", tx_hash=tx_hash_hex
                    )
        except ChainExecutionError:
            raise
        except Exception as e:
            raise ChainExecutionError(chain_id, e, tx_hash=tx_hash_hex) from e

        return tx_hash_hex

    async def aclose(self) -> None:
        for w3 in self._clients.values():
            await w3.provider.disconnect()
        self._clients.clear()

    def contract_address_for(self, chain_id: int) -> Optional[str]:
        chain = self._chains.get(chain_id)
        if chain is None:
            return None
        return chain.contract_address or self._default_contract_address
