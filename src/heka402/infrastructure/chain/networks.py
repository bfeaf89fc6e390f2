"""
EVM chain configurations.

Every chain a payment can be split across needs an RPC endpoint and the address
of the deployed payment account contract. The contract address defaults to the
one configured globally; a chain entry may override it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Optional


@dataclass(frozen=True)
class ChainConfig:
    chain_id: int
    name: str
    display_name: str
    rpc_url: str
    explorer_url: Optional[str] = None
    contract_address: Optional[str] = None


# =============================================================================
# Supported testnets
# =============================================================================

SEPOLIA = ChainConfig(
    chain_id=11155111,
    name="sepolia",
    display_name="Sepolia",
    rpc_url="https://ethereum-sepolia-rpc.publicnode.com",
    explorer_url="https://sepolia.etherscan.io",
)

OPTIMISM_SEPOLIA = ChainConfig(
    chain_id=11155420,
    name="optimism-sepolia",
    display_name="Optimism Sepolia",
    rpc_url="https://sepolia.optimism.io",
    explorer_url="https://sepolia-optimism.etherscan.io",
)

ARBITRUM_SEPOLIA = ChainConfig(
    chain_id=421614,
    name="arbitrum-sepolia",
    display_name="Arbitrum Sepolia",
    rpc_url="https://sepolia-rollup.arbitrum.io/rpc",
    explorer_url="https://sepolia.arbiscan.io",
)

POLYGON_AMOY = ChainConfig(
    chain_id=80002,
    name="polygon-amoy",
    display_name="Polygon Amoy",
    rpc_url="https://rpc-amoy.polygon.technology",
    explorer_url="https://amoy.polygonscan.com",
)

BASE_SEPOLIA = ChainConfig(
    chain_id=84532,
    name="base-sepolia",
    display_name="Base Sepolia",
    rpc_url="https://sepolia.base.org",
    explorer_url="https://sepolia.basescan.org",
)

_CHAINS: dict[int, ChainConfig] = {}


def register_chain(chain: ChainConfig) -> None:
    """Add or replace a chain in the registry."""
    _CHAINS[chain.chain_id] = chain


def get_chain(chain_id: int) -> Optional[ChainConfig]:
    return _CHAINS.get(chain_id)


def list_chains() -> list[ChainConfig]:
    return sorted(_CHAINS.values(), key=lambda c: c.chain_id)


def explorer_tx_url(chain_id: int, tx_hash: str) -> Optional[str]:
    """Block explorer link for a transaction, if the chain has an explorer."""
    chain = get_chain(chain_id)
    if chain is None or not chain.explorer_url:
        return None
    return f"{chain.explorer_url}/tx/{tx_hash}"


def resolve_chains(
    rpc_overrides: Mapping[int, str],
    contract_overrides: Optional[Mapping[int, str]] = None,
) -> dict[int, ChainConfig]:
    """Registry snapshot with configured RPC URLs and contract addresses applied.

    Chain ids only present in ``rpc_overrides`` are added as generic entries.
    """
    contract_overrides = contract_overrides or {}
    chains = {chain.chain_id: chain for chain in list_chains()}
    for chain_id, rpc_url in rpc_overrides.items():
        base = chains.get(chain_id)
        if base is None:
            chains[chain_id] = ChainConfig(
                chain_id=chain_id,
                name=f"chain-{chain_id}",
                display_name=f"Chain {chain_id}",
                rpc_url=rpc_url,
            )
        else:
            chains[chain_id] = replace(base, rpc_url=rpc_url)
    for chain_id, address in contract_overrides.items():
        if chain_id in chains:
            chains[chain_id] = replace(chains[chain_id], contract_address=address)
    return chains


def _register_all(chains: Iterable[ChainConfig]) -> None:
    for chain in chains:
        register_chain(chain)


_register_all([SEPOLIA, OPTIMISM_SEPOLIA, ARBITRUM_SEPOLIA, POLYGON_AMOY, BASE_SEPOLIA])
