"""Protocol interfaces for the external collaborators of the payment engine.

These protocols define the contracts for the proving backend, the per-chain
payment contract and the x402 recipient source. They enable dependency injection
so that the orchestration logic can be exercised with fakes instead of real
provers, RPC endpoints or HTTP services.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Mapping, Protocol

if TYPE_CHECKING:
    # Avoid circular imports by only importing types during type checking
    from ..entities import Proof, RawProof


class ProverProtocol(Protocol):
    """Proving backend capability: ``prove(inputs) -> RawProof``.

    Implementations receive the named circuit inputs
    ``{commitment, amount, secret, recipientHash}`` as decimal field elements and
    return the backend's raw proof encoding. Proof computation is CPU-bound and may
    take seconds, so the call is a suspension point.
    """

    async def prove(self, inputs: Mapping[str, str]) -> "RawProof":
        """Generate a proof for the given circuit inputs.

        Raises:
            ProofGenerationError: If the backend is unreachable or rejects the inputs
        """
        ...


class ChainExecutorProtocol(Protocol):
    """Per-chain payment contract capability.

    Each call submits a state-changing transaction, so it is not idempotent: a
    retry after partial acceptance relies on the on-chain nonce check to be
    rejected.
    """

    async def get_payer_address(self) -> str:
        """Return the checksummed address that signs every chain submission."""
        ...

    def supports_chain(self, chain_id: int) -> bool:
        """Whether a submission to ``chain_id`` can be attempted at all.

        Checked for every chain of a request before any proof is generated.
        """
        ...

    async def execute(
        self,
        *,
        chain_id: int,
        proof: "Proof",
        commitment: str,
        recipient: str,
        amount: int,
        token: str,
        nonce: str,
    ) -> str:
        """Invoke the payment verifier contract on one chain.

        Args:
            chain_id: Destination chain
            proof: Canonical proof shared by every chain of the payment
            commitment: 0x-prefixed bytes32 commitment
            recipient: Checksummed recipient address
            amount: Amount for this chain in the smallest unit
            token: Token address, the zero address for the native asset
            nonce: 0x-prefixed bytes32 nonce shared by every chain of the payment

        Returns:
            The 0x-prefixed transaction hash

        Raises:
            ChainExecutionError: On RPC failure or contract revert
        """
        ...


class RecipientResolverProtocol(Protocol):
    """x402 recipient source: ``resolve(url) -> address``."""

    async def resolve(self, url: str) -> str:
        """Resolve a payment request URL into a recipient address.

        Returns:
            The checksummed recipient, or the zero address when the endpoint does
            not advertise a usable one
        """
        ...

    async def aclose(self) -> None:
        """Release any transport held by the resolver."""
        ...


# Clock used to salt the nonce; returns a value distinct per logical payment.
SaltFactory = Callable[[], int]

# Source of fresh 32-byte secrets (0x-prefixed hex).
SecretFactory = Callable[[], str]
