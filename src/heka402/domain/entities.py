"""Payment domain entities: request, proof, plan and result value objects."""

from __future__ import annotations

from typing import Final, Optional

from pydantic import BaseModel, ConfigDict, Field

ZERO_ADDRESS: Final[str] = "0x0000000000000000000000000000000000000000"

# Scalar field of BN254; circuit inputs and public signals live in this field.
SNARK_SCALAR_FIELD: Final[int] = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)


class PaymentRequest(BaseModel):
    """Payer intent for one logical payment.

    Business rules (positive amount, unique chains, checksummed addresses) are
    enforced by ``validate_payment_request`` before the request enters the engine.
    """

    model_config = ConfigDict(frozen=True)

    recipient: str
    amount: int
    token: Optional[str] = None
    chain_ids: tuple[int, ...]
    secret: Optional[str] = Field(default=None, repr=False)

    @property
    def token_address(self) -> str:
        """Token address sent on-chain; the zero address denotes the native asset."""
        return self.token or ZERO_ADDRESS


class RawProof(BaseModel):
    """Proof exactly as the proving backend encodes it (snarkjs groth16 layout)."""

    pi_a: list[str]
    pi_b: list[list[str]]
    pi_c: list[str]
    public_signals: list[str]
    protocol: str = "groth16"
    curve: str = "bn128"


class Proof(BaseModel):
    """Canonical proof consumed by the on-chain verifier.

    ``public_signals`` is ``(commitment, amount)`` as field elements in decimal.
    """

    model_config = ConfigDict(frozen=True)

    a: tuple[str, str]
    b: tuple[tuple[str, str], tuple[str, str]]
    c: tuple[str, str]
    public_signals: tuple[str, str]

    def to_calldata(
        self,
    ) -> tuple[list[int], list[list[int]], list[int]]:
        """Return ``(a, b, c)`` as integers in the verifier's argument layout."""
        a = [int(x) for x in self.a]
        b = [[int(x) for x in row] for row in self.b]
        c = [int(x) for x in self.c]
        return a, b, c


class CommitmentProof(BaseModel):
    """A commitment together with the proof that attests to it."""

    model_config = ConfigDict(frozen=True)

    commitment: str
    recipient_hash: str
    proof: Proof


class PlanEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    chain_id: int
    amount: int = Field(..., ge=0)


class PaymentPlan(BaseModel):
    """Ordered per-chain breakdown of one logical payment."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[PlanEntry, ...]

    @property
    def total(self) -> int:
        return sum(entry.amount for entry in self.entries)

    @property
    def chain_ids(self) -> list[int]:
        return [entry.chain_id for entry in self.entries]


class ChainSubmission(BaseModel):
    """A plan entry that was broadcast successfully."""

    model_config = ConfigDict(frozen=True)

    chain_id: int
    amount: int
    tx_hash: str


class ChainFailure(BaseModel):
    """The plan entry that stopped the payment."""

    model_config = ConfigDict(frozen=True)

    chain_id: int
    amount: int
    reason: str
    error_type: str
    tx_hash: Optional[str] = None


class PaymentResult(BaseModel):
    """Outcome of one logical payment, in plan order."""

    model_config = ConfigDict(frozen=True)

    commitment: str
    nonce: str
    plan: PaymentPlan
    submissions: tuple[ChainSubmission, ...] = ()
    failure: Optional[ChainFailure] = None

    @property
    def is_partial(self) -> bool:
        return self.failure is not None

    @property
    def tx_hashes(self) -> list[str]:
        return [submission.tx_hash for submission in self.submissions]

    @property
    def canonical_tx_hash(self) -> Optional[str]:
        """First successful chain's transaction hash, the caller's reference."""
        return self.submissions[0].tx_hash if self.submissions else None

    @property
    def skipped_chain_ids(self) -> list[int]:
        """Chains never attempted because an earlier chain failed."""
        attempted = {s.chain_id for s in self.submissions}
        if self.failure is not None:
            attempted.add(self.failure.chain_id)
        return [cid for cid in self.plan.chain_ids if cid not in attempted]
