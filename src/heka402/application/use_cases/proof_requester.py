"""Obtain a zero-knowledge proof bound to a payment commitment."""

from __future__ import annotations

import logging

from ...crypto.commitment import (
    derive_commitment,
    derive_recipient_hash,
    normalize_secret,
)
from ...domain.entities import (
    SNARK_SCALAR_FIELD,
    CommitmentProof,
    Proof,
    RawProof,
)
from ...domain.errors import ProofGenerationError
from ...domain.shared import ProverProtocol
from ...middleware.timing import log_timing

logger = logging.getLogger(__name__)


def to_field_element(value_hex: str) -> str:
    """Decimal field element for a 0x-prefixed 256-bit value (reduced mod r)."""
    return str(int(value_hex, 16) % SNARK_SCALAR_FIELD)


def translate_proof(raw: RawProof) -> Proof:
    """Translate the backend's raw encoding into the verifier's argument layout.

    snarkjs emits each G2 coordinate of ``pi_b`` as ``[c0, c1]`` while the
    Solidity verifier expects ``[c1, c0]``; the two components of both pairs are
    swapped here. ``pi_a``/``pi_c`` drop their projective ``z`` coordinate. A proof
    translated without the swap is rejected on-chain with no useful error.
    """
    try:
        a = (raw.pi_a[0], raw.pi_a[1])
        b = (
            (raw.pi_b[0][1], raw.pi_b[0][0]),
            (raw.pi_b[1][1], raw.pi_b[1][0]),
        )
        c = (raw.pi_c[0], raw.pi_c[1])
        public_signals = (raw.public_signals[0], raw.public_signals[1])
    except IndexError as e:
        raise ProofGenerationError(
            "Malformed proof from proving backend", diagnostic=str(e)
        ) from e
    return Proof(a=a, b=b, c=c, public_signals=public_signals)


class ProofRequester:
    """Builds circuit inputs, delegates to the prover and normalizes its output."""

    def __init__(self, prover: ProverProtocol) -> None:
        self.prover = prover

    @log_timing("proof_request")
    async def request_proof(
        self, secret: str, recipient: str, amount: int
    ) -> CommitmentProof:
        """Derive the commitment and obtain a proof for ``(commitment, amount)``.

        Raises:
            ProofGenerationError: If the backend fails, rejects the inputs, or
                returns public signals that do not match the commitment/amount.
        """
        secret_hex = normalize_secret(secret)
        commitment = derive_commitment(secret_hex, recipient, amount)
        recipient_hash = derive_recipient_hash(recipient)

        inputs = {
            "commitment": to_field_element(commitment),
            "amount": str(amount),
            "secret": to_field_element(secret_hex),
            "recipientHash": to_field_element(recipient_hash),
        }

        try:
            raw = await self.prover.prove(inputs)
        except ProofGenerationError:
            raise
        except Exception as e:
            raise ProofGenerationError(
                "Proving backend failed", diagnostic=f"{type(e).__name__}: {e}"
            ) from e

        proof = translate_proof(raw)
        self._check_public_signals(proof, inputs)
        logger.debug("Proof generated for commitment %s", commitment)
        return CommitmentProof(
            commitment=commitment, recipient_hash=recipient_hash, proof=proof
        )

    @staticmethod
    def _check_public_signals(proof: Proof, inputs: dict[str, str]) -> None:
        commitment_signal, amount_signal = proof.public_signals
        try:
            commitment_ok = int(commitment_signal) == int(inputs["commitment"])
            amount_ok = int(amount_signal) == int(inputs["amount"]) % SNARK_SCALAR_FIELD
        except ValueError as e:
            raise ProofGenerationError(
                "Non-numeric public signals from proving backend", diagnostic=str(e)
            ) from e
        if not commitment_ok:
            raise ProofGenerationError(
                "Proof public signal does not match the commitment"
            )
        if not amount_ok:
            raise ProofGenerationError("Proof public signal does not match the amount")
