"""Data Transfer Objects for the caller-facing payment API."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities import PaymentResult


class PaymentConfigDTO(BaseModel):
    """DTO for executing a split payment."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "recipient": "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0",
                "amount": "100000000000000000",
                "chains": [11155111, 11155420, 421614],
            }
        }
    )

    recipient: str
    amount: Union[str, int] = Field(
        ..., description="Integer amount in the smallest unit, string-encoded"
    )
    token: Optional[str] = Field(None, description="Token address; omit for native")
    chains: list[int]
    secret: Optional[str] = Field(None, repr=False, exclude=True)


class X402PaymentRequestDTO(BaseModel):
    """DTO for paying an x402 payment request URL."""

    url: str = Field(..., min_length=1)
    amount: Union[str, int]
    token: Optional[str] = None
    chains: Optional[list[int]] = None


class PaymentResponseDTO(BaseModel):
    """DTO for returning the canonical transaction hash."""

    tx_hash: str


class X402PaymentResponseDTO(BaseModel):
    """DTO for returning the result of an x402 payment."""

    tx_hash: str
    commitment: str


class ChainSubmissionDTO(BaseModel):
    chain_id: int
    amount: str
    tx_hash: str


class ChainFailureDTO(BaseModel):
    chain_id: int
    amount: str
    reason: str
    error_type: str
    tx_hash: Optional[str] = None


class PaymentResultDTO(BaseModel):
    """DTO for returning a full (possibly partial) payment result."""

    commitment: str
    nonce: str
    tx_hash: Optional[str]
    submissions: list[ChainSubmissionDTO]
    failure: Optional[ChainFailureDTO]
    skipped_chain_ids: list[int]

    @classmethod
    def from_result(cls, result: PaymentResult) -> "PaymentResultDTO":
        failure = result.failure
        return cls(
            commitment=result.commitment,
            nonce=result.nonce,
            tx_hash=result.canonical_tx_hash,
            submissions=[
                ChainSubmissionDTO(
                    chain_id=s.chain_id, amount=str(s.amount), tx_hash=s.tx_hash
                )
                for s in result.submissions
            ],
            failure=ChainFailureDTO(
                chain_id=failure.chain_id,
                amount=str(failure.amount),
                reason=failure.reason,
                error_type=failure.error_type,
                tx_hash=failure.tx_hash,
            )
            if failure
            else None,
            skipped_chain_ids=result.skipped_chain_ids,
        )
