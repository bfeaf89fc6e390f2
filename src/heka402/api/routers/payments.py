"""Payment API routes."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, status
from prometheus_client import Counter, Histogram

from ...application.dtos import (
    PaymentConfigDTO,
    PaymentResponseDTO,
    PaymentResultDTO,
    X402PaymentRequestDTO,
    X402PaymentResponseDTO,
)
from ...application.use_cases.payment import PaymentService
from ...domain.errors import (
    PartialPaymentError,
    ProofGenerationError,
    X402ResolutionError,
)
from ..dependencies import get_payment_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])


payment_requests_total = Counter(
    "heka402_payment_requests_total",
    "Total payment requests processed",
    ["endpoint", "status"],
)

payment_request_duration_seconds = Histogram(
    "heka402_payment_request_duration_seconds",
    "Wall time to process a payment request, proof generation included",
    ["endpoint", "status"],
)


def _observe(endpoint: str, outcome: str, start_time: float) -> None:
    payment_requests_total.labels(endpoint=endpoint, status=outcome).inc()
    payment_request_duration_seconds.labels(endpoint=endpoint, status=outcome).observe(
        time.perf_counter() - start_time
    )


def _partial_payment_detail(e: PartialPaymentError) -> dict:
    return {
        "message": str(e),
        "result": PaymentResultDTO.from_result(e.result).model_dump(),
    }


@router.post(
    "/payments",
    response_model=PaymentResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def execute_payment(
    config: PaymentConfigDTO,
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentResponseDTO:
    """Prove, split and submit a payment across the requested chains."""
    start_time = time.perf_counter()
    try:
        tx_hash = await payment_service.execute_payment(config)
        _observe("payments", "success", start_time)
        return PaymentResponseDTO(tx_hash=tx_hash)
    except PartialPaymentError as e:
        _observe("payments", "partial", start_time)
        logger.warning("Partial payment: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=_partial_payment_detail(e),
        )
    except ProofGenerationError as e:
        _observe("payments", "proof_error", start_time)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Proof generation failed: {e}",
        )
    except ValueError as e:
        _observe("payments", "client_error", start_time)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        _observe("payments", "server_error", start_time)
        logger.exception("Payment failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process payment: {str(e)}",
        )


@router.post(
    "/x402-payments",
    response_model=X402PaymentResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def x402_payment(
    request: X402PaymentRequestDTO,
    payment_service: PaymentService = Depends(get_payment_service),
) -> X402PaymentResponseDTO:
    """Resolve the recipient behind an x402 URL and pay it."""
    start_time = time.perf_counter()
    try:
        result = await payment_service.x402_payment(request)
        _observe("x402_payments", "success", start_time)
        return result
    except PartialPaymentError as e:
        _observe("x402_payments", "partial", start_time)
        logger.warning("Partial x402 payment: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=_partial_payment_detail(e),
        )
    except X402ResolutionError as e:
        _observe("x402_payments", "upstream_error", start_time)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except ProofGenerationError as e:
        _observe("x402_payments", "proof_error", start_time)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Proof generation failed: {e}",
        )
    except ValueError as e:
        _observe("x402_payments", "client_error", start_time)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        _observe("x402_payments", "server_error", start_time)
        logger.exception("x402 payment failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process x402 payment: {str(e)}",
        )
