"""FastAPI dependencies for the payment API."""

from __future__ import annotations

from fastapi import Request

from ..application.use_cases.payment import PaymentService


def get_payment_service(request: Request) -> PaymentService:
    """Get the payment service built at application startup."""
    return request.app.state.heka402.service
