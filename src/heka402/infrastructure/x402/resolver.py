"""x402 recipient resolution.

Best-effort adapter: the endpoint's schema is not controlled here. A top-level
``recipient`` field wins; otherwise the ``payTo`` of the first entry in an x402
``accepts`` list is used. Anything else resolves to the zero address.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type
from types import TracebackType

import httpx
from web3 import Web3

from ...domain.entities import ZERO_ADDRESS
from ...domain.errors import X402ResolutionError
from ..http.http_client import AsyncHttpClient

logger = logging.getLogger(__name__)

PAYMENT_REQUIRED = 402


def extract_recipient(data: Any) -> str:
    """Pick the recipient address out of an x402 metadata document."""
    if not isinstance(data, dict):
        return ZERO_ADDRESS

    candidates: list[Any] = [data.get("recipient")]
    accepts = data.get("accepts")
    if isinstance(accepts, list):
        candidates.extend(
            option.get("payTo") for option in accepts if isinstance(option, dict)
        )

    for candidate in candidates:
        if isinstance(candidate, str) and Web3.is_address(candidate):
            return Web3.to_checksum_address(candidate)
    return ZERO_ADDRESS


class X402Resolver:
    """Resolve an x402 payment request URL into a recipient address."""

    def __init__(
        self,
        timeout: float = 10.0,
        *,
        http: Optional[AsyncHttpClient] = None,
    ) -> None:
        self._http = http or AsyncHttpClient(timeout=timeout)

    async def resolve(self, url: str) -> str:
        """Fetch the payment metadata at ``url`` and extract the recipient.

        Raises:
            X402ResolutionError: If the endpoint is unreachable, answers with an
                unexpected error status, or does not return JSON.
        """
        try:
            resp = await self._http.get(url, expected_statuses=(PAYMENT_REQUIRED,))
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise X402ResolutionError(
                f"x402 endpoint returned {e.response.status_code}: {url}"
            ) from e
        except httpx.RequestError as e:
            raise X402ResolutionError(f"Could not connect to x402 endpoint: {e}") from e
        except ValueError as e:
            raise X402ResolutionError(f"x402 endpoint did not return JSON: {url}") from e

        recipient = extract_recipient(data)
        if recipient == ZERO_ADDRESS:
            logger.warning("No usable recipient advertised by %s", url)
        return recipient

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "X402Resolver":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
