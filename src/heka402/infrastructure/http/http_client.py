from __future__ import annotations

from typing import Any, Collection, Optional, Type
from types import TracebackType

import httpx


class AsyncHttpClient:
    """Thin asynchronous HTTP client wrapper around httpx.AsyncClient.

    - Takes absolute URLs; follows redirects.
    - Applies a default timeout.
    - Raises for non-successful responses, except the statuses the caller
      declares as expected (x402 endpoints answer ``402 Payment Required``).
    """

    def __init__(
        self,
        timeout: float = 10.0,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=True
        )

    async def get(
        self,
        url: str,
        *,
        expected_statuses: Collection[int] = (),
        **kwargs: Any,
    ) -> httpx.Response:
        resp = await self._client.get(url, **kwargs)
        if resp.status_code not in expected_statuses:
            resp.raise_for_status()
        return resp

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
