"""Unit tests for the x402 recipient resolver."""

from __future__ import annotations

import httpx
import pytest

from heka402.domain.entities import ZERO_ADDRESS
from heka402.domain.errors import X402ResolutionError
from heka402.infrastructure.http.http_client import AsyncHttpClient
from heka402.infrastructure.x402.resolver import X402Resolver, extract_recipient

URL = "https://api.example.com/premium"


def _resolver(handler) -> X402Resolver:
    return X402Resolver(http=AsyncHttpClient(transport=httpx.MockTransport(handler)))


class TestExtractRecipient:
    def test_top_level_recipient(self, recipient: str) -> None:
        assert extract_recipient({"recipient": recipient.lower()}) == recipient

    def test_accepts_pay_to_fallback(self, recipient: str) -> None:
        data = {"x402Version": 1, "accepts": [{"scheme": "exact", "payTo": recipient}]}
        assert extract_recipient(data) == recipient

    def test_top_level_recipient_wins(self, recipient: str) -> None:
        other = "0x" + "11" * 20
        data = {"recipient": recipient, "accepts": [{"payTo": other}]}
        assert extract_recipient(data) == recipient

    @pytest.mark.parametrize(
        "data",
        [{}, [], {"recipient": "not-an-address"}, {"accepts": "nope"}, "text"],
    )
    def test_missing_or_malformed_gives_zero_address(self, data) -> None:
        assert extract_recipient(data) == ZERO_ADDRESS


@pytest.mark.asyncio
async def test_resolve_reads_recipient(recipient: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == URL
        return httpx.Response(200, json={"recipient": recipient})

    async with _resolver(handler) as resolver:
        assert await resolver.resolve(URL) == recipient


@pytest.mark.asyncio
async def test_resolve_accepts_payment_required_status(recipient: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(402, json={"accepts": [{"payTo": recipient}]})

    async with _resolver(handler) as resolver:
        assert await resolver.resolve(URL) == recipient


@pytest.mark.asyncio
async def test_resolve_without_recipient_returns_sentinel() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"price": "0.01"})

    async with _resolver(handler) as resolver:
        assert await resolver.resolve(URL) == ZERO_ADDRESS


@pytest.mark.asyncio
async def test_server_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    async with _resolver(handler) as resolver:
        with pytest.raises(X402ResolutionError, match="503"):
            await resolver.resolve(URL)


@pytest.mark.asyncio
async def test_non_json_body_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>paywall</html>")

    async with _resolver(handler) as resolver:
        with pytest.raises(X402ResolutionError, match="JSON"):
            await resolver.resolve(URL)


@pytest.mark.asyncio
async def test_connection_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _resolver(handler) as resolver:
        with pytest.raises(X402ResolutionError, match="Could not connect"):
            await resolver.resolve(URL)
