"""
Multi-Trader Position Fetcher Tests
"""

import asyncio
import pytest
from unittest.mock import AsyncMock

import httpx

from tradernet.services.fetcher import PositionFetcher

from conftest import make_position


@pytest.mark.asyncio
async def test_one_entry_per_wallet():
    positions = {"0xa": [make_position("m1")], "0xb": [], "0xc": [make_position("m2")]}
    fetch = AsyncMock(side_effect=lambda wallet: positions[wallet])

    result = await PositionFetcher(fetch).fetch_many(["0xa", "0xb", "0xc"])

    assert set(result) == {"0xa", "0xb", "0xc"}
    assert result["0xa"][0].condition_id == "m1"
    assert result["0xb"] == []
    assert fetch.await_count == 3


@pytest.mark.asyncio
async def test_failures_degrade_to_empty():
    async def fetch(wallet):
        if wallet == "0xbad":
            raise httpx.ConnectError("connection refused")
        if wallet == "0xhttp":
            request = httpx.Request("GET", "https://example.com")
            response = httpx.Response(503, request=request)
            raise httpx.HTTPStatusError("unavailable", request=request, response=response)
        if wallet == "0xjunk":
            return {"not": "a list"}
        return [make_position("m1")]

    result = await PositionFetcher(fetch).fetch_many(["0xgood", "0xbad", "0xhttp", "0xjunk"])

    assert len(result) == 4
    assert len(result["0xgood"]) == 1
    assert result["0xbad"] == []
    assert result["0xhttp"] == []
    assert result["0xjunk"] == []


@pytest.mark.asyncio
async def test_timeout_degrades_to_empty():
    async def fetch(wallet):
        if wallet == "0xslow":
            await asyncio.sleep(5)
        return [make_position("m1")]

    fetcher = PositionFetcher(fetch, batch_size=5, timeout=0.05)
    result = await fetcher.fetch_many(["0xfast", "0xslow"])

    assert result["0xslow"] == []
    assert len(result["0xfast"]) == 1


@pytest.mark.asyncio
async def test_fan_out_is_bounded_by_batch_size():
    in_flight = 0
    peak = 0

    async def fetch(wallet):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return []

    fetcher = PositionFetcher(fetch, batch_size=3, timeout=1.0)
    result = await fetcher.fetch_many([f"0x{i}" for i in range(12)])

    assert len(result) == 12
    assert peak == 3


@pytest.mark.asyncio
async def test_duplicates_collapse():
    fetch = AsyncMock(return_value=[])
    result = await PositionFetcher(fetch).fetch_many(["0xa", "0xa", "0xb"])
    assert list(result) == ["0xa", "0xb"]
    assert fetch.await_count == 2


@pytest.mark.asyncio
async def test_empty_input():
    fetch = AsyncMock()
    assert await PositionFetcher(fetch).fetch_many([]) == {}
    fetch.assert_not_awaited()


def test_rejects_zero_batch_size():
    with pytest.raises(ValueError):
        PositionFetcher(AsyncMock(), batch_size=0)
