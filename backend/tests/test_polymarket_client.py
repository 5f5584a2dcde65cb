"""
Data API Client Tests

Uses httpx.MockTransport so no network access is needed.
"""

import pytest
import httpx

from tradernet.services.polymarket import DataAPIClient, parse_leaderboard_entry


BASE_URL = "https://data-api.test/v1"

LEADERBOARD = [
    {"rank": "1", "proxyWallet": "0xaaa", "userName": "alpha", "vol": 12000.5, "pnl": "3400",
     "verifiedBadge": True},
    {"rank": "2", "proxy_wallet": "0xbbb", "user_name": "beta", "volume": "800", "profit_loss": -20},
    {"rank": "3", "userName": "ghost"},
]

POSITIONS = [
    {"conditionId": "m1", "title": "Rain?", "outcome": "Yes", "size": 10, "avgPrice": 0.4,
     "curPrice": 0.5},
    {"conditionId": "m2", "title": "Unknown Market", "size": 10},
]


def _client(handler):
    return DataAPIClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


# =============================================================================
# Leaderboard
# =============================================================================


class TestLeaderboard:

    @pytest.mark.asyncio
    async def test_parses_entries_and_drops_walletless_rows(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=LEADERBOARD)

        entries = await _client(handler).fetch_leaderboard(limit=3)

        assert seen["path"] == "/v1/leaderboard"
        assert seen["params"]["limit"] == "3"
        assert seen["params"]["orderBy"] == "PNL"
        assert [e.proxy_wallet for e in entries] == ["0xaaa", "0xbbb"]
        assert entries[0].rank == 1
        assert entries[0].vol == 12000.5
        assert entries[0].pnl == 3400
        assert entries[0].verified_badge is True
        assert entries[1].user_name == "beta"
        assert entries[1].vol == 800
        assert entries[1].pnl == -20
        assert entries[1].verified_badge is False

    @pytest.mark.asyncio
    async def test_cached(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=LEADERBOARD)

        client = _client(handler)
        await client.fetch_leaderboard(limit=3)
        await client.fetch_leaderboard(limit=3)

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_bypassing_cache_refetches(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=LEADERBOARD)

        client = _client(handler)
        await client.fetch_leaderboard(limit=3)
        await client.fetch_leaderboard(limit=3, use_cache=False)
        await client.fetch_leaderboard(limit=3)

        assert len(calls) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(500, text="boom"),
        httpx.Response(200, json={"error": "not a list"}),
        httpx.Response(200, text="<html>"),
    ])
    async def test_failures_yield_empty(self, response):
        entries = await _client(lambda request: response).fetch_leaderboard()
        assert entries == []

    @pytest.mark.asyncio
    async def test_transport_error_yields_empty(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        assert await _client(handler).fetch_leaderboard() == []

    def test_parse_entry_rejects_non_dict(self):
        assert parse_leaderboard_entry(None) is None
        assert parse_leaderboard_entry({"rank": 1}) is None

    def test_parse_entry_bad_rank(self):
        entry = parse_leaderboard_entry({"proxyWallet": "0xa", "rank": "first"})
        assert entry.rank is None


# =============================================================================
# Positions
# =============================================================================


class TestPositions:

    @pytest.mark.asyncio
    async def test_fetch_positions_normalizes(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["user"] = request.url.params.get("user")
            return httpx.Response(200, json=POSITIONS)

        positions = await _client(handler).fetch_positions("0xAbC")

        assert seen == {"path": "/v1/positions", "user": "0xAbC"}
        assert len(positions) == 1
        assert positions[0].condition_id == "m1"
        assert positions[0].avg_price == pytest.approx(40.0)

    @pytest.mark.asyncio
    async def test_envelope_payload(self):
        handler = lambda request: httpx.Response(200, json={"positions": POSITIONS})
        positions = await _client(handler).fetch_positions("0xabc")
        assert [p.condition_id for p in positions] == ["m1"]

    @pytest.mark.asyncio
    async def test_http_error_propagates(self):
        handler = lambda request: httpx.Response(404, text="nope")
        with pytest.raises(httpx.HTTPStatusError):
            await _client(handler).fetch_positions("0xabc")
