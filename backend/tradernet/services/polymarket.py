"""
Polymarket Data API Client.
Handles fetching the trader leaderboard and per-wallet positions.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Optional, Dict, List, Any, Union
import httpx
from cachetools import TTLCache

from tradernet.core.config import settings
from tradernet.models.schemas import LeaderboardEntry, Position
from tradernet.services.positions import normalize_positions, to_float

logger = logging.getLogger(__name__)


LEADERBOARD_CATEGORIES = (
    "OVERALL", "POLITICS", "SPORTS", "CRYPTO", "CULTURE",
    "MENTIONS", "WEATHER", "ECONOMICS", "TECH", "FINANCE",
)
LEADERBOARD_TIME_PERIODS = ("DAY", "WEEK", "MONTH", "ALL")
LEADERBOARD_ORDER_BY = ("PNL", "VOL")


def _first(entry: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = entry.get(key)
        if value:
            return value
    return None


def parse_leaderboard_entry(entry: Any) -> Optional[LeaderboardEntry]:
    """Map one raw leaderboard row; rows without a wallet are dropped."""
    if not isinstance(entry, dict):
        return None

    wallet = _first(entry, "proxyWallet", "proxy_wallet")
    if not wallet:
        return None

    try:
        rank = int(entry.get("rank") or 0)
    except (TypeError, ValueError):
        rank = 0

    return LeaderboardEntry(
        proxy_wallet=str(wallet),
        user_name=_first(entry, "userName", "user_name"),
        rank=rank or None,
        vol=to_float(_first(entry, "vol", "volume")),
        pnl=to_float(_first(entry, "pnl", "profit_loss")),
        profile_image=_first(entry, "profileImage", "profile_image"),
        x_username=_first(entry, "xUsername", "x_username", "twitter_username"),
        verified_badge=bool(_first(entry, "verifiedBadge", "verified_badge")),
    )


class DataAPIClient:
    """
    Async client for the Polymarket Data API.
    Implements concurrency limiting and leaderboard caching.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.data_api_base_url).rstrip("/")
        self._transport = transport
        self._semaphore = asyncio.Semaphore(settings.max_concurrent_requests)

        self._leaderboard_cache: TTLCache = TTLCache(
            maxsize=100,
            ttl=settings.leaderboard_cache_ttl
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=settings.request_timeout_seconds,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    async def _get(
        self,
        endpoint: str,
        params: Optional[dict] = None
    ) -> Union[Dict[str, Any], List[Any], None]:
        """Rate-limited GET. Raises on HTTP and transport errors."""
        async with self._semaphore:
            async with self._client() as client:
                response = await client.get(f"{self.base_url}{endpoint}", params=params)
                response.raise_for_status()
                return response.json()

    async def fetch_leaderboard(
        self,
        category: str = "OVERALL",
        time_period: str = "MONTH",
        order_by: str = "PNL",
        limit: int = 50,
        offset: int = 0,
        use_cache: bool = True,
    ) -> List[LeaderboardEntry]:
        """
        Fetch ranked traders.
        Results are cached for leaderboard_cache_ttl seconds; `use_cache=False`
        skips the lookup but still stores the fresh result. Any failure
        yields an empty list.
        """
        cache_key = f"leaderboard_{category}_{time_period}_{order_by}_{limit}_{offset}"

        if use_cache and cache_key in self._leaderboard_cache:
            return self._leaderboard_cache[cache_key]

        params = {
            "category": category,
            "timePeriod": time_period,
            "orderBy": order_by,
            "limit": str(limit),
            "offset": str(offset),
        }

        try:
            data = await self._get("/leaderboard", params)
        except httpx.HTTPStatusError as e:
            logger.error("Leaderboard HTTP error %s: %s", e.response.status_code, e)
            return []
        except httpx.RequestError as e:
            logger.error("Leaderboard request error: %s", e)
            return []
        except ValueError as e:
            logger.error("Leaderboard returned invalid JSON: %s", e)
            return []

        if not isinstance(data, list):
            logger.error("Invalid leaderboard response format: %r", type(data).__name__)
            return []

        entries = [e for e in (parse_leaderboard_entry(row) for row in data) if e]
        self._leaderboard_cache[cache_key] = entries
        return entries

    async def fetch_raw_positions(self, wallet_address: str) -> Union[Dict[str, Any], List[Any], None]:
        """Fetch the raw positions payload for a wallet."""
        logger.debug("Fetching positions for %s...", wallet_address[:8])
        return await self._get("/positions", params={"user": wallet_address})

    async def fetch_positions(self, wallet_address: str) -> List[Position]:
        """
        Fetch and normalize all open positions for a wallet.
        Errors propagate so the caller decides how to degrade.
        """
        payload = await self.fetch_raw_positions(wallet_address)
        positions = normalize_positions(payload)
        logger.debug("Found %d positions for %s...", len(positions), wallet_address[:8])
        return positions


# Global client instance
data_client = DataAPIClient()
