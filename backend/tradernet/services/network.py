"""
Network Service.
Runs one refresh cycle: leaderboard -> positions -> traders -> connections -> graph.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Optional

from tradernet.core.config import settings
from tradernet.models.schemas import NetworkSnapshot
from tradernet.services.aggregator import build_tracked_traders, has_any_positions, summarize
from tradernet.services.cache import NetworkSnapshotCache
from tradernet.services.changes import diff_traders
from tradernet.services.fetcher import PositionFetcher
from tradernet.services.graph import build_graph_data
from tradernet.services.polymarket import DataAPIClient, data_client
from tradernet.services.similarity import calculate_trader_connections

logger = logging.getLogger(__name__)


class NetworkService:
    """
    Builds trader network snapshots on demand.
    The snapshot cache is injected; the service itself keeps no results.
    """

    def __init__(
        self,
        client: DataAPIClient,
        cache: Optional[NetworkSnapshotCache] = None,
        batch_size: Optional[int] = None,
        wallet_timeout: Optional[float] = None,
    ):
        self.client = client
        self.cache = cache
        self.fetcher = PositionFetcher(
            client.fetch_positions,
            batch_size=batch_size,
            timeout=wallet_timeout,
        )

    async def build_snapshot(
        self,
        limit: int = None,
        category: str = "OVERALL",
        time_period: str = "MONTH",
        min_similarity: float = None,
        top_connections: int = None,
        refresh: bool = False,
    ) -> NetworkSnapshot:
        """
        Return the network for the given parameters, reusing a cached
        snapshot unless `refresh` is set.
        """
        limit = limit or settings.leaderboard_limit
        if min_similarity is None:
            min_similarity = settings.min_similarity
        if top_connections is None:
            top_connections = settings.top_connections

        cache_key = (limit, category, time_period, min_similarity, top_connections)

        if self.cache is not None and not refresh:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        cycle_at = datetime.now(timezone.utc)

        logger.info("Fetching top %d traders (%s/%s)", limit, category, time_period)
        entries = await self.client.fetch_leaderboard(
            category=category,
            time_period=time_period,
            order_by="PNL",
            limit=limit,
            use_cache=not refresh,
        )

        positions_map = await self.fetcher.fetch_many(e.proxy_wallet for e in entries)
        traders = build_tracked_traders(entries, positions_map)
        connections = calculate_trader_connections(traders, min_similarity)
        graph = build_graph_data(traders, connections, top_connections)

        if entries and not has_any_positions(traders):
            logger.warning("Network cycle found no open positions for %d traders", len(traders))

        previous = self.cache.latest(cache_key) if self.cache is not None else None

        snapshot = NetworkSnapshot(
            traders=tuple(traders),
            connections=tuple(connections),
            graph=graph,
            cycle_at=cycle_at,
            changes=diff_traders(previous.traders, traders) if previous is not None else {},
            previous_cycle_at=previous.cycle_at if previous is not None else None,
        )

        logger.info(
            "Network cycle complete: %s, %d connections, %d links",
            summarize(traders), len(connections), len(graph.links),
        )

        if self.cache is not None:
            self.cache.put(cache_key, snapshot)

        return snapshot


# Global service instance
network_service = NetworkService(
    data_client,
    cache=NetworkSnapshotCache(ttl=settings.network_cache_ttl),
)
