"""
Similarity Engine.
Scores every pair of tracked traders by Jaccard similarity of the markets
they hold positions in.

Jaccard(A, B) = |A ∩ B| / |A ∪ B|

The pairwise pass is O(n²) in the number of traders, which is bounded by the
leaderboard limit (tens of wallets).
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Sequence

from tradernet.core.config import settings
from tradernet.models.schemas import TrackedTrader, TraderConnection

logger = logging.getLogger(__name__)


def jaccard_similarity(trader1: TrackedTrader, trader2: TrackedTrader) -> float:
    markets1 = trader1.market_ids
    markets2 = trader2.market_ids

    union = markets1 | markets2
    if not union:
        return 0.0
    return len(markets1 & markets2) / len(union)


def common_markets(trader1: TrackedTrader, trader2: TrackedTrader) -> List[str]:
    """Markets both traders hold, in the order they first appear for trader1."""
    markets2 = trader2.market_ids
    seen = set()
    shared = []
    for position in trader1.positions:
        market = position.condition_id
        if market in markets2 and market not in seen:
            seen.add(market)
            shared.append(market)
    return shared


def calculate_trader_connections(
    traders: Sequence[TrackedTrader],
    min_similarity: float = None,
) -> List[TraderConnection]:
    """
    Build every qualifying connection between distinct traders.

    Pairs where either side has no positions are skipped, not scored.
    Result is sorted by similarity (highest first); ties keep pair order.
    """
    if min_similarity is None:
        min_similarity = settings.min_similarity
    if not 0.0 <= min_similarity <= 1.0:
        raise ValueError(f"min_similarity must be within [0, 1], got {min_similarity}")

    connections: List[TraderConnection] = []

    for i in range(len(traders)):
        trader1 = traders[i]
        if not trader1.positions:
            continue

        for j in range(i + 1, len(traders)):
            trader2 = traders[j]
            if not trader2.positions or trader2.proxy_wallet == trader1.proxy_wallet:
                continue

            similarity = jaccard_similarity(trader1, trader2)
            if similarity < min_similarity:
                continue

            connections.append(TraderConnection(
                trader1=trader1.proxy_wallet,
                trader2=trader2.proxy_wallet,
                similarity=similarity,
                common_markets=tuple(common_markets(trader1, trader2)),
            ))

    connections.sort(key=lambda c: -c.similarity)

    logger.debug(
        "Scored %d traders: %d connections at >= %.2f",
        len(traders), len(connections), min_similarity,
    )
    return connections


def connections_for_trader(
    connections: Sequence[TraderConnection],
    wallet: str,
    limit: int = 10,
) -> List[Dict[str, Any]]:
    """Strongest connections touching `wallet`, each tagged with the other trader."""
    touching = [c for c in connections if wallet in (c.trader1, c.trader2)]
    touching.sort(key=lambda c: -c.similarity)

    result = []
    for connection in touching[:max(limit, 0)]:
        item = connection.to_dict()
        item["otherTrader"] = connection.other(wallet)
        result.append(item)
    return result
