"""
Graph Builder.
Projects traders and their connections into a bounded node/link structure
for force-directed rendering.
"""
from __future__ import annotations
from typing import Sequence

from tradernet.core.config import settings
from tradernet.models.schemas import (
    GraphData, GraphLink, GraphNode, TrackedTrader, TraderConnection
)


def node_label(trader: TrackedTrader) -> str:
    return trader.user_name or f"{trader.proxy_wallet[:8]}..."


def build_graph_data(
    traders: Sequence[TrackedTrader],
    connections: Sequence[TraderConnection],
    top_connections: int = None,
) -> GraphData:
    """
    Every trader becomes a node, connected or not.
    Links are the first `top_connections` entries of the (already sorted)
    connection list: a global cap, not per node.
    """
    if top_connections is None:
        top_connections = settings.top_connections
    if top_connections < 0:
        raise ValueError(f"top_connections must be >= 0, got {top_connections}")

    nodes = tuple(
        GraphNode(
            id=trader.proxy_wallet,
            label=node_label(trader),
            proxy_wallet=trader.proxy_wallet,
            user_name=trader.user_name,
            volume=trader.vol,
            pnl=trader.pnl,
            positions=trader.total_positions,
            rank=trader.rank,
            verified_badge=trader.verified_badge,
        )
        for trader in traders
    )

    links = tuple(
        GraphLink(
            source=connection.trader1,
            target=connection.trader2,
            similarity=connection.similarity,
            common_markets_count=connection.common_markets_count,
        )
        for connection in connections[:top_connections]
    )

    return GraphData(nodes=nodes, links=links)
