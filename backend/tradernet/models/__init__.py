# Models module
from .schemas import (
    Position,
    LeaderboardEntry,
    TrackedTrader,
    TraderConnection,
    GraphNode,
    GraphLink,
    GraphData,
    PositionChange,
    NetworkSnapshot,
)

__all__ = [
    "Position",
    "LeaderboardEntry",
    "TrackedTrader",
    "TraderConnection",
    "GraphNode",
    "GraphLink",
    "GraphData",
    "PositionChange",
    "NetworkSnapshot",
]
