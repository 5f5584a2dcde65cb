"""
Pydantic models and dataclasses for the Trader Network.
Dataclasses carry the in-process pipeline; pydantic models shape the API.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple
from pydantic import BaseModel, Field


class Outcome(str, Enum):
    """Side of a binary position."""
    YES = "YES"  # favorable
    NO = "NO"    # unfavorable


class ChangeType(str, Enum):
    """Kind of movement between two position snapshots."""
    OPENED = "OPENED"
    CLOSED = "CLOSED"
    INCREASED = "INCREASED"
    DECREASED = "DECREASED"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# ============================================================================
# Core Pipeline Records
# ============================================================================

@dataclass(frozen=True)
class Position:
    """
    One open stake a trader holds in one market outcome.
    Prices are on a 0-100 percentage scale; pnl is in the source price units.
    """
    condition_id: str
    market_question: str
    outcome: Outcome
    shares: float
    avg_price: float
    last_updated: datetime
    market_slug: Optional[str] = None
    current_price: Optional[float] = None
    pnl: Optional[float] = None
    pnl_percentage: Optional[float] = None

    @property
    def mark_price(self) -> float:
        """Best available price: current if known, else average entry."""
        return self.current_price if self.current_price is not None else self.avg_price

    @property
    def value(self) -> float:
        return self.shares * self.mark_price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conditionId": self.condition_id,
            "marketQuestion": self.market_question,
            "marketSlug": self.market_slug,
            "outcome": self.outcome.value,
            "shares": self.shares,
            "avgPrice": self.avg_price,
            "currentPrice": self.current_price,
            "pnl": self.pnl,
            "pnlPercentage": self.pnl_percentage,
            "lastUpdated": _iso(self.last_updated),
        }


@dataclass(frozen=True)
class LeaderboardEntry:
    """A ranked trader as returned by the leaderboard."""
    proxy_wallet: str
    user_name: Optional[str] = None
    rank: Optional[int] = None
    vol: float = 0.0
    pnl: float = 0.0
    profile_image: Optional[str] = None
    x_username: Optional[str] = None
    verified_badge: bool = False


@dataclass(frozen=True)
class TrackedTrader:
    """
    A ranked trader plus their current position snapshot.
    Summary statistics are derived from `positions` on every access.
    """
    proxy_wallet: str
    user_name: Optional[str] = None
    rank: Optional[int] = None
    vol: float = 0.0
    pnl: float = 0.0
    positions: Tuple[Position, ...] = ()
    profile_image: Optional[str] = None
    x_username: Optional[str] = None
    verified_badge: bool = False

    @property
    def total_positions(self) -> int:
        return len(self.positions)

    @property
    def total_value(self) -> float:
        return sum(p.value for p in self.positions)

    @property
    def last_activity(self) -> Optional[datetime]:
        if not self.positions:
            return None
        return max(p.last_updated for p in self.positions)

    @property
    def market_ids(self) -> frozenset:
        return frozenset(p.condition_id for p in self.positions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proxyWallet": self.proxy_wallet,
            "userName": self.user_name,
            "profileImage": self.profile_image,
            "xUsername": self.x_username,
            "verifiedBadge": self.verified_badge,
            "rank": self.rank,
            "vol": self.vol,
            "pnl": self.pnl,
            "positions": [p.to_dict() for p in self.positions],
            "totalPositions": self.total_positions,
            "totalValue": self.total_value,
            "lastActivity": _iso(self.last_activity),
        }


@dataclass(frozen=True)
class TraderConnection:
    """Scored relationship between two distinct traders (trader1 precedes trader2)."""
    trader1: str
    trader2: str
    similarity: float
    common_markets: Tuple[str, ...] = ()

    @property
    def common_markets_count(self) -> int:
        return len(self.common_markets)

    def other(self, wallet: str) -> str:
        """Return the counterpart of `wallet` in this pair."""
        return self.trader2 if wallet == self.trader1 else self.trader1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trader1": self.trader1,
            "trader2": self.trader2,
            "similarity": self.similarity,
            "commonMarkets": list(self.common_markets),
            "commonMarketsCount": self.common_markets_count,
        }


@dataclass(frozen=True)
class GraphNode:
    id: str
    label: str
    proxy_wallet: str
    user_name: Optional[str]
    volume: float
    pnl: float
    positions: int
    rank: Optional[int] = None
    verified_badge: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "proxyWallet": self.proxy_wallet,
            "userName": self.user_name,
            "volume": self.volume,
            "pnl": self.pnl,
            "positions": self.positions,
            "rank": self.rank,
            "verifiedBadge": self.verified_badge,
        }


@dataclass(frozen=True)
class GraphLink:
    source: str
    target: str
    similarity: float
    common_markets_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "similarity": self.similarity,
            "commonMarketsCount": self.common_markets_count,
        }


@dataclass(frozen=True)
class GraphData:
    """Render-ready projection: every trader as a node, top-K connections as links."""
    nodes: Tuple[GraphNode, ...] = ()
    links: Tuple[GraphLink, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }


@dataclass(frozen=True)
class PositionChange:
    """A single movement in a trader's book between two snapshots."""
    condition_id: str
    market_question: str
    change_type: ChangeType
    new_shares: float
    price: float
    timestamp: datetime
    outcome: Outcome = Outcome.YES
    old_shares: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conditionId": self.condition_id,
            "marketQuestion": self.market_question,
            "outcome": self.outcome.value,
            "changeType": self.change_type.value,
            "oldShares": self.old_shares,
            "newShares": self.new_shares,
            "price": self.price,
            "timestamp": _iso(self.timestamp),
        }


@dataclass(frozen=True)
class NetworkSnapshot:
    """
    Everything one refresh cycle produced.
    `changes` holds per-wallet movements since `previous_cycle_at`, for
    wallets present in both cycles.
    """
    traders: Tuple[TrackedTrader, ...]
    connections: Tuple[TraderConnection, ...]
    graph: GraphData
    cycle_at: datetime
    changes: Dict[str, Tuple[PositionChange, ...]] = field(default_factory=dict)
    previous_cycle_at: Optional[datetime] = None


# ============================================================================
# API Schemas
# ============================================================================

class PositionSchema(BaseModel):
    """API view of a single trader position."""
    conditionId: str
    marketQuestion: str
    marketSlug: Optional[str] = None
    outcome: Outcome
    shares: float = Field(gt=0)
    avgPrice: float = Field(ge=0, description="Average entry price, 0-100 scale")
    currentPrice: Optional[float] = Field(default=None, description="Current price, 0-100 scale")
    pnl: Optional[float] = None
    pnlPercentage: Optional[float] = None
    lastUpdated: str


class TrackedTraderSchema(BaseModel):
    """API view of a tracked trader with derived stats."""
    proxyWallet: str
    userName: Optional[str] = None
    profileImage: Optional[str] = None
    xUsername: Optional[str] = None
    verifiedBadge: bool = False
    rank: Optional[int] = None
    vol: float = 0.0
    pnl: float = 0.0
    positions: List[PositionSchema] = []
    totalPositions: int = Field(ge=0)
    totalValue: float = Field(ge=0)
    lastActivity: Optional[str] = None


class CopyTradingResponse(BaseModel):
    """Response for the tracked-traders endpoint."""
    traders: List[TrackedTraderSchema]
    total: int = Field(ge=0)
    lastUpdated: str


class TraderConnectionSchema(BaseModel):
    trader1: str
    trader2: str
    similarity: float = Field(ge=0, le=1)
    commonMarkets: List[str] = []
    commonMarketsCount: int = Field(ge=0)


class GraphNodeSchema(BaseModel):
    id: str
    label: str
    proxyWallet: str
    userName: Optional[str] = None
    volume: float
    pnl: float
    positions: int = Field(ge=0)
    rank: Optional[int] = None
    verifiedBadge: bool = False


class GraphLinkSchema(BaseModel):
    source: str
    target: str
    similarity: float = Field(ge=0, le=1)
    commonMarketsCount: int = Field(ge=0)


class GraphSchema(BaseModel):
    nodes: List[GraphNodeSchema]
    links: List[GraphLinkSchema]


class NetworkResponse(BaseModel):
    """Response for the similarity network endpoint."""
    graph: GraphSchema
    connections: List[TraderConnectionSchema]
    totalConnections: int = Field(ge=0)
    lastUpdated: str


class TraderConnectionsResponse(BaseModel):
    """Strongest connections touching a single trader."""
    proxyWallet: str
    connections: List[Dict[str, Any]]
    lastUpdated: str


class PositionChangeSchema(BaseModel):
    conditionId: str
    marketQuestion: str
    outcome: Outcome
    changeType: ChangeType
    oldShares: Optional[float] = None
    newShares: float = Field(ge=0)
    price: float = Field(ge=0)
    timestamp: str


class TraderChangesResponse(BaseModel):
    """Position movements for one trader between the last two cycles."""
    proxyWallet: str
    changes: List[PositionChangeSchema]
    since: Optional[str] = None
    lastUpdated: str
