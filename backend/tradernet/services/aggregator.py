"""
Trader Aggregator.
Joins the ranked leaderboard with each wallet's position snapshot.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Sequence

from tradernet.models.schemas import LeaderboardEntry, Position, TrackedTrader


def build_tracked_trader(
    entry: LeaderboardEntry,
    positions: Iterable[Position],
) -> TrackedTrader:
    """Combine one leaderboard entry with its positions."""
    return TrackedTrader(
        proxy_wallet=entry.proxy_wallet,
        user_name=entry.user_name,
        rank=entry.rank,
        vol=entry.vol,
        pnl=entry.pnl,
        positions=tuple(positions),
        profile_image=entry.profile_image,
        x_username=entry.x_username,
        verified_badge=entry.verified_badge,
    )


def build_tracked_traders(
    entries: Sequence[LeaderboardEntry],
    positions_map: Mapping[str, List[Position]],
) -> List[TrackedTrader]:
    """
    One TrackedTrader per leaderboard entry, in leaderboard order.
    Traders without positions are kept (zero value, zero positions).
    """
    return [
        build_tracked_trader(entry, positions_map.get(entry.proxy_wallet, []))
        for entry in entries
    ]


def sort_by_total_value(traders: Iterable[TrackedTrader]) -> List[TrackedTrader]:
    """Most exposed traders first; equal values keep their incoming order."""
    return sorted(traders, key=lambda t: -t.total_value)


def has_any_positions(traders: Iterable[TrackedTrader]) -> bool:
    return any(t.positions for t in traders)


def summarize(traders: Sequence[TrackedTrader]) -> Dict[str, float]:
    """Cohort-level totals for logging and health output."""
    return {
        "traders": len(traders),
        "with_positions": sum(1 for t in traders if t.positions),
        "positions": sum(t.total_positions for t in traders),
        "total_value": round(sum(t.total_value for t in traders), 2),
    }
