"""
Position change detection between two snapshots of the same trader.
"""
from __future__ import annotations
from typing import Dict, List, Sequence, Tuple

from tradernet.models.schemas import ChangeType, Outcome, Position, PositionChange, TrackedTrader


PositionKey = Tuple[str, Outcome]


def _index(positions: Sequence[Position]) -> Dict[PositionKey, Position]:
    # Later duplicates of the same market/outcome win.
    return {(p.condition_id, p.outcome): p for p in positions}


def _change(
    position: Position,
    change_type: ChangeType,
    new_shares: float,
    old_shares: float = None,
) -> PositionChange:
    return PositionChange(
        condition_id=position.condition_id,
        market_question=position.market_question,
        outcome=position.outcome,
        change_type=change_type,
        old_shares=old_shares,
        new_shares=new_shares,
        price=position.mark_price,
        timestamp=position.last_updated,
    )


def diff_positions(
    previous: Sequence[Position],
    current: Sequence[Position],
) -> List[PositionChange]:
    """
    Compare two snapshots keyed by (market, outcome).

    Opened/increased/decreased come first in current order, followed by
    closed positions in previous order. Unchanged positions are omitted.
    """
    before = _index(previous)
    after = _index(current)

    changes: List[PositionChange] = []

    for key, position in after.items():
        old = before.get(key)
        if old is None:
            changes.append(_change(position, ChangeType.OPENED, position.shares))
        elif position.shares > old.shares:
            changes.append(_change(position, ChangeType.INCREASED, position.shares, old.shares))
        elif position.shares < old.shares:
            changes.append(_change(position, ChangeType.DECREASED, position.shares, old.shares))

    for key, position in before.items():
        if key not in after:
            changes.append(_change(position, ChangeType.CLOSED, 0.0, position.shares))

    return changes


def diff_traders(
    previous: Sequence[TrackedTrader],
    current: Sequence[TrackedTrader],
) -> Dict[str, Tuple[PositionChange, ...]]:
    """
    Per-wallet changes between two cycles.
    Wallets new to the cohort have no baseline and are left out, as are
    wallets whose book did not move.
    """
    baseline = {t.proxy_wallet: t.positions for t in previous}

    changes: Dict[str, Tuple[PositionChange, ...]] = {}
    for trader in current:
        if trader.proxy_wallet not in baseline:
            continue
        diff = diff_positions(baseline[trader.proxy_wallet], trader.positions)
        if diff:
            changes[trader.proxy_wallet] = tuple(diff)
    return changes
