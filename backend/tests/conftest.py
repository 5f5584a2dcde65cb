"""Shared fixtures for the trader network tests."""
from datetime import datetime, timezone

import pytest

from tradernet.models.schemas import Outcome, Position, TrackedTrader


NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_position(condition_id, shares=10.0, avg_price=50.0, current_price=None,
                  outcome=Outcome.YES, last_updated=NOW, question=None):
    return Position(
        condition_id=condition_id,
        market_question=question or f"Market {condition_id}?",
        outcome=outcome,
        shares=shares,
        avg_price=avg_price,
        current_price=current_price,
        last_updated=last_updated,
    )


def make_trader(wallet, markets=(), **kwargs):
    positions = tuple(make_position(m) for m in markets)
    return TrackedTrader(proxy_wallet=wallet, positions=positions, **kwargs)


@pytest.fixture
def now():
    return NOW
