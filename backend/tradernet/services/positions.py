"""
Position Normalizer.
Turns loosely-typed Data API position records into canonical Positions.

Field extraction is table-driven: FIELD_RULES lists, per canonical field,
the raw keys tried in order. The first key holding a truthy value wins,
so 0, "" and None fall through to the next candidate.
"""
from __future__ import annotations
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from tradernet.models.schemas import Outcome, Position

logger = logging.getLogger(__name__)


UNKNOWN_MARKET = "Unknown Market"

FIELD_RULES: Dict[str, Tuple[str, ...]] = {
    "condition_id": ("conditionId", "condition_id", "marketId"),
    "market_question": ("marketQuestion", "title", "question", "market"),
    "market_slug": ("marketSlug", "slug"),
    "outcome": ("outcome", "side"),
    "shares": ("shares", "size", "quantity", "amount"),
    "avg_price": ("avgPrice", "averagePrice", "price", "fillPrice"),
    "current_price": ("currentPrice", "curPrice", "price", "lastPrice"),
    "last_updated": ("lastUpdated", "updatedAt", "timestamp"),
}


def extract(record: Dict[str, Any], field: str, default: Any = None) -> Any:
    """Return the first truthy value among the candidate keys for `field`."""
    for key in FIELD_RULES[field]:
        value = record.get(key)
        if value:
            return value
    return default


def to_float(value: Any) -> float:
    """Coerce to float; anything unparseable or non-finite becomes 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def to_percent(price: float) -> float:
    """
    Normalize a price to the 0-100 scale.
    Anything above 1 is already a percentage; otherwise it is a fraction.
    """
    return price if price > 1 else price * 100


def parse_timestamp(value: Any, now: datetime) -> datetime:
    """Parse ISO-8601 strings or unix epochs (seconds or milliseconds)."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 1e12 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return now

    if isinstance(value, str) and value:
        text = value.strip()
        if text.isdigit():
            return parse_timestamp(int(text), now)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return now
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    return now


def calculate_pnl(
    outcome: Outcome,
    shares: float,
    avg_price: float,
    current_price: Optional[float],
) -> Tuple[Optional[float], Optional[float]]:
    """
    Profit/loss for a position, on whatever scale the prices are given in.

    YES: (current - avg) * shares
    NO:  (avg - current) * shares
    Percentage is pnl / cost basis * 100, undefined for a zero basis.
    """
    if not current_price or not avg_price or shares <= 0:
        return None, None

    if outcome == Outcome.YES:
        pnl = (current_price - avg_price) * shares
    else:
        pnl = (avg_price - current_price) * shares

    cost_basis = avg_price * shares
    pnl_percentage = pnl / cost_basis * 100 if cost_basis else None
    return pnl, pnl_percentage


def normalize_position(
    record: Dict[str, Any],
    now: Optional[datetime] = None,
) -> Optional[Position]:
    """
    Convert one raw record into a Position.
    Returns None when the record is noise: no market id, no shares,
    or an unresolved market label.
    """
    if not isinstance(record, dict):
        return None

    if now is None:
        now = datetime.now(timezone.utc)

    condition_id = str(extract(record, "condition_id", ""))
    market_question = str(extract(record, "market_question", UNKNOWN_MARKET))
    shares = to_float(extract(record, "shares", 0))

    if not condition_id or shares <= 0 or market_question == UNKNOWN_MARKET:
        return None

    outcome_raw = str(extract(record, "outcome", "YES")).upper()
    outcome = Outcome.YES if outcome_raw == "YES" else Outcome.NO

    avg_raw = max(to_float(extract(record, "avg_price", 0)), 0.0)
    current_raw = max(to_float(extract(record, "current_price", 0)), 0.0)

    # P&L uses the source prices, before percentage scaling.
    pnl, pnl_percentage = calculate_pnl(outcome, shares, avg_raw, current_raw or None)

    avg_price = to_percent(avg_raw)
    current_price = to_percent(current_raw) if current_raw else None

    slug = extract(record, "market_slug")

    return Position(
        condition_id=condition_id,
        market_question=market_question,
        market_slug=str(slug) if slug else None,
        outcome=outcome,
        shares=shares,
        avg_price=avg_price,
        current_price=current_price,
        pnl=pnl,
        pnl_percentage=pnl_percentage,
        last_updated=parse_timestamp(extract(record, "last_updated"), now),
    )


def unwrap_payload(payload: Any) -> List[Any]:
    """Positions arrive either as a bare list or inside a positions/data envelope."""
    if isinstance(payload, (list, tuple)):
        return list(payload)
    if isinstance(payload, dict):
        inner = payload.get("positions") or payload.get("data") or []
        return inner if isinstance(inner, list) else []
    return []


def normalize_positions(
    payload: Union[List[Any], Dict[str, Any], None],
    now: Optional[datetime] = None,
) -> List[Position]:
    """Normalize a whole payload, keeping valid positions in input order."""
    if now is None:
        now = datetime.now(timezone.utc)

    records = unwrap_payload(payload)

    positions = []
    for record in records:
        position = normalize_position(record, now)
        if position is not None:
            positions.append(position)

    dropped = len(records) - len(positions)
    if dropped:
        logger.debug("Dropped %d of %d position records", dropped, len(records))

    return positions
