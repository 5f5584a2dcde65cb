"""
FastAPI Entrypoint for the Trader Network.
Exposes tracked traders and their position-similarity network.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from tradernet.core.config import settings
from tradernet.models.schemas import (
    CopyTradingResponse,
    NetworkResponse,
    TraderChangesResponse,
    TraderConnectionsResponse,
)
from tradernet.services.aggregator import sort_by_total_value
from tradernet.services.network import network_service
from tradernet.services.polymarket import LEADERBOARD_CATEGORIES, LEADERBOARD_TIME_PERIODS
from tradernet.services.similarity import connections_for_trader

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(
        "Trader Network starting (batch size %d, threshold %.2f, link cap %d)",
        settings.fetch_batch_size, settings.min_similarity, settings.top_connections,
    )
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="Trader Network API",
    description="Top-trader position tracking and similarity network for copy trading",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _validate_leaderboard_params(category: str, time_period: str) -> None:
    if category not in LEADERBOARD_CATEGORIES:
        raise HTTPException(status_code=422, detail=f"Unknown category: {category}")
    if time_period not in LEADERBOARD_TIME_PERIODS:
        raise HTTPException(status_code=422, detail=f"Unknown time period: {time_period}")


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "online",
        "service": "Trader Network",
        "version": "1.0.0",
    }


@app.get("/api/v1/copy-trading", response_model=CopyTradingResponse)
async def get_tracked_traders(
    limit: int = Query(default=10, ge=1, le=50, description="Number of top traders"),
    category: str = Query(default="OVERALL", description="Leaderboard category"),
    time_period: str = Query(default="MONTH", description="DAY, WEEK, MONTH, or ALL"),
    refresh: bool = Query(default=False, description="Bypass the snapshot cache"),
):
    """
    Get top traders with their current positions.

    Traders are sorted by total position value (most exposed first).
    """
    _validate_leaderboard_params(category, time_period)

    try:
        snapshot = await network_service.build_snapshot(
            limit=limit,
            category=category,
            time_period=time_period,
            refresh=refresh,
        )
    except Exception as e:
        logger.exception("Copy trading cycle failed")
        raise HTTPException(status_code=500, detail=str(e))

    traders = sort_by_total_value(snapshot.traders)
    return {
        "traders": [t.to_dict() for t in traders],
        "total": len(traders),
        "lastUpdated": snapshot.cycle_at.isoformat(),
    }


@app.get("/api/v1/copy-trading/network", response_model=NetworkResponse)
async def get_trader_network(
    limit: int = Query(default=10, ge=1, le=50, description="Number of top traders"),
    category: str = Query(default="OVERALL", description="Leaderboard category"),
    time_period: str = Query(default="MONTH", description="DAY, WEEK, MONTH, or ALL"),
    min_similarity: float = Query(default=0.1, ge=0.0, le=1.0, description="Minimum Jaccard similarity"),
    top_connections: int = Query(default=100, ge=0, description="Maximum links in the graph"),
    refresh: bool = Query(default=False, description="Bypass the snapshot cache"),
):
    """
    Get the trader similarity network.

    Nodes are all tracked traders; links are the strongest connections
    network-wide, capped at `top_connections`.
    """
    _validate_leaderboard_params(category, time_period)

    try:
        snapshot = await network_service.build_snapshot(
            limit=limit,
            category=category,
            time_period=time_period,
            min_similarity=min_similarity,
            top_connections=top_connections,
            refresh=refresh,
        )
    except Exception as e:
        logger.exception("Network cycle failed")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "graph": snapshot.graph.to_dict(),
        "connections": [c.to_dict() for c in snapshot.connections[:top_connections]],
        "totalConnections": len(snapshot.connections),
        "lastUpdated": snapshot.cycle_at.isoformat(),
    }


@app.get(
    "/api/v1/copy-trading/traders/{wallet}/connections",
    response_model=TraderConnectionsResponse,
)
async def get_trader_connections(
    wallet: str,
    limit: int = Query(default=10, ge=1, le=50, description="Number of top traders"),
    category: str = Query(default="OVERALL", description="Leaderboard category"),
    time_period: str = Query(default="MONTH", description="DAY, WEEK, MONTH, or ALL"),
    min_similarity: float = Query(default=0.1, ge=0.0, le=1.0, description="Minimum Jaccard similarity"),
    top: int = Query(default=10, ge=1, le=100, description="Connections to return"),
):
    """Get the strongest connections for one trader."""
    _validate_leaderboard_params(category, time_period)

    try:
        snapshot = await network_service.build_snapshot(
            limit=limit,
            category=category,
            time_period=time_period,
            min_similarity=min_similarity,
        )
    except Exception as e:
        logger.exception("Network cycle failed")
        raise HTTPException(status_code=500, detail=str(e))

    if not any(t.proxy_wallet == wallet for t in snapshot.traders):
        raise HTTPException(status_code=404, detail=f"Trader {wallet} is not tracked")

    return {
        "proxyWallet": wallet,
        "connections": connections_for_trader(snapshot.connections, wallet, limit=top),
        "lastUpdated": snapshot.cycle_at.isoformat(),
    }


@app.get(
    "/api/v1/copy-trading/traders/{wallet}/changes",
    response_model=TraderChangesResponse,
)
async def get_trader_changes(
    wallet: str,
    limit: int = Query(default=10, ge=1, le=50, description="Number of top traders"),
    category: str = Query(default="OVERALL", description="Leaderboard category"),
    time_period: str = Query(default="MONTH", description="DAY, WEEK, MONTH, or ALL"),
    refresh: bool = Query(default=False, description="Bypass the snapshot cache"),
):
    """
    Get what one trader opened, closed, increased or decreased since the
    previous refresh cycle. Empty until two cycles have run.
    """
    _validate_leaderboard_params(category, time_period)

    try:
        snapshot = await network_service.build_snapshot(
            limit=limit,
            category=category,
            time_period=time_period,
            refresh=refresh,
        )
    except Exception as e:
        logger.exception("Copy trading cycle failed")
        raise HTTPException(status_code=500, detail=str(e))

    if not any(t.proxy_wallet == wallet for t in snapshot.traders):
        raise HTTPException(status_code=404, detail=f"Trader {wallet} is not tracked")

    since = snapshot.previous_cycle_at
    return {
        "proxyWallet": wallet,
        "changes": [c.to_dict() for c in snapshot.changes.get(wallet, ())],
        "since": since.isoformat() if since is not None else None,
        "lastUpdated": snapshot.cycle_at.isoformat(),
    }


@app.get("/api/v1/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "cached_snapshots": len(network_service.cache) if network_service.cache else 0,
        "fetch_batch_size": settings.fetch_batch_size,
        "checked_at": datetime.now(timezone.utc).isoformat(),
    }
