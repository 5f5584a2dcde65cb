"""
Multi-Trader Position Fetcher.
Fans out one position retrieval per wallet and isolates per-wallet failures.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from tradernet.core.config import settings
from tradernet.models.schemas import Position

logger = logging.getLogger(__name__)


FetchPositions = Callable[[str], Awaitable[List[Position]]]


class PositionFetcher:
    """
    Retrieves positions for many wallets concurrently.

    At most `batch_size` retrievals are in flight at once, each bounded by
    `timeout` seconds. A wallet whose retrieval fails or times out maps to
    an empty list; the batch never aborts.
    """

    def __init__(
        self,
        fetch_positions: FetchPositions,
        batch_size: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self._fetch_positions = fetch_positions
        self.batch_size = settings.fetch_batch_size if batch_size is None else batch_size
        self.timeout = settings.wallet_fetch_timeout_seconds if timeout is None else timeout

        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    async def _fetch_one(
        self,
        wallet: str,
        semaphore: asyncio.Semaphore,
    ) -> Tuple[str, List[Position]]:
        async with semaphore:
            try:
                positions = await asyncio.wait_for(
                    self._fetch_positions(wallet), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Position fetch timed out for %s... after %.1fs",
                    wallet[:10], self.timeout,
                )
                return wallet, []
            except Exception as e:
                logger.warning("Position fetch failed for %s...: %s", wallet[:10], e)
                return wallet, []

        if not isinstance(positions, list):
            logger.warning("Malformed positions payload for %s...", wallet[:10])
            return wallet, []

        return wallet, positions

    async def fetch_many(self, wallets: Iterable[str]) -> Dict[str, List[Position]]:
        """
        Fetch positions for every wallet.
        The result holds exactly one entry per distinct input wallet.
        """
        unique_wallets = list(dict.fromkeys(wallets))
        if not unique_wallets:
            return {}

        semaphore = asyncio.Semaphore(self.batch_size)
        tasks = [self._fetch_one(wallet, semaphore) for wallet in unique_wallets]
        results = await asyncio.gather(*tasks)

        positions_map: Dict[str, List[Position]] = {}
        for wallet, positions in results:
            positions_map[wallet] = positions

        empty = sum(1 for positions in positions_map.values() if not positions)
        logger.info(
            "Fetched positions for %d wallets (%d empty)",
            len(positions_map), empty,
        )
        return positions_map

